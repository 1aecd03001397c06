from flask import Blueprint, current_app, jsonify

from telephone.errors import RoomNotFound


rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    registry = current_app.extensions['telephone_rooms']
    try:
        payload = registry.snapshot(room_id)
    except RoomNotFound:
        return jsonify({'error': RoomNotFound.code}), 404
    # Include timer settings so clients can show countdowns
    cfg = current_app.config
    payload['durations'] = {
        'draw_time_sec': payload['settings']['draw_time_sec'],
        'tick_interval_sec': float(cfg.get('TICK_INTERVAL_SEC', 1)),
    }
    return jsonify(payload)
