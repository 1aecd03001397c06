from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the telephone game server!'})

@main.route('/health')
def health_check():
    return jsonify({
        'status': 'healthy',
        'rooms': len(current_app.extensions['telephone_rooms']),
    })
