from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One room registry per application; handlers reach it via current_app
    from telephone.socketio_events import SocketIOTransport, NAMESPACE, register_socketio_handlers
    from telephone.services.games.rooms import RoomRegistry
    from telephone.services.games.timer import RoundTimer

    transport = SocketIOTransport(socketio, namespace=NAMESPACE)

    def make_round_timer(room):
        return RoundTimer(
            room.id,
            room.settings.draw_time_sec,
            send=transport.send,
            lock=room.lock,
            interval=float(flask_app.config.get('TICK_INTERVAL_SEC', 1)),
            sleep=socketio.sleep,
            spawn=socketio.start_background_task,
            logger=flask_app.logger,
        )

    timer_factory = make_round_timer if flask_app.config.get('ROUND_TIMER_ENABLED', True) else None
    flask_app.extensions['telephone_rooms'] = RoomRegistry(
        transport,
        timer_factory=timer_factory,
        default_rounds=int(flask_app.config.get('DEFAULT_ROUNDS', 3)),
        default_draw_time_sec=int(flask_app.config.get('DEFAULT_DRAW_TIME_SEC', 60)),
        code_length=int(flask_app.config.get('ROOM_CODE_LENGTH', 7)),
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from telephone.main import main
    flask_app.register_blueprint(main)

    from telephone.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Register Socket.IO event handlers
    register_socketio_handlers()

    return flask_app
