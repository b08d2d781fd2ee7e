from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from poker.services.rooms import ConnectionRegistry, RoomDirectory

socketio = SocketIO(async_mode=None)
# Process-wide in-memory state; nothing survives a restart
directory = RoomDirectory()
registry = ConnectionRegistry()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from poker.main import main
    flask_app.register_blueprint(main)

    from poker.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from poker.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
