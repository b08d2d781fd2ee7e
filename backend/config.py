import os


def _origins(value):
    if value.strip() == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins, or * for any
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '4'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '32'))
    MAX_CODE_LENGTH = int(os.environ.get('MAX_CODE_LENGTH', '16'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
