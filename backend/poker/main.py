from flask import Blueprint, jsonify
from poker import directory

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Planning poker server is running'})


@main.route('/healthz')
def healthz():
    return jsonify({'status': 'ok', 'rooms': len(directory)})
