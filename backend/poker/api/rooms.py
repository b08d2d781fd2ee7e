from flask import Blueprint, current_app, jsonify
from poker import directory
from poker.services.rooms import normalize_code, summarize_votes

rooms = Blueprint('rooms', __name__)


@rooms.route('/code', methods=['POST'])
def new_room_code():
    """Suggest a room code that is free right now.

    Nothing is reserved; createRoom over the socket still decides.
    """
    length = int(current_app.config.get('ROOM_CODE_LENGTH', 4))
    return jsonify({'roomCode': directory.generate_code(length)}), 201


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    code = normalize_code(room_code)
    room = directory.get(code) if code else None
    if room is None:
        return jsonify({'error': 'Room does not exist'}), 404
    with room.lock:
        if room.destroyed:
            return jsonify({'error': 'Room does not exist'}), 404
        state = room.snapshot()
    if state['revealed']:
        state['summary'] = summarize_votes(state['votes'])
    return jsonify(state), 200
