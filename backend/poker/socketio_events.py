from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from poker import directory, registry, socketio
from poker.models import Room
from poker.services.rooms import RoomAlreadyExists, normalize_code
from typing import Optional

ERR_REQUIRED = 'userName and roomCode are required'
ERR_NAME_TOO_LONG = 'userName is too long'
ERR_CODE_TOO_LONG = 'roomCode is too long'
ERR_ROOM_EXISTS = 'Room already exists'
ERR_NO_ROOM = 'Room does not exist'
ERR_ADMIN_NAME = 'Name already taken (admin)'
ERR_NOT_ALL_VOTED = 'Cannot reveal cards. Not all players have voted.'

_INVALID_VOTE = object()


def _group(code: str) -> str:
    return f"room:{code}"


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _namespace() -> str:
    return request.namespace  # type: ignore


def _error(message: str) -> None:
    emit('error', {'message': message})


def _broadcast(event: str, payload, code: str) -> None:
    socketio.emit(event, payload, to=_group(code), namespace=_namespace())


def _room_code(data) -> Optional[str]:
    """Room-scoped intents send either {'roomCode': ...} or the bare code."""
    if isinstance(data, dict):
        data = data.get('roomCode')
    return normalize_code(data)


def _identity(data):
    """Validate a create/join payload; returns (name, code, error_message)."""
    data = data if isinstance(data, dict) else {}
    name = data.get('userName')
    name = name.strip() if isinstance(name, str) else ''
    code = normalize_code(data.get('roomCode'))
    if not name or not code:
        return None, None, ERR_REQUIRED
    if len(name) > current_app.config.get('MAX_NAME_LENGTH', 32):
        return None, None, ERR_NAME_TOO_LONG
    if len(code) > current_app.config.get('MAX_CODE_LENGTH', 16):
        return None, None, ERR_CODE_TOO_LONG
    return name, code, None


def _coerce_vote(value):
    """Turn a client vote into the stored token.

    Strings are stripped and otherwise passed through unvalidated; a blank
    string clears the vote like None does. Ints and integral floats become
    their decimal string. Anything else is rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return _INVALID_VOTE
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return _INVALID_VOTE


def _bound_room(data) -> Optional[Room]:
    """Room the calling connection is bound to, if it matches the requested code."""
    code = _room_code(data)
    binding = registry.get(_get_sid())
    if code is None or binding is None or binding.room_code != code:
        return None
    return directory.get(code)


def _detach(room: Room, sid: str, reason: str, explicit: bool) -> None:
    """Remove *sid* from *room* and tear the room down if needed.

    Safe to call repeatedly for the same connection; only the first call
    finds anything to remove.
    """
    ns = _namespace()
    with room.lock:
        if room.destroyed:
            return
        result = room.remove_by_sid(sid)
        if not result.removed:
            return
        state = None
        remaining = []
        if result.was_admin or room.is_empty:
            room.destroyed = True
            directory.destroy(room.code, room)
            remaining = [p.sid for p in room.participants if p.sid]
        else:
            state = room.snapshot()

    registry.unbind(sid, room.code)
    if explicit:
        leave_room(_group(room.code), sid=sid, namespace=ns)
    current_app.logger.info(f"[leave] code={room.code} sid={sid} reason={reason} admin={result.was_admin}")

    if result.was_admin:
        for other in remaining:
            socketio.emit('adminLeft', {}, to=other, namespace=ns)
            leave_room(_group(room.code), sid=other, namespace=ns)
            registry.unbind(other, room.code)
        current_app.logger.info(f"[room-destroy] code={room.code} reason=admin_{reason}")
    elif state is None:
        current_app.logger.info(f"[room-destroy] code={room.code} reason=empty")
    else:
        _broadcast('roomState', state, room.code)


def _leave_previous(sid: str, code: str, name: str) -> None:
    """Drop the connection's earlier membership before it binds somewhere new."""
    previous = registry.get(sid)
    if previous is None or previous == (code, name):
        return
    room = directory.get(previous.room_code)
    if room is not None:
        _detach(room, sid, 'rebind', explicit=True)
    registry.unbind(sid, previous.room_code)


def handle_connect():
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_create_room(data):
    name, code, problem = _identity(data)
    if problem:
        _error(problem)
        return
    sid = _get_sid()
    if code in directory:
        _error(ERR_ROOM_EXISTS)
        return
    _leave_previous(sid, code, name)
    try:
        room = directory.create(code, name, sid)
    except RoomAlreadyExists:
        _error(ERR_ROOM_EXISTS)
        return
    with room.lock:
        state = room.snapshot()
    join_room(_group(code))
    registry.bind(sid, code, name)
    emit('roomCreated', {'roomCode': code, 'admin': name})
    _broadcast('roomState', state, code)
    current_app.logger.info(f"[room-create] code={code} admin={name}")


def handle_join_room(data):
    name, code, problem = _identity(data)
    if problem:
        _error(problem)
        return
    sid = _get_sid()
    room = directory.get(code)
    if room is None:
        _error(ERR_NO_ROOM)
        return
    if room.is_admin(name):
        _error(ERR_ADMIN_NAME)
        return
    with room.lock:
        gone = room.destroyed
    if gone:
        _error(ERR_NO_ROOM)
        return
    _leave_previous(sid, code, name)
    replaced_sid = None
    with room.lock:
        if room.destroyed:
            state = None
        else:
            existing = room.find(name)
            if existing is not None and existing.sid != sid:
                replaced_sid = existing.sid
            reconnected = room.add_or_rebind(name, sid)
            state = room.snapshot()
    if state is None:
        _error(ERR_NO_ROOM)
        return
    if replaced_sid is not None:
        # The superseded connection no longer belongs to the room
        leave_room(_group(code), sid=replaced_sid, namespace=_namespace())
        registry.unbind(replaced_sid, code)
    join_room(_group(code))
    registry.bind(sid, code, name)
    emit('roomJoined', {'roomCode': code, 'admin': room.admin})
    _broadcast('roomState', state, code)
    current_app.logger.info(f"[room-join] code={code} name={name} reconnected={reconnected}")


def handle_vote(data):
    if not isinstance(data, dict):
        return
    room = _bound_room(data)
    if room is None:
        return
    vote = _coerce_vote(data.get('vote'))
    if vote is _INVALID_VOTE:
        return
    with room.lock:
        if room.destroyed:
            return
        participant = room.find_by_sid(_get_sid())
        if participant is None or not room.set_vote(participant.name, vote):
            return
        state = room.snapshot()
        name = participant.name
    _broadcast('roomState', state, room.code)
    # Hide the value in logs until reveal, same as the snapshot does
    current_app.logger.info(f"[vote] code={room.code} name={name} cleared={vote is None}")


def _admin_room(data) -> Optional[Room]:
    room = _bound_room(data)
    if room is None:
        return None
    with room.lock:
        participant = room.find_by_sid(_get_sid())
        if room.destroyed or participant is None or not room.is_admin(participant.name):
            return None
    return room


def handle_reveal_cards(data):
    room = _admin_room(data)
    if room is None:
        return
    with room.lock:
        if room.destroyed:
            return
        votes = room.reveal()
        state = room.snapshot() if votes is not None else None
    if votes is None:
        _error(ERR_NOT_ALL_VOTED)
        current_app.logger.info(f"[reveal-refused] code={room.code}")
        return
    _broadcast('roomState', state, room.code)
    _broadcast('cardsRevealed', votes, room.code)
    current_app.logger.info(f"[reveal] code={room.code} votes={len(votes)}")


def handle_reset_room(data):
    room = _admin_room(data)
    if room is None:
        return
    with room.lock:
        if room.destroyed:
            return
        room.reset()
        state = room.snapshot()
    _broadcast('roomState', state, room.code)
    _broadcast('roomReset', {}, room.code)
    current_app.logger.info(f"[reset] code={room.code}")


def handle_leave_room(data):
    code = _room_code(data)
    room = directory.get(code) if code else None
    if room is None:
        return
    _detach(room, _get_sid(), 'left', explicit=True)


def handle_disconnect(reason=None):
    sid = _get_sid()
    # Connections normally sit in one room, but sweep them all like a leave would
    for room in directory.rooms():
        try:
            _detach(room, sid, 'disconnected', explicit=False)
        except Exception:
            current_app.logger.exception(f"[disconnect-cleanup] code={room.code} sid={sid}")
    registry.unbind(sid)
    current_app.logger.debug(f"[disconnect] sid={sid} reason={reason}")


def handle_error(exc):
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} {exc}")
    _error('Internal error')


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the planning-poker protocol on *namespace*."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('vote', handle_vote, namespace=namespace)
    socketio.on_event('revealCards', handle_reveal_cards, namespace=namespace)
    socketio.on_event('resetRoom', handle_reset_room, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
