def new_room(test_client, code, name):
    test_client.emit('createRoom', {'userName': name, 'roomCode': code})
    test_client.get_received()
    return test_client


def join(test_client, code, name):
    test_client.emit('joinRoom', {'userName': name, 'roomCode': code})
    test_client.get_received()
    return test_client


def received(test_client, name=None):
    """Drain a client's queue, optionally keeping only the payloads of *name* events."""
    events = test_client.get_received()
    if name is None:
        return events
    return [e['args'][0] if e['args'] else None for e in events if e['name'] == name]
