from poker.models import ESCAPE_VOTE, VOTED_MARKER, Room


def _room():
    room = Room('ABCD', 'Alice', 'sid-alice')
    room.add_or_rebind('Bob', 'sid-bob')
    return room


def test_new_room_has_admin_as_sole_participant():
    room = Room('ABCD', 'Alice', 'sid-alice')
    assert [p.name for p in room.participants] == ['Alice']
    assert room.participants[0].vote is None
    assert room.revealed is False
    assert room.voters == []


def test_join_keeps_order_and_rebinds_existing_name():
    room = _room()
    room.add_or_rebind('Cara', 'sid-cara')
    room.set_vote('Bob', '5')

    assert room.add_or_rebind('Bob', 'sid-bob-2') is True
    assert [p.name for p in room.participants] == ['Alice', 'Bob', 'Cara']
    bob = room.find('Bob')
    assert bob.sid == 'sid-bob-2'
    assert bob.vote == '5'


def test_admin_cannot_vote_and_unknown_names_are_ignored():
    room = _room()
    assert room.set_vote('Alice', '3') is False
    assert room.find('Alice').vote is None
    assert room.set_vote('Nobody', '3') is False
    assert room.set_vote('Bob', ESCAPE_VOTE) is True
    assert room.find('Bob').vote == ESCAPE_VOTE


def test_reveal_refused_until_everyone_voted():
    room = _room()
    room.add_or_rebind('Cara', 'sid-cara')
    room.set_vote('Bob', '5')
    assert room.reveal() is None
    assert room.revealed is False

    room.set_vote('Cara', '?')
    assert room.reveal() == {'Bob': '5', 'Cara': '?'}
    assert room.revealed is True


def test_reveal_refused_with_no_voters():
    room = Room('ABCD', 'Alice')
    assert room.reveal() is None
    assert room.revealed is False


def test_cleared_vote_blocks_reveal():
    room = _room()
    room.set_vote('Bob', '8')
    room.set_vote('Bob', None)
    assert room.reveal() is None


def test_reset_clears_votes_and_reveal_flag():
    room = _room()
    room.set_vote('Bob', '5')
    room.reveal()
    room.reset()
    assert room.revealed is False
    assert all(p.vote is None for p in room.participants)
    room.reset()
    assert room.revealed is False


def test_revealed_stays_true_until_reset():
    room = _room()
    room.set_vote('Bob', '5')
    room.reveal()
    room.set_vote('Bob', '8')
    assert room.revealed is True
    assert room.snapshot()['votes'] == {'Bob': '8'}


def test_remove_by_sid_is_idempotent():
    room = _room()
    first = room.remove_by_sid('sid-bob')
    second = room.remove_by_sid('sid-bob')
    assert first.removed is True and first.was_admin is False
    assert second.removed is False and second.was_admin is False
    assert [p.name for p in room.participants] == ['Alice']


def test_remove_admin_reports_admin():
    room = _room()
    result = room.remove_by_sid('sid-alice')
    assert result.removed and result.was_admin


def test_snapshot_hides_votes_until_revealed():
    room = _room()
    room.add_or_rebind('Cara', 'sid-cara')
    room.set_vote('Bob', '13')

    state = room.snapshot()
    assert state == {
        'code': 'ABCD',
        'admin': 'Alice',
        'revealed': False,
        'players': [
            {'name': 'Alice', 'vote': None},
            {'name': 'Bob', 'vote': VOTED_MARKER},
            {'name': 'Cara', 'vote': None},
        ],
        'votes': None,
    }

    room.set_vote('Cara', '3')
    room.reveal()
    state = room.snapshot()
    assert state['players'][1] == {'name': 'Bob', 'vote': '13'}
    assert state['votes'] == {'Bob': '13', 'Cara': '3'}


def test_snapshot_does_not_mutate():
    room = _room()
    room.set_vote('Bob', '2')
    room.snapshot()
    assert room.find('Bob').vote == '2'
    assert room.revealed is False
