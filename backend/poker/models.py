import threading
from typing import Dict, List, NamedTuple, Optional

ESCAPE_VOTE = '?'
# Placeholder shown in place of a concrete vote until the round is revealed
VOTED_MARKER = 'voted'


class RemoveResult(NamedTuple):
    removed: bool
    was_admin: bool


class Participant:
    __slots__ = ('name', 'vote', 'sid')

    def __init__(self, name: str, sid: Optional[str] = None):
        self.name = name
        self.vote: Optional[str] = None
        self.sid = sid

    def to_dict(self, revealed: bool) -> dict:
        if revealed:
            vote = self.vote
        else:
            vote = VOTED_MARKER if self.vote is not None else None
        return {'name': self.name, 'vote': vote}


class Room:
    """A single planning-poker session.

    The admin sits in ``participants`` like everyone else but never votes.
    Callers must hold ``lock`` around every method; the directory and the
    socket handlers do this for you.
    """

    def __init__(self, code: str, admin: str, admin_sid: Optional[str] = None):
        self.code = code
        self.admin = admin
        self.participants: List[Participant] = [Participant(admin, admin_sid)]
        self.revealed = False
        # Set once the room is torn down; handlers holding a stale reference check it
        self.destroyed = False
        self.lock = threading.RLock()

    def __repr__(self):
        return f"<Room {self.code} admin={self.admin!r} participants={len(self.participants)}>"

    def find(self, name: str) -> Optional[Participant]:
        for p in self.participants:
            if p.name == name:
                return p
        return None

    def find_by_sid(self, sid: str) -> Optional[Participant]:
        for p in self.participants:
            if p.sid == sid:
                return p
        return None

    def is_admin(self, name: Optional[str]) -> bool:
        return name is not None and name == self.admin

    @property
    def voters(self) -> List[Participant]:
        return [p for p in self.participants if p.name != self.admin]

    def add_or_rebind(self, name: str, sid: Optional[str]) -> bool:
        """Add *name* to the room, or rebind its connection if already present.

        Returns True when the name was already known (a reconnection).
        """
        existing = self.find(name)
        if existing is not None:
            existing.sid = sid
            return True
        self.participants.append(Participant(name, sid))
        return False

    def remove_by_sid(self, sid: str) -> RemoveResult:
        for idx, p in enumerate(self.participants):
            if p.sid == sid:
                del self.participants[idx]
                return RemoveResult(True, p.name == self.admin)
        return RemoveResult(False, False)

    def set_vote(self, name: str, vote: Optional[str]) -> bool:
        if self.is_admin(name):
            return False
        participant = self.find(name)
        if participant is None:
            return False
        participant.vote = vote
        return True

    def all_voted(self) -> bool:
        voters = self.voters
        return bool(voters) and all(p.vote is not None for p in voters)

    def reveal(self) -> Optional[Dict[str, Optional[str]]]:
        """Flip the cards. Returns the name -> vote mapping, or None if refused."""
        if not self.all_voted():
            return None
        self.revealed = True
        return self.votes()

    def reset(self) -> None:
        self.revealed = False
        for p in self.voters:
            p.vote = None

    def votes(self) -> Dict[str, Optional[str]]:
        return {p.name: p.vote for p in self.voters}

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def snapshot(self) -> dict:
        return {
            'code': self.code,
            'admin': self.admin,
            'revealed': self.revealed,
            'players': [p.to_dict(self.revealed) for p in self.participants],
            'votes': self.votes() if self.revealed else None,
        }
