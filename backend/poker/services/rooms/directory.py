import random
import string
import threading
from typing import Dict, List, Optional

from poker.models import Room


class RoomAlreadyExists(Exception):
    def __init__(self, code: str):
        super().__init__(f"Room {code} already exists")
        self.code = code


def normalize_code(code) -> Optional[str]:
    """Strip and uppercase a client-supplied room code; None if unusable."""
    if not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code or None


class RoomDirectory:
    """Process-wide map of room code -> Room.

    The directory lock only guards the mapping itself. Each Room carries its
    own lock, so work on two different rooms never contends here.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code):
        with self._lock:
            return code in self._rooms

    def create(self, code: str, admin: str, sid: Optional[str] = None) -> Room:
        with self._lock:
            if code in self._rooms:
                raise RoomAlreadyExists(code)
            room = Room(code, admin, sid)
            self._rooms[code] = room
            return room

    def get(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(code)

    def destroy(self, code: str, room: Optional[Room] = None) -> bool:
        """Drop *code* from the directory. Idempotent.

        When *room* is given the mapping is only removed if it still points at
        that instance, so a stale teardown cannot delete a newer room that
        reused the code.
        """
        with self._lock:
            current = self._rooms.get(code)
            if current is None or (room is not None and current is not room):
                return False
            del self._rooms[code]
            return True

    def rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()

    def generate_code(self, length: int = 4) -> str:
        """Generate a short room code not currently in use."""
        alphabet = string.ascii_uppercase + string.digits
        while True:
            code = ''.join(random.choices(alphabet, k=length))
            if code not in self:
                return code
