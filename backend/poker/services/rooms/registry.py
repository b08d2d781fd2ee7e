import threading
from typing import Dict, NamedTuple, Optional


class Binding(NamedTuple):
    room_code: str
    name: str


class ConnectionRegistry:
    """Maps a live socket id to the room and participant name it joined as."""

    def __init__(self):
        self._bindings: Dict[str, Binding] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._bindings)

    def bind(self, sid: str, room_code: str, name: str) -> Optional[Binding]:
        """Bind *sid*, returning whatever binding it replaced."""
        with self._lock:
            previous = self._bindings.get(sid)
            self._bindings[sid] = Binding(room_code, name)
            return previous

    def get(self, sid: str) -> Optional[Binding]:
        with self._lock:
            return self._bindings.get(sid)

    def unbind(self, sid: str, room_code: Optional[str] = None) -> Optional[Binding]:
        """Remove the binding for *sid*; with *room_code*, only if it matches."""
        with self._lock:
            current = self._bindings.get(sid)
            if current is None:
                return None
            if room_code is not None and current.room_code != room_code:
                return None
            return self._bindings.pop(sid)

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()
