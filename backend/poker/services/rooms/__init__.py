"""Room domain services: the room directory, connection bindings and vote stats.

Nothing here knows about Socket.IO; the socket handlers and HTTP routes
import these and decide what to emit.
"""

from .directory import RoomAlreadyExists, RoomDirectory, normalize_code
from .registry import Binding, ConnectionRegistry
from .stats import summarize_votes

__all__ = [
    'Binding',
    'ConnectionRegistry',
    'RoomAlreadyExists',
    'RoomDirectory',
    'normalize_code',
    'summarize_votes',
]
