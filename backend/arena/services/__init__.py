"""Session core: board evaluation, identities, matches, lobby and stats.

This package holds the game state machine. Socket handlers and HTTP routes
import from here, keeping transport concerns separated from core game
mechanics.
"""

from .coordinator import SessionCoordinator
from .errors import ArenaError
from .transport import SocketIOTransport, Transport

__all__ = ['SessionCoordinator', 'ArenaError', 'SocketIOTransport', 'Transport']
