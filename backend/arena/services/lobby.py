from typing import Callable, Iterable, List, Optional

from flask import current_app

from .match import WAITING, Match
from .transport import Transport

GAMES_LIST = 'games-list'


class LobbyBroadcaster:
    """Publishes the list of games open for joining.

    Only waiting matches with at least one seated player are listed;
    playing and finished games are not joinable and stay out of the lobby.
    Reads matches, never mutates them.
    """

    def __init__(self, matches: Callable[[], Iterable[Match]], transport: Transport):
        self._matches = matches
        self._transport = transport

    def snapshot(self) -> List[dict]:
        listed = [m for m in self._matches() if m.players and m.status == WAITING]
        listed.sort(key=lambda m: m.created_at)
        return [m.to_summary() for m in listed]

    def publish(self, to: Optional[str] = None) -> None:
        games = self.snapshot()
        try:
            if to is None:
                self._transport.broadcast(GAMES_LIST, games)
            else:
                self._transport.send(to, GAMES_LIST, games)
        except Exception:
            current_app.logger.exception(f"[lobby-publish-failed] to={to or '*'}")
