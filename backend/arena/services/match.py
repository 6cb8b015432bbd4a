import time
import uuid
from typing import List, Optional, Set, Tuple

from .board import O, X, new_board

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'

SYMBOLS = (X, O)


class Match:
    """One two-player game held in memory.

    ``players[0]`` plays X and moves first, ``players[1]`` plays O. The
    mapping is derived from list order on every call and never stored.
    """

    def __init__(self, name: str, host: str, match_id: str = None):
        self.id = match_id or uuid.uuid4().hex
        self.name = name
        self.host = host
        self.players: List[str] = [host]
        self.board = new_board()
        self.turn = X
        self.status = WAITING
        self.winner: Optional[str] = None
        self.winning_line: Optional[Tuple[int, int, int]] = None
        self.rematch_votes: Set[str] = set()
        self.created_at = time.time()

    def __repr__(self):
        return f'<Match {self.id} {self.status} players={self.players}>'

    @property
    def is_full(self) -> bool:
        return len(self.players) >= 2

    def symbol_for(self, name: str) -> Optional[str]:
        try:
            return SYMBOLS[self.players.index(name)]
        except ValueError:
            return None

    def player_for(self, symbol: str) -> Optional[str]:
        idx = SYMBOLS.index(symbol)
        return self.players[idx] if idx < len(self.players) else None

    def opponent_of(self, name: str) -> Optional[str]:
        for p in self.players:
            if p != name:
                return p
        return None

    def reset_board(self) -> None:
        self.board = new_board()
        self.turn = X
        self.winner = None
        self.winning_line = None
        self.rematch_votes.clear()
        self.status = PLAYING if self.is_full else WAITING

    def add_player(self, name: str) -> None:
        self.players.append(name)
        self.reset_board()

    def remove_player(self, name: str) -> None:
        self.players.remove(name)
        self.reset_board()

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'host': self.host,
            'players': list(self.players),
            'playerCount': len(self.players),
            'status': self.status,
        }

    def to_dict(self):
        payload = self.to_summary()
        payload.update({
            'board': list(self.board),
            'turn': self.turn,
            'winner': self.winner,
            'winningLine': list(self.winning_line) if self.winning_line else None,
            'rematchVotes': sorted(self.rematch_votes),
            'createdAt': self.created_at,
        })
        return payload
