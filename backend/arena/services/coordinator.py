"""Session coordinator: the authoritative state machine for users and matches.

Every public method runs under one re-entrant lock, so a match's state
transition completes before any other operation is accepted. Validation
always happens before mutation; a rejected call raises an ``ArenaError``
and leaves every match, identity and stats row unchanged.

Outbound events are delivered one recipient at a time. A delivery failure
is logged and skipped; it never undoes the state change that caused it.
"""

import threading
import time
from typing import Dict, List, Optional

from flask import current_app

from .board import DRAW, EMPTY, O, X, evaluate
from .errors import (
    AlreadyInMatch,
    CellOccupied,
    GameNotActive,
    InvalidCellIndex,
    InvalidMessage,
    MatchFull,
    MatchNotFound,
    NoRematchOffer,
    NotParticipant,
    NotRegistered,
    NotYourTurn,
    OpponentUnavailable,
)
from .identity import IdentityRegistry
from .lobby import LobbyBroadcaster
from .match import FINISHED, PLAYING, Match
from .stats import StatsLedger
from .transport import Transport

MAX_MATCH_NAME = 64

# Reasons carried by player-left
LEFT = 'left'
DISCONNECTED = 'disconnected'


class SessionCoordinator:

    def __init__(self, transport: Transport, ledger: StatsLedger = None,
                 min_name_length: int = 2, max_name_length: int = 32,
                 chat_max_length: int = 500, leaderboard_limit: int = 10):
        self._lock = threading.RLock()
        self._transport = transport
        self._matches: Dict[str, Match] = {}
        self.ledger = ledger or StatsLedger()
        self.registry = IdentityRegistry(min_name_length, max_name_length)
        self.lobby = LobbyBroadcaster(lambda: list(self._matches.values()), transport)
        self.chat_max_length = chat_max_length
        self.leaderboard_limit = leaderboard_limit

    # ---- read accessors ----

    def get_match(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def matches(self) -> List[Match]:
        with self._lock:
            return list(self._matches.values())

    @property
    def active_games(self) -> int:
        return len(self._matches)

    @property
    def active_users(self) -> int:
        return len(self.registry)

    # ---- identity ----

    def register(self, connection_id: str, raw_name) -> str:
        with self._lock:
            name = self.registry.validate(raw_name)
            current = self.registry.resolve(connection_id)
            if current is not None and current != name and self._is_seated(current):
                raise AlreadyInMatch('Leave your current game before changing your name')
            self.registry.check_available(connection_id, name)
            record = self.ledger.upsert_identity(name)
            self.registry.register(connection_id, name)
            current_app.logger.info(f"[register] sid={connection_id} name={name}")
            self._send(connection_id, 'registered', {'username': name, 'stats': record.to_dict()})
            self.lobby.publish(to=connection_id)
            return name

    # ---- match lifecycle ----

    def create_match(self, connection_id: str, name: str = None) -> Match:
        with self._lock:
            host = self._require_name(connection_id)
            label = (name or '').strip()[:MAX_MATCH_NAME] or f"{host}'s Game"
            match = Match(label, host)
            self._matches[match.id] = match
            current_app.logger.info(f"[create] match={match.id} name={label!r} host={host}")
            self._send(connection_id, 'match-created', match.to_dict())
            self.lobby.publish()
            return match

    def join_match(self, connection_id: str, match_id: str) -> Match:
        with self._lock:
            joiner = self._require_name(connection_id)
            match = self._require_match(match_id)
            if match.is_full:
                raise MatchFull()
            if joiner in match.players:
                raise AlreadyInMatch()
            match.add_player(joiner)
            current_app.logger.info(f"[join] match={match.id} player={joiner} players={match.players}")
            state = match.to_dict()
            self._send_to_match(match, 'player-joined', {'matchId': match.id, 'player': joiner, 'match': state})
            self._send_to_match(match, 'match-started', state)
            self._send_turn_updates(match)
            self.lobby.publish()
            return match

    def apply_move(self, connection_id: str, match_id: str, cell_index) -> Match:
        with self._lock:
            mover = self._require_name(connection_id)
            match = self._require_match(match_id)
            symbol = match.symbol_for(mover)
            if symbol is None:
                raise NotParticipant()
            if match.status != PLAYING:
                raise GameNotActive()
            if match.turn != symbol:
                raise NotYourTurn()
            if isinstance(cell_index, bool) or not isinstance(cell_index, int) or not 0 <= cell_index < 9:
                raise InvalidCellIndex()
            if match.board[cell_index] != EMPTY:
                raise CellOccupied()

            match.board[cell_index] = symbol
            result = evaluate(match.board)
            if result is None:
                match.turn = O if symbol == X else X
            else:
                match.status = FINISHED
                match.winner = DRAW if result.is_draw else match.player_for(result.winner)
                match.winning_line = result.line
            current_app.logger.info(f"[move] match={match.id} player={mover} symbol={symbol} cell={cell_index} next={match.turn} status={match.status}")

            self._send_to_match(match, 'move-made', {
                'matchId': match.id,
                'cellIndex': cell_index,
                'symbol': symbol,
                'player': mover,
                'board': list(match.board),
                'turn': match.turn,
                'status': match.status,
                'gameOver': match.status == FINISHED,
                'winner': match.winner,
                'winningLine': list(match.winning_line) if match.winning_line else None,
            })
            if result is None:
                self._send_turn_updates(match)
            else:
                self._finish(match)
            return match

    def leave_match(self, connection_id: str, match_id: str) -> None:
        with self._lock:
            name = self._require_name(connection_id)
            match = self._require_match(match_id)
            if name not in match.players:
                raise NotParticipant()
            self._remove_player(match, name, LEFT)
            self.lobby.publish()

    def handle_disconnect(self, connection_id: str) -> Optional[str]:
        """Drop the connection's identity and vacate its seats.

        Safe to call more than once, and after an explicit leave.
        """
        with self._lock:
            name = self.registry.resolve(connection_id)
            if name is None:
                return None
            for match in [m for m in self._matches.values() if name in m.players]:
                self._remove_player(match, name, DISCONNECTED)
            self.registry.release(connection_id)
            current_app.logger.info(f"[disconnect] sid={connection_id} name={name}")
            self.lobby.publish()
            return name

    # ---- rematch handshake ----

    def request_rematch(self, connection_id: str, match_id: str) -> Match:
        with self._lock:
            name, match = self._finished_match_for(connection_id, match_id)
            opponent = match.opponent_of(name)
            if opponent is None or self.registry.find_connection(opponent) is None:
                raise OpponentUnavailable()
            match.rematch_votes.add(name)
            current_app.logger.info(f"[rematch-vote] match={match.id} player={name} votes={sorted(match.rematch_votes)}")
            if match.rematch_votes >= set(match.players):
                self._start_rematch(match)
            else:
                self._send(connection_id, 'rematch-pending', {
                    'matchId': match.id,
                    'message': 'Rematch requested. Waiting for opponent...',
                })
                self._send_to_player(opponent, 'rematch-offered', {'matchId': match.id, 'from': name})
            return match

    def accept_rematch(self, connection_id: str, match_id: str) -> Match:
        with self._lock:
            name, match = self._finished_match_for(connection_id, match_id)
            if match.opponent_of(name) not in match.rematch_votes:
                raise NoRematchOffer()
            match.rematch_votes.add(name)
            self._start_rematch(match)
            return match

    def reject_rematch(self, connection_id: str, match_id: str) -> Match:
        with self._lock:
            name, match = self._finished_match_for(connection_id, match_id)
            opponent = match.opponent_of(name)
            if opponent not in match.rematch_votes:
                raise NoRematchOffer()
            match.rematch_votes.clear()
            current_app.logger.info(f"[rematch-rejected] match={match.id} by={name}")
            self._send_to_player(opponent, 'rematch-rejected', {'matchId': match.id, 'by': name})
            return match

    # ---- chat / queries ----

    def relay_chat(self, connection_id: str, match_id: str, text) -> dict:
        with self._lock:
            sender = self._require_name(connection_id)
            match = self._require_match(match_id)
            if sender not in match.players:
                raise NotParticipant()
            text = text.strip() if isinstance(text, str) else ''
            if not text:
                raise InvalidMessage('Message cannot be empty')
            if len(text) > self.chat_max_length:
                raise InvalidMessage(f'Message must be at most {self.chat_max_length} characters')
            payload = {'matchId': match.id, 'from': sender, 'text': text, 'timestamp': time.time()}
            self._send_to_match(match, 'chat-message', payload)
            return payload

    def publish_games(self, connection_id: str = None) -> None:
        with self._lock:
            self.lobby.publish(to=connection_id)

    def send_stats(self, connection_id: str, name: str = None) -> dict:
        with self._lock:
            target = (name or '').strip() or self._require_name(connection_id)
            stats = self.ledger.get(target).to_dict()
            self._send(connection_id, 'stats-update', stats)
            return stats

    def send_leaderboard(self, connection_id: str, limit: int = None) -> list:
        with self._lock:
            rows = [r.to_dict() for r in self.ledger.leaderboard(limit or self.leaderboard_limit)]
            self._send(connection_id, 'leaderboard', rows)
            return rows

    # ---- internals ----

    def _require_name(self, connection_id: str) -> str:
        name = self.registry.resolve(connection_id)
        if name is None:
            raise NotRegistered()
        return name

    def _require_match(self, match_id: str) -> Match:
        match = self._matches.get(match_id) if isinstance(match_id, str) else None
        if match is None:
            raise MatchNotFound()
        return match

    def _finished_match_for(self, connection_id: str, match_id: str):
        name = self._require_name(connection_id)
        match = self._require_match(match_id)
        if name not in match.players:
            raise NotParticipant()
        if match.status != FINISHED:
            raise GameNotActive('Game is not finished yet')
        return name, match

    def _is_seated(self, name: str) -> bool:
        return any(name in m.players for m in self._matches.values())

    def _remove_player(self, match: Match, name: str, reason: str) -> None:
        match.remove_player(name)
        if not match.players:
            del self._matches[match.id]
            current_app.logger.info(f"[destroy] match={match.id} last={name} reason={reason}")
            return
        if match.host == name:
            match.host = match.players[0]
        current_app.logger.info(f"[leave] match={match.id} player={name} reason={reason} remaining={match.players}")
        self._send_to_match(match, 'player-left', {
            'matchId': match.id,
            'player': name,
            'reason': reason,
            'match': match.to_dict(),
        })

    def _finish(self, match: Match) -> None:
        players = list(match.players)
        try:
            records = self.ledger.record_result(players, match.winner, match.id, match.board)
        except Exception:
            # The match stays finished; only the stats write is lost
            current_app.logger.exception(f"[finish] match={match.id} stats not recorded")
            records = []
        current_app.logger.info(f"[finish] match={match.id} winner={match.winner} line={match.winning_line}")
        for name, record in zip(players, records):
            self._send_to_player(name, 'stats-update', record.to_dict())
        self.lobby.publish()

    def _start_rematch(self, match: Match) -> None:
        match.reset_board()
        current_app.logger.info(f"[rematch] match={match.id} players={match.players}")
        self._send_to_match(match, 'rematch-started', match.to_dict())
        self._send_turn_updates(match)
        self.lobby.publish()

    def _send_turn_updates(self, match: Match) -> None:
        for name in match.players:
            symbol = match.symbol_for(name)
            self._send_to_player(name, 'turn-update', {
                'matchId': match.id,
                'symbol': symbol,
                'turn': match.turn,
                'isYourTurn': match.turn == symbol,
            })

    def _send_to_match(self, match: Match, event: str, payload) -> None:
        for name in list(match.players):
            self._send_to_player(name, event, payload)

    def _send_to_player(self, name: str, event: str, payload) -> None:
        connection_id = self.registry.find_connection(name)
        if connection_id is None:
            current_app.logger.debug(f"[send-skip] event={event} player={name} unreachable")
            return
        self._send(connection_id, event, payload)

    def _send(self, connection_id: str, event: str, payload) -> None:
        try:
            self._transport.send(connection_id, event, payload)
        except Exception:
            current_app.logger.exception(f"[send-failed] event={event} sid={connection_id}")
