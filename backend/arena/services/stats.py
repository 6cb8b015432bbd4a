import json
from typing import List, Optional, Sequence

from flask import current_app

from arena import db
from arena.models import MatchRecord, PlayerStats
from .board import DRAW


class StatsLedger:
    """Per-player win/loss/draw counters stored through Flask-SQLAlchemy.

    Needs an application context. Counters only ever grow; rows are never
    deleted.
    """

    def _get_or_create(self, name: str) -> PlayerStats:
        record = db.session.get(PlayerStats, name)
        if record is None:
            record = PlayerStats(username=name)
            db.session.add(record)
        return record

    def upsert_identity(self, name: str) -> PlayerStats:
        try:
            record = self._get_or_create(name)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception(f"[stats-error] upsert name={name}")
            raise
        return record

    def get(self, name: str) -> PlayerStats:
        """Read a player's counters. Unknown names get an unsaved zeroed record."""
        return db.session.get(PlayerStats, name) or PlayerStats(username=name)

    def record_result(self, players: Sequence[str], winner: str,
                      match_id: Optional[str] = None, board: Optional[Sequence[str]] = None) -> List[PlayerStats]:
        """Apply one finished game to both players' counters.

        ``winner`` is one of ``players`` or ``'draw'``. Everything is written
        in a single commit.
        """
        if len(players) != 2 or players[0] == players[1]:
            raise ValueError(f'record_result needs two distinct players, got {players!r}')
        if winner != DRAW and winner not in players:
            raise ValueError(f'winner {winner!r} is not one of {players!r}')
        try:
            records = []
            for name in players:
                record = self._get_or_create(name)
                record.games_played += 1
                if winner == DRAW:
                    record.draws += 1
                elif winner == name:
                    record.wins += 1
                else:
                    record.losses += 1
                records.append(record)
            db.session.add(MatchRecord(
                match_id=match_id,
                player_x=players[0],
                player_o=players[1],
                winner=winner,
                board_state=json.dumps(list(board)) if board is not None else None,
            ))
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception(f"[stats-error] players={list(players)} winner={winner}")
            raise
        current_app.logger.info(f"[stats] players={list(players)} winner={winner}")
        return records

    def leaderboard(self, limit: int = 10) -> List[PlayerStats]:
        rows = PlayerStats.query.filter(PlayerStats.games_played > 0).all()
        rows.sort(key=lambda r: (-r.win_rate, -r.wins, r.username))
        return rows[:limit]

    def history(self, name: str, limit: int = 20) -> List[MatchRecord]:
        return (
            MatchRecord.query
            .filter((MatchRecord.player_x == name) | (MatchRecord.player_o == name))
            .order_by(MatchRecord.id.desc())
            .limit(limit)
            .all()
        )
