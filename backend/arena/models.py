from arena import db
from datetime import datetime, timezone
import json


def _utcnow():
    return datetime.now(timezone.utc)


class PlayerStats(db.Model):
    __tablename__ = 'player_stats'
    username = db.Column(db.String(64), primary_key=True)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    draws = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def __init__(self, **kwargs):
        super(PlayerStats, self).__init__(**kwargs)
        # Column defaults only apply on flush; fresh rows should read as zero
        for field in ('games_played', 'wins', 'losses', 'draws'):
            if getattr(self, field) is None:
                setattr(self, field, 0)

    @property
    def win_rate(self):
        if not self.games_played:
            return 0.0
        return round(self.wins / self.games_played * 100, 2)

    def to_dict(self):
        return {
            'username': self.username,
            'gamesPlayed': self.games_played,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'winRate': self.win_rate,
        }


class MatchRecord(db.Model):
    __tablename__ = 'match_record'
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.String(64), index=True)
    player_x = db.Column(db.String(64), db.ForeignKey('player_stats.username'), nullable=False, index=True)
    player_o = db.Column(db.String(64), db.ForeignKey('player_stats.username'), nullable=False, index=True)
    winner = db.Column(db.String(64), nullable=False)  # a username or 'draw'
    board_state = db.Column(db.Text, nullable=True)  # JSON-encoded list of 9 cells
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'matchId': self.match_id,
            'playerX': self.player_x,
            'playerO': self.player_o,
            'winner': self.winner,
            'board': json.loads(self.board_state) if self.board_state else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
