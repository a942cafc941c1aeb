from bingo_server import db
import json
from datetime import datetime, timezone


def _parse_ts(value):
    """Accept ISO strings or datetimes; store naive UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _format_ts(value):
    return value.replace(tzinfo=timezone.utc).isoformat() if value else None


class RoomHistory(db.Model):
    """One finished room, as handed over by the session registry."""
    __tablename__ = 'room_history'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(6), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False)
    closed_at = db.Column(db.DateTime, nullable=False, index=True)
    winner = db.Column(db.String(128), nullable=False)
    winner_row_number = db.Column(db.Integer, nullable=False)
    winner_numbers = db.Column(db.Text, nullable=False)  # JSON-encoded list of ints
    winner_bingo_card = db.Column(db.Text, nullable=True)  # JSON-encoded list of rows
    total_players = db.Column(db.Integer, default=0, nullable=False)
    total_numbers_drawn = db.Column(db.Integer, default=0, nullable=False)
    payload_bytes = db.Column(db.Integer, default=0, nullable=False)

    @classmethod
    def from_summary(cls, summary):
        payload = json.dumps(summary, default=str)
        return cls(
            room_id=summary['roomId'],
            created_at=_parse_ts(summary['createdAt']),
            closed_at=_parse_ts(summary['closedAt']),
            winner=summary['winner'],
            winner_row_number=summary['winnerRowNumber'],
            winner_numbers=json.dumps(summary['winnerNumbers']),
            winner_bingo_card=json.dumps(summary.get('winnerBingoCard')),
            total_players=summary.get('totalPlayers', 0),
            total_numbers_drawn=summary.get('totalNumbersDrawn', 0),
            payload_bytes=len(payload.encode('utf-8')),
        )

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'createdAt': _format_ts(self.created_at),
            'closedAt': _format_ts(self.closed_at),
            'winner': self.winner,
            'winnerRowNumber': self.winner_row_number,
            'winnerNumbers': json.loads(self.winner_numbers) if self.winner_numbers else [],
            'winnerBingoCard': json.loads(self.winner_bingo_card) if self.winner_bingo_card else None,
            'totalPlayers': self.total_players,
            'totalNumbersDrawn': self.total_numbers_drawn,
        }
