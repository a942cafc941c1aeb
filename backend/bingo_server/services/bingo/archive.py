"""History of finished rooms.

Writes are best-effort: a failed insert or eviction is logged and rolled
back, and never propagates to the caller that just closed a room.
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from bingo_server import db
from bingo_server.models import RoomHistory

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 1000
DEFAULT_MAX_BYTES = 100 * 1024 * 1024


class HistoryArchiver:
    def __init__(self, app=None, max_records=DEFAULT_MAX_RECORDS, max_bytes=DEFAULT_MAX_BYTES):
        self.max_records = max_records
        self.max_bytes = max_bytes
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.max_records = int(app.config.get('MAX_HISTORY_SIZE', self.max_records))
        self.max_bytes = int(app.config.get('MAX_HISTORY_BYTES', self.max_bytes))
        # An unreadable store must not stop the server from starting
        with app.app_context():
            try:
                RoomHistory.__table__.create(db.engine, checkfirst=True)
                count = db.session.query(func.count(RoomHistory.id)).scalar() or 0
                app.logger.info(f"[history] loaded records={count} max={self.max_records}")
            except SQLAlchemyError:
                db.session.rollback()
                app.logger.exception("[history] archive unreadable, starting with empty history")

    def append(self, summary) -> bool:
        try:
            db.session.add(RoomHistory.from_summary(summary))
            db.session.flush()
            evicted = self._evict()
            db.session.commit()
        except (SQLAlchemyError, KeyError, TypeError, ValueError):
            db.session.rollback()
            logger.exception(f"[history] failed to record room={summary.get('roomId')}")
            return False
        logger.info(f"[history] recorded room={summary.get('roomId')} evicted={evicted}")
        return True

    def list_records(self):
        try:
            rows = RoomHistory.query.order_by(RoomHistory.closed_at.asc(), RoomHistory.id.asc()).all()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("[history] failed to read archive")
            return []
        return [row.to_dict() for row in rows]

    def _evict(self) -> int:
        """Drop oldest records until both the count and byte caps hold."""
        total = db.session.query(func.count(RoomHistory.id)).scalar() or 0
        total_bytes = db.session.query(func.coalesce(func.sum(RoomHistory.payload_bytes), 0)).scalar() or 0
        if total <= self.max_records and total_bytes <= self.max_bytes:
            return 0
        evicted = 0
        oldest_first = RoomHistory.query.order_by(RoomHistory.closed_at.asc(), RoomHistory.id.asc())
        for row in oldest_first.all():
            if total <= self.max_records and total_bytes <= self.max_bytes:
                break
            total -= 1
            total_bytes -= row.payload_bytes or 0
            db.session.delete(row)
            evicted += 1
        return evicted
