"""
Trade log storage.

Inserts are ``INSERT ... ON CONFLICT DO NOTHING`` against the unique
``(trade_id, broker_type, user_id)`` constraint, so a trade that was already
synced is skipped atomically instead of checked-then-inserted.
"""

import logging
from typing import Sequence

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from tradesync.models.trade_log import TradeLog
from tradesync.services.broker.base import AnnotatedTrade

logger = logging.getLogger(__name__)

_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}

_NATURAL_KEY = ["trade_id", "broker_type", "user_id"]


class TradeLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERTS[dialect]
        except KeyError:
            raise RuntimeError(f"Unsupported database dialect for trade log upserts: {dialect}")

    @staticmethod
    def _row(user_id: int, trade: AnnotatedTrade, broker_ids: dict[str, int]) -> dict:
        return {
            "user_id": user_id,
            "broker_id": broker_ids.get(trade.broker_type),
            "trade_id": trade.id,
            "broker_type": trade.broker_type,
            "symbol": trade.symbol,
            "quantity": trade.quantity,
            # naive UTC, SQLite has no timezone support
            "timestamp": trade.timestamp.replace(tzinfo=None),
            "original_data": trade.original_data,
            "trade_type": trade.trade_type,
            "profit_loss": trade.profit_loss,
            "is_win": trade.is_win,
            "duration": trade.duration,
            "price": trade.price,
        }

    def insert_new(
        self,
        user_id: int,
        trades: Sequence[AnnotatedTrade],
        broker_ids: dict[str, int],
    ) -> int:
        """Store trades not seen before for this user. Returns the number inserted."""
        insert = self._insert()
        inserted = 0
        try:
            for trade in trades:
                stmt = (
                    insert(TradeLog)
                    .values(**self._row(user_id, trade, broker_ids))
                    .on_conflict_do_nothing(index_elements=_NATURAL_KEY)
                )
                result = self.db.execute(stmt)
                inserted += max(result.rowcount or 0, 0)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("User %s: %d new trade logs, %d already synced", user_id, inserted, len(trades) - inserted)
        return inserted

    def list_for_user(self, user_id: int) -> list[TradeLog]:
        return (
            self.db.query(TradeLog)
            .filter(TradeLog.user_id == user_id)
            .order_by(TradeLog.timestamp, TradeLog.id)
            .all()
        )

    def list_closed_for_user(self, user_id: int) -> list[TradeLog]:
        """Trades that realized a result (the ones analytics are computed on)."""
        return (
            self.db.query(TradeLog)
            .filter(TradeLog.user_id == user_id, TradeLog.is_win.isnot(None))
            .order_by(TradeLog.timestamp, TradeLog.id)
            .all()
        )
