from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Float, Boolean, JSON, UniqueConstraint,
)

from tradesync.core.database import Base


class TradeLog(Base):
    """A normalized, annotated trade synced from one broker for one user."""

    __tablename__ = "trade_logs"
    __table_args__ = (
        UniqueConstraint("trade_id", "broker_type", "user_id", name="uq_trade_logs_natural_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    broker_id = Column(Integer, ForeignKey("brokers.id"))

    trade_id = Column(String(64), nullable=False)
    broker_type = Column(String(20), nullable=False)
    symbol = Column(String(20), nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    original_data = Column(JSON, default=dict)

    # Outcome (null for trades that only open a position)
    trade_type = Column(String(4))       # buy or sell
    profit_loss = Column(Float)
    is_win = Column(Boolean)
    duration = Column(Integer)           # minutes

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
