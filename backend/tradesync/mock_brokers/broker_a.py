"""Broker A mock service. Trades are {tradeId, symbol, quantity, price, timestamp}."""

import logging
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tradesync.core.auth import require_broker_scope
from tradesync.core.config import settings
from tradesync.core.errors import ConflictError
from tradesync.mock_brokers.common import BrokerBase, create_broker_app, get_broker_db

BROKER_CODE = "brokerA"


class BrokerATrade(BrokerBase):
    __tablename__ = "broker_a_trades"

    id = Column(Integer, primary_key=True, index=True)
    trade_id = Column(String(64), unique=True, nullable=False)
    symbol = Column(String(20), nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    side = Column(String(4), default="buy")
    user_id = Column(String(64))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


# ── Schemas ────────────────────────────────────────────

PositiveNumber = Annotated[float, Field(gt=0, strict=True)]


class BrokerATradeIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    trade_id: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    quantity: PositiveNumber
    price: PositiveNumber
    timestamp: Optional[datetime] = None
    side: Literal["buy", "sell"] = "buy"
    user_id: Optional[str] = None


class BrokerATradeOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    trade_id: str
    symbol: str
    quantity: float
    price: float
    timestamp: datetime
    side: str = "buy"
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


# ── Routes ─────────────────────────────────────────────

router = APIRouter(
    prefix="/api/trades",
    tags=["broker-a"],
    dependencies=[Depends(require_broker_scope(BROKER_CODE))],
)


@router.get("/broker-a", response_model=list[BrokerATradeOut])
def list_trades(db: Session = Depends(get_broker_db)):
    return db.query(BrokerATrade).order_by(BrokerATrade.timestamp, BrokerATrade.id).all()


@router.post("/broker-a", response_model=BrokerATradeOut, status_code=status.HTTP_201_CREATED)
def create_trade(payload: BrokerATradeIn, db: Session = Depends(get_broker_db)):
    trade = BrokerATrade(
        trade_id=payload.trade_id,
        symbol=payload.symbol,
        quantity=payload.quantity,
        price=payload.price,
        timestamp=payload.timestamp or datetime.now(timezone.utc),
        side=payload.side,
        user_id=payload.user_id,
    )
    db.add(trade)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Trade {payload.trade_id} already exists")
    db.refresh(trade)
    return trade


@router.get("/broker-a/sample")
def sample_trades():
    now = datetime.now(timezone.utc).isoformat()
    return [
        {"tradeId": "A12345", "symbol": "AAPL", "quantity": 100, "price": 150.75, "timestamp": now},
        {"tradeId": "A12346", "symbol": "MSFT", "quantity": 50, "price": 290.50, "timestamp": now},
    ]


# ── Demo data ──────────────────────────────────────────

SEED_TRADES = [
    ("A1001", "AAPL", 150, 172.35, "2023-09-15T10:23:45", "buy"),
    ("A1002", "MSFT", 80, 315.75, "2023-09-15T11:15:22", "buy"),
    ("A1003", "GOOGL", 25, 140.32, "2023-09-16T09:45:30", "buy"),
    ("A1004", "AMZN", 40, 136.80, "2023-09-16T14:22:18", "buy"),
    ("A1005", "TSLA", 60, 243.50, "2023-09-17T10:05:12", "buy"),
    ("A1006", "AAPL", 100, 173.75, "2023-09-17T15:34:27", "sell"),
    ("A1007", "NVDA", 45, 425.80, "2023-09-18T09:12:33", "buy"),
    ("A1008", "META", 70, 305.25, "2023-09-18T13:45:51", "buy"),
    ("A1009", "MSFT", 120, 318.40, "2023-09-19T11:02:15", "sell"),
    ("A1010", "GOOGL", 55, 142.70, "2023-09-19T16:18:42", "sell"),
]


def seed_trades(db: Session) -> int:
    if db.query(BrokerATrade).count() > 0:
        return 0
    db.add_all(
        BrokerATrade(
            trade_id=trade_id,
            symbol=symbol,
            quantity=quantity,
            price=price,
            timestamp=datetime.fromisoformat(ts),
            side=side,
        )
        for trade_id, symbol, quantity, price, ts, side in SEED_TRADES
    )
    db.commit()
    return len(SEED_TRADES)


def create_app(database_url: Optional[str] = None, seed_on_startup: bool = True):
    return create_broker_app(
        title="Broker A",
        router=router,
        table=BrokerATrade.__table__,
        database_url=database_url or settings.BROKER_A_DATABASE_URL,
        seed=seed_trades,
        seed_on_startup=seed_on_startup,
    )


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.BROKER_A_PORT)
