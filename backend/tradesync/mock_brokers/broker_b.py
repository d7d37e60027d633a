"""Broker B mock service. Orders are {orderId, asset, amount, cost, executedAt}."""

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

BROKER_CODE = "brokerB"


class BrokerBOrder(BrokerBase):
    __tablename__ = "broker_b_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(64), unique=True, nullable=False)
    asset = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    cost = Column(Float, nullable=False)
    executed_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    action = Column(String(4), default="buy")
    user_id = Column(String(64))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


# ── Schemas ────────────────────────────────────────────

PositiveNumber = Annotated[float, Field(gt=0, strict=True)]


class BrokerBOrderIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: str = Field(min_length=1)
    asset: str = Field(min_length=1)
    amount: PositiveNumber
    cost: PositiveNumber
    executed_at: Optional[datetime] = None
    action: Literal["buy", "sell"] = "buy"
    user_id: Optional[str] = None


class BrokerBOrderOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    order_id: str
    asset: str
    amount: float
    cost: float
    executed_at: datetime
    action: str = "buy"
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


# ── Routes ─────────────────────────────────────────────

router = APIRouter(
    prefix="/api/trades",
    tags=["broker-b"],
    dependencies=[Depends(require_broker_scope(BROKER_CODE))],
)


@router.get("/broker-b", response_model=list[BrokerBOrderOut])
def list_orders(db: Session = Depends(get_broker_db)):
    return db.query(BrokerBOrder).order_by(BrokerBOrder.executed_at, BrokerBOrder.id).all()


@router.post("/broker-b", response_model=BrokerBOrderOut, status_code=status.HTTP_201_CREATED)
def create_order(payload: BrokerBOrderIn, db: Session = Depends(get_broker_db)):
    order = BrokerBOrder(
        order_id=payload.order_id,
        asset=payload.asset,
        amount=payload.amount,
        cost=payload.cost,
        executed_at=payload.executed_at or datetime.now(timezone.utc),
        action=payload.action,
        user_id=payload.user_id,
    )
    db.add(order)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Order {payload.order_id} already exists")
    db.refresh(order)
    return order


@router.get("/broker-b/sample")
def sample_orders():
    now = datetime.now(timezone.utc).isoformat()
    return [
        {"orderId": "B54321", "asset": "BTC", "amount": 2.5, "cost": 45000.75, "executedAt": now},
        {"orderId": "B54322", "asset": "ETH", "amount": 10, "cost": 2500.30, "executedAt": now},
    ]


# ── Demo data ──────────────────────────────────────────

SEED_ORDERS = [
    ("B2001", "BTC", 1.25, 41250.75, "2023-09-15T09:30:15", "buy"),
    ("B2002", "ETH", 8.5, 2295.40, "2023-09-15T14:45:22", "buy"),
    ("B2003", "SOL", 45, 108.25, "2023-09-16T10:12:38", "buy"),
    ("B2004", "ADA", 1500, 0.45, "2023-09-16T16:35:51", "buy"),
    ("B2005", "BTC", 0.75, 42300.80, "2023-09-17T08:55:07", "buy"),
    ("B2006", "DOT", 120, 5.75, "2023-09-17T13:22:45", "buy"),
    ("B2007", "ETH", 4.2, 2320.15, "2023-09-18T11:40:19", "sell"),
    ("B2008", "AVAX", 35, 28.40, "2023-09-18T15:18:33", "buy"),
    ("B2009", "SOL", 65, 112.80, "2023-09-19T09:50:27", "sell"),
    ("B2010", "BTC", 2.1, 41800.25, "2023-09-19T14:27:36", "sell"),
]


def seed_orders(db: Session) -> int:
    if db.query(BrokerBOrder).count() > 0:
        return 0
    db.add_all(
        BrokerBOrder(
            order_id=order_id,
            asset=asset,
            amount=amount,
            cost=cost,
            executed_at=datetime.fromisoformat(ts),
            action=action,
        )
        for order_id, asset, amount, cost, ts, action in SEED_ORDERS
    )
    db.commit()
    return len(SEED_ORDERS)


def create_app(database_url: Optional[str] = None, seed_on_startup: bool = True):
    return create_broker_app(
        title="Broker B",
        router=router,
        table=BrokerBOrder.__table__,
        database_url=database_url or settings.BROKER_B_DATABASE_URL,
        seed=seed_orders,
        seed_on_startup=seed_on_startup,
    )


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(create_app(), host="0.0.0.0", port=settings.BROKER_B_PORT)
