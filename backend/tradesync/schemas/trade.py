"""Pydantic schemas for trade-log endpoints (camelCase on the wire)."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UnifiedTradeOut(_Camel):
    id: str
    symbol: str
    quantity: float
    price: float
    timestamp: datetime
    broker_type: str
    original_data: dict[str, Any] = {}


class TradeLogOut(_Camel):
    id: int
    trade_id: str
    broker_type: str
    symbol: str
    quantity: float
    price: float
    timestamp: datetime
    original_data: Optional[dict[str, Any]] = None
    trade_type: Optional[str] = None
    profit_loss: Optional[float] = None
    is_win: Optional[bool] = None
    duration: Optional[int] = None
    created_at: Optional[datetime] = None


class SyncResponse(_Camel):
    message: str
    total_trades_fetched: int
    synced: int
