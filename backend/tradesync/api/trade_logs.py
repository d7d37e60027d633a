"""Trade-log routes: live broker fan-out, sync into storage, stored history."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tradesync.core.auth import TokenClaims, get_current_claims, ensure_scope
from tradesync.core.database import get_db
from tradesync.models.broker import Broker
from tradesync.schemas.trade import SyncResponse, TradeLogOut, UnifiedTradeOut
from tradesync.services.broker.aggregator import TradeAggregator, get_aggregator
from tradesync.services.matching import annotate_trades
from tradesync.services.normalizer import normalize_all
from tradesync.services.repository import TradeLogRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trade-logs", tags=["trade-logs"])


def _requested_brokers(claims: TokenClaims, brokers: Optional[list[str]]) -> list[str]:
    if brokers:
        ensure_scope(claims, brokers)
        return brokers
    return claims.brokers


@router.get("")
async def list_broker_trades(
    brokers: Optional[list[str]] = Query(None),
    claims: TokenClaims = Depends(get_current_claims),
    aggregator: TradeAggregator = Depends(get_aggregator),
):
    """Raw trades from every authorized broker, in each broker's own shape."""
    return await aggregator.fetch_all(claims.user_id, _requested_brokers(claims, brokers))


@router.get("/unified", response_model=list[UnifiedTradeOut])
async def list_unified_trades(
    brokers: Optional[list[str]] = Query(None),
    claims: TokenClaims = Depends(get_current_claims),
    aggregator: TradeAggregator = Depends(get_aggregator),
):
    raw = await aggregator.fetch_all(claims.user_id, _requested_brokers(claims, brokers))
    return [UnifiedTradeOut.model_validate(t) for t in normalize_all(raw)]


def _store_new_trades(db: Session, user_id: int, annotated: list) -> int:
    broker_ids = {b.code: b.id for b in db.query(Broker).all()}
    return TradeLogRepository(db).insert_new(user_id, annotated, broker_ids)


@router.post("/sync", response_model=SyncResponse)
async def sync_trades(
    claims: TokenClaims = Depends(get_current_claims),
    aggregator: TradeAggregator = Depends(get_aggregator),
    db: Session = Depends(get_db),
):
    """Fetch, normalize, annotate and store trades not synced before."""
    raw = await aggregator.fetch_all(claims.user_id, claims.brokers)
    unified = normalize_all(raw)
    annotated = annotate_trades(unified)

    # database work is blocking; keep it off the event loop
    loop = asyncio.get_running_loop()
    inserted = await loop.run_in_executor(None, _store_new_trades, db, claims.user_id, annotated)

    return SyncResponse(
        message=f"Synced {inserted} new trades",
        total_trades_fetched=len(unified),
        synced=inserted,
    )


@router.get("/stored", response_model=list[TradeLogOut])
def list_stored_trades(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return TradeLogRepository(db).list_for_user(claims.user_id)
