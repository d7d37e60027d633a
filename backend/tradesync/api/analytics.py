"""Analytics routes: performance metrics and LLM insights over synced trades."""

import asyncio

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tradesync.core.auth import TokenClaims, get_current_claims
from tradesync.core.database import get_db
from tradesync.core.errors import NotFoundError
from tradesync.schemas.analytics import AnalyticsResponse, MetricsResponse
from tradesync.services.llm.insights import generate_trading_insights
from tradesync.services.llm.providers import LLMProvider
from tradesync.services.metrics import calculate_performance_metrics
from tradesync.services.repository import TradeLogRepository

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def get_insight_provider() -> LLMProvider | None:
    """None means: build one from settings. Tests override this dependency."""
    return None


def _closed_trades(db: Session, user_id: int):
    trades = TradeLogRepository(db).list_closed_for_user(user_id)
    if not trades:
        raise NotFoundError("No trade logs found for analysis")
    return trades


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
    provider: LLMProvider | None = Depends(get_insight_provider),
):
    loop = asyncio.get_running_loop()
    trades = await loop.run_in_executor(None, _closed_trades, db, claims.user_id)
    metrics = calculate_performance_metrics(trades)
    insights = await generate_trading_insights(trades, provider=provider)
    return AnalyticsResponse(
        metrics=metrics,
        insights=insights.insights,
        generated_at=insights.generated_at,
    )


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    return MetricsResponse(metrics=calculate_performance_metrics(_closed_trades(db, claims.user_id)))
