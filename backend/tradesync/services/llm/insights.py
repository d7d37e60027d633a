"""Insight requester: turns a trade summary into an analyst-style narrative.

The provider call is made exactly once; any failure is raised to the caller
as InsightProviderError.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Optional, Sequence

from tradesync.core.config import settings
from tradesync.core.errors import InsightProviderError
from tradesync.schemas.analytics import (
    InsightsResponse,
    ProfitLossSummary,
    SymbolCount,
    TradeSummary,
)
from tradesync.services.llm.providers import LLMProvider, estimate_cost, get_provider
from tradesync.services.metrics import round_minutes, split_outcomes

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional trading analyst. "
    "Analyze the provided trading data and generate insights."
)

HUMAN_PROMPT = (
    "Here is my trading data summary: {trade_summary}. "
    "Please provide insights on my trading performance and suggestions for improvement."
)

TOP_SYMBOLS = 5


def prepare_trade_summary(trades: Sequence) -> TradeSummary:
    winning, losing = split_outcomes(trades)
    total = len(trades)

    win_rate = len(winning) / total * 100 if total else 0.0
    total_profit = sum((t.profit_loss or 0.0) for t in winning)
    total_loss = sum((t.profit_loss or 0.0) for t in losing)
    avg_duration = sum((t.duration or 0) for t in trades) / total if total else 0.0

    # Counter.most_common keeps first-seen order for equal counts
    counts = Counter(t.symbol for t in trades)
    top = [SymbolCount(symbol=s, count=c) for s, c in counts.most_common(TOP_SYMBOLS)]

    return TradeSummary(
        total_trades=total,
        win_rate=f"{win_rate:.2f}%",
        profit_loss=ProfitLossSummary(
            total_profit=round(total_profit, 2),
            total_loss=round(total_loss, 2),
            net_profit=round(total_profit + total_loss, 2),
        ),
        avg_trade_duration=f"{round_minutes(avg_duration)} minutes",
        top_symbols=top,
    )


def build_messages(summary: TradeSummary) -> list[dict]:
    payload = json.dumps(summary.model_dump(by_alias=True))
    return [{"role": "user", "content": HUMAN_PROMPT.format(trade_summary=payload)}]


def default_provider() -> LLMProvider:
    if not settings.LLM_API_KEY:
        raise InsightProviderError("Insight provider is not configured (set LLM_API_KEY)")
    try:
        return get_provider(settings.LLM_PROVIDER, settings.LLM_API_KEY)
    except ValueError as e:
        raise InsightProviderError(str(e)) from e


async def generate_trading_insights(
    trades: Sequence,
    provider: Optional[LLMProvider] = None,
) -> InsightsResponse:
    summary = prepare_trade_summary(trades)
    provider = provider or default_provider()

    try:
        reply, tokens_in, tokens_out = await provider.chat(
            messages=build_messages(summary),
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            system_prompt=SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.error("Error generating insights with %s: %s", provider.name, e, exc_info=True)
        raise InsightProviderError(f"Insight generation failed: {str(e)[:300]}") from e

    logger.info(
        "Insights generated by %s (tokens in=%d out=%d, est. $%.5f)",
        provider.name, tokens_in, tokens_out,
        estimate_cost(provider.name, settings.LLM_MODEL, tokens_in, tokens_out),
    )
    return InsightsResponse(insights=reply, generated_at=datetime.now(timezone.utc))
