"""Pydantic schemas for analytics responses (camelCase on the wire)."""

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Performance metrics ────────────────────────────────

class OverallMetrics(CamelModel):
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: str
    win_loss_ratio: Union[int, float]


class FinancialMetrics(CamelModel):
    total_profit: str
    total_loss: str
    net_profit: str
    average_profit: str
    average_loss: str


class TimeMetrics(CamelModel):
    average_trade_duration: str
    average_winning_trade_duration: int
    average_losing_trade_duration: int


class SymbolStats(CamelModel):
    symbol: str
    trades: int
    wins: int
    losses: int
    total_profit: float
    total_loss: float
    win_rate: str
    net_profit: str


class PerformanceMetrics(CamelModel):
    overall: OverallMetrics
    financial: FinancialMetrics
    time: TimeMetrics
    symbols: list[SymbolStats]


# ── Insight summary ────────────────────────────────────

class ProfitLossSummary(CamelModel):
    total_profit: float
    total_loss: float
    net_profit: float


class SymbolCount(CamelModel):
    symbol: str
    count: int


class TradeSummary(CamelModel):
    total_trades: int
    win_rate: str
    profit_loss: ProfitLossSummary
    avg_trade_duration: str
    top_symbols: list[SymbolCount]


class InsightsResponse(CamelModel):
    insights: str
    generated_at: datetime


# ── Endpoint responses ─────────────────────────────────

class AnalyticsResponse(CamelModel):
    metrics: PerformanceMetrics
    insights: str
    generated_at: datetime


class MetricsResponse(CamelModel):
    metrics: PerformanceMetrics
