"""
Performance metrics over annotated trades.

Works on anything exposing ``symbol``, ``is_win``, ``profit_loss`` and
``duration`` (AnnotatedTrade dataclasses or TradeLog rows). A trade counts as
winning only when ``is_win`` is true; everything else is a loss.
"""

import math
from typing import Iterable, Sequence

from tradesync.schemas.analytics import (
    FinancialMetrics,
    OverallMetrics,
    PerformanceMetrics,
    SymbolStats,
    TimeMetrics,
)


def _money(value: float) -> str:
    # adding 0.0 turns a rounded -0.0 into 0.0
    return f"{round(value, 2) + 0.0:.2f}"


def _percent(part: int, whole: int) -> str:
    rate = part / whole * 100 if whole > 0 else 0.0
    return f"{rate:.2f}%"


def round_minutes(value: float) -> int:
    """Round half up, so 2.5 minutes -> 3."""
    return int(math.floor(value + 0.5))


def _sum_pnl(trades: Iterable) -> float:
    return sum((t.profit_loss or 0.0) for t in trades)


def _mean_duration(trades: Sequence) -> float:
    if not trades:
        return 0.0
    return sum((t.duration or 0) for t in trades) / len(trades)


def split_outcomes(trades: Sequence) -> tuple[list, list]:
    winning = [t for t in trades if t.is_win]
    losing = [t for t in trades if not t.is_win]
    return winning, losing


def calculate_symbol_performance(trades: Sequence) -> list[SymbolStats]:
    """Per-symbol rollup, most traded first (ties keep first-seen order)."""
    groups: dict[str, dict] = {}
    for trade in trades:
        stats = groups.setdefault(trade.symbol, {
            "symbol": trade.symbol,
            "trades": 0,
            "wins": 0,
            "losses": 0,
            "total_profit": 0.0,
            "total_loss": 0.0,
        })
        stats["trades"] += 1
        if trade.is_win:
            stats["wins"] += 1
            stats["total_profit"] += trade.profit_loss or 0.0
        else:
            stats["losses"] += 1
            stats["total_loss"] += trade.profit_loss or 0.0

    rollup = [
        SymbolStats(
            symbol=s["symbol"],
            trades=s["trades"],
            wins=s["wins"],
            losses=s["losses"],
            total_profit=round(s["total_profit"], 2),
            total_loss=round(s["total_loss"], 2),
            win_rate=_percent(s["wins"], s["trades"]),
            net_profit=_money(s["total_profit"] + s["total_loss"]),
        )
        for s in groups.values()
    ]
    # sorted() is stable
    return sorted(rollup, key=lambda s: s.trades, reverse=True)


def calculate_performance_metrics(trades: Sequence) -> PerformanceMetrics:
    winning, losing = split_outcomes(trades)
    total = len(trades)

    if losing:
        win_loss_ratio = round(len(winning) / len(losing), 2)
    else:
        win_loss_ratio = len(winning)

    total_profit = _sum_pnl(winning)
    total_loss = _sum_pnl(losing)
    net_profit = total_profit + total_loss

    return PerformanceMetrics(
        overall=OverallMetrics(
            total_trades=total,
            winning_trades=len(winning),
            losing_trades=len(losing),
            win_rate=_percent(len(winning), total),
            win_loss_ratio=win_loss_ratio,
        ),
        financial=FinancialMetrics(
            total_profit=_money(total_profit),
            total_loss=_money(total_loss),
            net_profit=_money(net_profit),
            average_profit=_money(total_profit / len(winning) if winning else 0.0),
            average_loss=_money(total_loss / len(losing) if losing else 0.0),
        ),
        time=TimeMetrics(
            average_trade_duration=f"{round_minutes(_mean_duration(trades))} minutes",
            average_winning_trade_duration=round_minutes(_mean_duration(winning)),
            average_losing_trade_duration=round_minutes(_mean_duration(losing)),
        ),
        symbols=calculate_symbol_performance(trades),
    )
