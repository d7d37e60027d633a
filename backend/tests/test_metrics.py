from types import SimpleNamespace

from tradesync.services.metrics import (
    calculate_performance_metrics,
    calculate_symbol_performance,
    round_minutes,
)


def t(symbol="AAPL", is_win=True, pnl=0.0, duration=0):
    return SimpleNamespace(symbol=symbol, is_win=is_win, profit_loss=pnl, duration=duration)


def test_one_win_one_loss():
    m = calculate_performance_metrics([t(is_win=True, pnl=100, duration=30), t(is_win=False, pnl=-50, duration=10)])
    assert m.overall.win_rate == "50.00%"
    assert m.overall.win_loss_ratio == 1
    assert m.financial.total_profit == "100.00"
    assert m.financial.total_loss == "-50.00"
    assert m.financial.net_profit == "50.00"
    assert m.financial.average_profit == "100.00"
    assert m.financial.average_loss == "-50.00"
    assert m.time.average_trade_duration == "20 minutes"
    assert m.time.average_winning_trade_duration == 30
    assert m.time.average_losing_trade_duration == 10


def test_empty_input():
    m = calculate_performance_metrics([])
    assert m.overall.total_trades == 0
    assert m.overall.win_rate == "0.00%"
    assert m.overall.win_loss_ratio == 0
    assert m.financial.total_profit == "0.00"
    assert m.financial.average_profit == "0.00"
    assert m.financial.average_loss == "0.00"
    assert m.time.average_trade_duration == "0 minutes"
    assert m.symbols == []


def test_no_losses_ratio_is_win_count():
    m = calculate_performance_metrics([t(pnl=5), t(pnl=7), t(pnl=1)])
    assert m.overall.win_loss_ratio == 3
    assert m.overall.win_rate == "100.00%"
    assert m.financial.total_loss == "0.00"


def test_ratio_is_rounded_to_two_places():
    m = calculate_performance_metrics([t(pnl=1), t(pnl=1), t(is_win=False, pnl=-1), t(is_win=False, pnl=-1), t(is_win=False, pnl=-1)])
    assert m.overall.win_loss_ratio == 0.67


def test_unknown_outcome_counts_as_loss():
    m = calculate_performance_metrics([t(is_win=None, pnl=None, duration=None), t(pnl=10)])
    assert m.overall.winning_trades == 1
    assert m.overall.losing_trades == 1
    assert m.overall.winning_trades + m.overall.losing_trades == m.overall.total_trades


def test_durations_round_half_up():
    assert round_minutes(2.5) == 3
    assert round_minutes(2.4) == 2
    m = calculate_performance_metrics([t(duration=1), t(duration=2)])
    assert m.time.average_trade_duration == "2 minutes"


def test_symbols_sorted_by_trade_count():
    trades = [t("A")] * 3 + [t("B")] + [t("C")] * 2
    stats = calculate_symbol_performance(trades)
    assert [s.trades for s in stats] == [3, 2, 1]
    assert [s.symbol for s in stats] == ["A", "C", "B"]
    assert sum(s.trades for s in stats) == len(trades)


def test_symbol_ties_keep_first_seen_order():
    stats = calculate_symbol_performance([t("X"), t("Y"), t("Z")])
    assert [s.symbol for s in stats] == ["X", "Y", "Z"]


def test_symbol_rollup_values():
    stats = calculate_symbol_performance([t("A", pnl=30), t("A", is_win=False, pnl=-10), t("A", pnl=5)])
    a = stats[0]
    assert (a.wins, a.losses) == (2, 1)
    assert a.total_profit == 35.0
    assert a.total_loss == -10.0
    assert a.win_rate == "66.67%"
    assert a.net_profit == "25.00"


def test_wire_names_are_camel_case():
    body = calculate_performance_metrics([t(pnl=1)]).model_dump(by_alias=True)
    assert set(body["overall"]) == {"totalTrades", "winningTrades", "losingTrades", "winRate", "winLossRatio"}
    assert "averageTradeDuration" in body["time"]
    assert "netProfit" in body["symbols"][0]


def test_money_never_renders_negative_zero():
    # 0.1 + 0.2 - 0.3 leaves a tiny positive residue; flip it negative
    m = calculate_performance_metrics([
        t("A", is_win=False, pnl=-(0.1 + 0.2 - 0.3)),
        t("B", is_win=True, pnl=0.001),
        t("B", is_win=False, pnl=-0.001),
    ])
    assert m.financial.total_loss == "0.00"
    assert m.financial.net_profit == "0.00"
    assert m.financial.average_loss == "0.00"
    assert all(s.net_profit == "0.00" for s in m.symbols)
