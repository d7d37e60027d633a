from collections import defaultdict, deque
from datetime import datetime

from tradesync.services.broker.base import AnnotatedTrade, TradeSide, UnifiedTrade
from tradesync.services.normalizer import raw_side

_EPS = 1e-9


def _minutes_between(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds() // 60), 0)


def annotate_trades(trades: list[UnifiedTrade]) -> list[AnnotatedTrade]:
    """Derive trade type, realized P/L, win flag and holding time by FIFO lot matching.

    Trades are replayed per (broker, symbol) in timestamp order, so a position
    held at one broker is never closed by an order at another. A buy first covers open
    short lots and a sell first closes open long lots; whatever is left opens a
    new lot. Only trades that close something get an outcome: their realized
    P/L, ``is_win = P/L > 0`` and the minutes since the oldest lot they closed.
    Trades that only open a position keep ``None`` outcome fields.
    Output order matches input order.
    """
    order = sorted(range(len(trades)), key=lambda i: trades[i].timestamp)

    # (broker_type, symbol) -> deque of lots {'qty': signed qty, 'price': float, 'opened': datetime}
    # a book only ever holds lots of one sign
    books = defaultdict(deque)
    annotated: list[AnnotatedTrade] = [None] * len(trades)  # type: ignore[list-item]

    for i in order:
        t = trades[i]
        side = raw_side(t.original_data, t.broker_type)
        book = books[(t.broker_type, t.symbol)]
        remaining = abs(t.quantity)
        realized = 0.0
        closed_any = False
        oldest = None

        if side == TradeSide.BUY.value:
            # cover shorts: short entry price - cover price
            while remaining > _EPS and book and book[0]["qty"] < 0:
                lot = book[0]
                take = min(remaining, -lot["qty"])
                realized += (lot["price"] - t.price) * take
                oldest = lot["opened"] if oldest is None else oldest
                closed_any = True
                lot["qty"] += take
                remaining -= take
                if abs(lot["qty"]) <= _EPS:
                    book.popleft()
            if remaining > _EPS:
                book.append({"qty": remaining, "price": t.price, "opened": t.timestamp})
        else:
            # close longs: exit price - entry price
            while remaining > _EPS and book and book[0]["qty"] > 0:
                lot = book[0]
                take = min(remaining, lot["qty"])
                realized += (t.price - lot["price"]) * take
                oldest = lot["opened"] if oldest is None else oldest
                closed_any = True
                lot["qty"] -= take
                remaining -= take
                if abs(lot["qty"]) <= _EPS:
                    book.popleft()
            if remaining > _EPS:
                book.append({"qty": -remaining, "price": t.price, "opened": t.timestamp})

        out = AnnotatedTrade(**vars(t), trade_type=side)
        if closed_any:
            out.profit_loss = round(realized, 6)
            out.is_win = out.profit_loss > 0
            out.duration = _minutes_between(oldest, t.timestamp)
        annotated[i] = out

    return annotated
