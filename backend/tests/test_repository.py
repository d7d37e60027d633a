from tradesync.models.trade_log import TradeLog
from tradesync.models.user import User
from tradesync.services.broker.base import AnnotatedTrade
from tradesync.services.repository import TradeLogRepository

from conftest import at


def annotated(id, broker="brokerA", is_win=None, pnl=None, minute=0):
    return AnnotatedTrade(
        id=id,
        symbol="AAPL",
        quantity=1.0,
        price=10.0,
        timestamp=at(minute),
        broker_type=broker,
        original_data={"tradeId": id},
        profit_loss=pnl,
        is_win=is_win,
    )


def make_user(db, username="repo-user"):
    user = User(username=username, email=f"{username}@example.com", password_hash="x")
    db.add(user)
    db.commit()
    return user


def test_insert_skips_already_synced_trades(db):
    user = make_user(db)
    repo = TradeLogRepository(db)
    trades = [annotated("1"), annotated("2")]

    assert repo.insert_new(user.id, trades, {}) == 2
    assert repo.insert_new(user.id, trades + [annotated("3")], {}) == 1
    assert db.query(TradeLog).count() == 3


def test_same_id_from_another_broker_is_a_different_trade(db):
    user = make_user(db)
    repo = TradeLogRepository(db)
    assert repo.insert_new(user.id, [annotated("1", "brokerA"), annotated("1", "brokerB")], {}) == 2


def test_duplicates_within_one_batch(db):
    user = make_user(db)
    assert TradeLogRepository(db).insert_new(user.id, [annotated("1"), annotated("1")], {}) == 1


def test_closed_trades_only(db):
    user = make_user(db)
    repo = TradeLogRepository(db)
    repo.insert_new(user.id, [
        annotated("open", minute=0),
        annotated("won", is_win=True, pnl=5.0, minute=10),
        annotated("lost", is_win=False, pnl=-2.0, minute=5),
    ], {})

    assert [t.trade_id for t in repo.list_for_user(user.id)] == ["open", "lost", "won"]
    assert [t.trade_id for t in repo.list_closed_for_user(user.id)] == ["lost", "won"]
    assert repo.list_for_user(user.id + 1) == []
