"""Map broker-native trade records onto the unified trade shape. No I/O."""

import logging
from datetime import datetime, timezone
from typing import Any

from tradesync.services.broker.base import BrokerCode, UnifiedTrade

logger = logging.getLogger(__name__)

# unified field -> native field, per broker
FIELD_MAPS: dict[str, dict[str, str]] = {
    BrokerCode.BROKER_A.value: {
        "id": "tradeId",
        "symbol": "symbol",
        "quantity": "quantity",
        "price": "price",
        "timestamp": "timestamp",
        "side": "side",
    },
    BrokerCode.BROKER_B.value: {
        "id": "orderId",
        "symbol": "asset",
        "quantity": "amount",
        "price": "cost",
        "timestamp": "executedAt",
        "side": "action",
    },
}


def parse_timestamp(value: Any) -> datetime:
    """Coerce an ISO-8601 string, datetime or epoch-milliseconds value to aware UTC."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def raw_side(raw: dict, broker_type: str) -> str:
    """The buy/sell marker of a native record; records without one are buys."""
    native = FIELD_MAPS[broker_type]["side"]
    side = str(raw.get(native) or "buy").strip().lower()
    return "sell" if side == "sell" else "buy"


def normalize_trade(raw: dict, broker_type: str) -> UnifiedTrade:
    try:
        fields = FIELD_MAPS[broker_type]
    except KeyError:
        raise ValueError(f"Unknown broker type: {broker_type}")

    return UnifiedTrade(
        id=str(raw[fields["id"]]),
        symbol=str(raw[fields["symbol"]]),
        quantity=float(raw[fields["quantity"]]),
        price=float(raw[fields["price"]]),
        timestamp=parse_timestamp(raw[fields["timestamp"]]),
        broker_type=broker_type,
        original_data=dict(raw),
    )


def normalize_all(all_trades: dict[str, list[dict]]) -> list[UnifiedTrade]:
    """Normalize an aggregator result, broker A first then broker B.

    Records missing a required field or carrying an unparseable value are
    logged and left out.
    """
    unified = []
    for broker_type in FIELD_MAPS:
        for raw in all_trades.get(broker_type, []):
            try:
                unified.append(normalize_trade(raw, broker_type))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed %s record %r: %s", broker_type, raw, e)
    return unified
