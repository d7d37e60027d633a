"""
Broker fan-out: one concurrent fetch per authorized broker.

A broker that fails contributes an empty list; the fan-out itself never
raises because of a single source.
"""

import asyncio
import logging

from tradesync.core.auth import create_access_token
from tradesync.core.config import settings
from tradesync.core.errors import SourceUnavailableError

from .base import BrokerAdapter, BrokerAAdapter, BrokerBAdapter

logger = logging.getLogger(__name__)


class TradeAggregator:
    """
    Holds one adapter per broker code and fetches from them in parallel.
    """

    def __init__(self, adapters: list[BrokerAdapter]):
        self._adapters: dict[str, BrokerAdapter] = {a.broker_code: a for a in adapters}

    @staticmethod
    def broker_token(user_id: int, broker_codes: list[str]) -> str:
        """Short-lived token forwarded to the broker services."""
        return create_access_token(
            {"sub": str(user_id), "brokers": list(broker_codes)},
            expires_minutes=settings.BROKER_TOKEN_EXPIRE_MINUTES,
        )

    async def _fetch_one(self, adapter: BrokerAdapter, token: str) -> list[dict]:
        try:
            trades = await adapter.fetch_trades(token)
        except SourceUnavailableError as e:
            logger.warning("Error fetching data from %s: %s", adapter.broker_code, e.reason)
            return []
        except Exception:
            logger.warning("Error fetching data from %s", adapter.broker_code, exc_info=True)
            return []
        logger.info("Fetched %d trades from %s", len(trades), adapter.broker_code)
        return trades

    async def fetch_all(self, user_id: int, broker_codes: list[str]) -> dict[str, list[dict]]:
        """Fetch raw trades from every authorized broker.

        Every known broker appears in the result; unauthorized or unknown
        ones map to an empty list without being contacted.
        """
        results: dict[str, list[dict]] = {code: [] for code in self._adapters}
        authorized = [code for code in self._adapters if code in broker_codes]
        if not authorized:
            return results

        token = self.broker_token(user_id, authorized)
        fetched = await asyncio.gather(
            *(self._fetch_one(self._adapters[code], token) for code in authorized),
            return_exceptions=True,
        )
        for code, outcome in zip(authorized, fetched):
            if isinstance(outcome, BaseException):
                logger.warning("Broker %s fetch ended with %r", code, outcome)
                continue
            results[code] = outcome
        return results


def build_default_aggregator() -> TradeAggregator:
    timeout = settings.BROKER_TIMEOUT_SECONDS
    return TradeAggregator([
        BrokerAAdapter(settings.BROKER_A_API, timeout=timeout),
        BrokerBAdapter(settings.BROKER_B_API, timeout=timeout),
    ])


def get_aggregator() -> TradeAggregator:
    """FastAPI dependency; tests override it with mock transports."""
    return build_default_aggregator()
