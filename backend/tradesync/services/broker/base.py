"""
Broker adapter interface and the trade records that flow through the pipeline.

Raw broker records stay plain dicts in their native shape until the
normalizer turns them into :class:`UnifiedTrade`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

import httpx

from tradesync.core.errors import SourceUnavailableError


# ── Enums ──────────────────────────────────────────────

class BrokerCode(str, Enum):
    BROKER_A = "brokerA"
    BROKER_B = "brokerB"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


# ── Data Classes ───────────────────────────────────────

@dataclass
class UnifiedTrade:
    id: str
    symbol: str
    quantity: float
    price: float
    timestamp: datetime
    broker_type: str
    original_data: dict = field(default_factory=dict)


@dataclass
class AnnotatedTrade(UnifiedTrade):
    trade_type: str = TradeSide.BUY.value
    profit_loss: Optional[float] = None
    is_win: Optional[bool] = None
    duration: Optional[int] = None       # minutes


# ── Abstract Base ──────────────────────────────────────

class BrokerAdapter(ABC):
    """One external trade source."""

    broker_code: str = "unknown"

    @abstractmethod
    async def fetch_trades(self, token: str) -> list[dict]:
        """Return the broker's trade list in its native shape.

        Raises SourceUnavailableError when the broker cannot be read.
        """
        ...


class HttpBrokerAdapter(BrokerAdapter):
    """
    Broker source reached with one bearer-authenticated GET.

    Args:
        endpoint:  trade-listing URL of the broker service
        timeout:   transport timeout in seconds
        transport: optional httpx transport (tests inject ``httpx.MockTransport``)
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport

    def _headers(self, token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    async def fetch_trades(self, token: str) -> list[dict]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.get(self._endpoint, headers=self._headers(token))
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(self.broker_code, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(self.broker_code, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(self.broker_code, "response is not valid JSON") from e

        if not isinstance(data, list):
            raise SourceUnavailableError(self.broker_code, "expected a JSON array of trades")
        return [item for item in data if isinstance(item, dict)]


class BrokerAAdapter(HttpBrokerAdapter):
    broker_code = BrokerCode.BROKER_A.value


class BrokerBAdapter(HttpBrokerAdapter):
    broker_code = BrokerCode.BROKER_B.value
