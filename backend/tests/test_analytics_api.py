import httpx
import pytest

from tradesync.api.analytics import get_insight_provider
from tradesync.services.broker.aggregator import TradeAggregator, get_aggregator
from tradesync.services.broker.base import BrokerAAdapter, BrokerBAdapter
from tradesync.services.llm.providers import LLMProvider

from conftest import auth_header
from test_trade_logs_api import A_TRADES, B_TRADES


class FakeProvider(LLMProvider):
    name = "fake"

    def __init__(self, error=None):
        self.error = error
        self.prompts = []

    async def chat(self, messages, model, temperature, max_tokens, system_prompt):
        self.prompts.append(messages[0]["content"])
        if self.error:
            raise self.error
        return "Cut losers faster.", 100, 20


@pytest.fixture
def synced_token(client, register, app):
    aggregator = TradeAggregator([
        BrokerAAdapter("http://a.test/x", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=A_TRADES))),
        BrokerBAdapter("http://b.test/x", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=B_TRADES))),
    ])
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    token, _ = register()
    assert client.post("/api/trade-logs/sync", headers=auth_header(token)).json()["synced"] == 4
    return token


def test_metrics_over_closed_trades(client, synced_token):
    r = client.get("/api/analytics/metrics", headers=auth_header(synced_token))
    assert r.status_code == 200
    m = r.json()["metrics"]
    assert m["overall"]["totalTrades"] == 2
    assert m["overall"]["winRate"] == "50.00%"
    assert m["overall"]["winLossRatio"] == 1
    assert m["financial"]["totalProfit"] == "100.00"
    assert m["financial"]["totalLoss"] == "-1000.00"
    assert m["financial"]["netProfit"] == "-900.00"
    assert m["time"]["averageTradeDuration"] == "25 minutes"
    # equal counts keep timestamp order; the BTC close comes first
    assert [s["symbol"] for s in m["symbols"]] == ["BTC", "AAPL"]


def test_analytics_with_insights(client, app, synced_token):
    provider = FakeProvider()
    app.dependency_overrides[get_insight_provider] = lambda: provider

    r = client.get("/api/analytics", headers=auth_header(synced_token))
    assert r.status_code == 200
    body = r.json()
    assert body["insights"] == "Cut losers faster."
    assert "generatedAt" in body
    assert body["metrics"]["overall"]["totalTrades"] == 2
    assert len(provider.prompts) == 1
    assert '"totalTrades": 2' in provider.prompts[0]


def test_provider_failure_fails_the_request(client, app, synced_token):
    app.dependency_overrides[get_insight_provider] = lambda: FakeProvider(error=RuntimeError("quota exceeded"))

    r = client.get("/api/analytics", headers=auth_header(synced_token))
    assert r.status_code == 502
    body = r.json()
    assert body["status"] == "error"
    assert "quota exceeded" in body["message"]


def test_no_trades_is_not_found(client, app, register):
    provider = FakeProvider()
    app.dependency_overrides[get_insight_provider] = lambda: provider
    token, _ = register()

    for path in ("/api/analytics", "/api/analytics/metrics"):
        r = client.get(path, headers=auth_header(token))
        assert r.status_code == 404
        assert r.json()["message"] == "No trade logs found for analysis"
    assert provider.prompts == []


def test_analytics_requires_authentication(client):
    assert client.get("/api/analytics").status_code == 401
