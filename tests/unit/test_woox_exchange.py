"""
Unit Tests for the WOO X Connector

These tests verify that WooxExchange:
- Uses the account total when the account endpoint reports one
- Aggregates paginated client trades when it does not
- Falls back to the public estimate on rejected or missing credentials
- Returns a degraded "error" result when every source fails
- Signs private requests with the canonical query string

Run with:
    pytest tests/unit/test_woox_exchange.py -v
"""

from decimal import Decimal

import pytest

from core.exceptions import InvalidCredential, TransportError
from core.schemas import ApiKeyCredential, SourceTier, VolumeQuery
from exchanges.woox import WooxExchange
from exchanges.woox.signing import canonical_query, generate_signature

ACCOUNT_PATH = "/v3/account/info"
TRADES_PATH = "/v1/client/trades"
MARKET_TRADES_PATH = "/v1/public/market_trades"
INFO_PATH = "/v1/public/info"


# ============================================
# Fixtures & Helpers
# ============================================

@pytest.fixture
def credential():
    return ApiKeyCredential(api_key="test-key", api_secret="test-secret")


@pytest.fixture
def five_days():
    return VolumeQuery.last_days(5)


def make_exchange(credential, config, transport, monkeypatch):
    exchange = WooxExchange(credential, config=config)
    monkeypatch.setattr(exchange.client, "_get", transport)
    return exchange


def trade_row(i):
    return {
        "symbol": "SPOT_BTC_USDT",
        "side": "BUY" if i % 2 else "SELL",
        "executed_price": f"{100 + i}.25",
        "executed_quantity": "0.01",
        "executed_timestamp": f"{1704067200 + i}.123",
    }


def paged_trades(sizes):
    """Handler serving client trade pages of the given sizes."""
    pages = []
    offset = 0
    for size in sizes:
        pages.append([trade_row(offset + i) for i in range(size)])
        offset += size

    def handler(args):
        page = int(args.get("page", 1))
        rows = pages[page - 1] if page <= len(pages) else []
        return {"success": True, "rows": rows}

    return handler, [row for page in pages for row in page]


def public_trades(args):
    return {
        "success": True,
        "rows": [
            {"symbol": args["symbol"], "side": "BUY", "executed_price": 100, "executed_quantity": 1,
             "executed_timestamp": "1704067200.000"},
            {"symbol": args["symbol"], "side": "SELL", "price": "50", "size": "2",
             "executed_timestamp": "1704067201.000"},
        ],
    }


# ============================================
# Authenticated Tiers
# ============================================

class TestAccountSummaryTier:
    """Tests for the account-summary tier"""

    @pytest.mark.asyncio
    async def test_account_total_is_used_exactly(self, credential, test_settings, five_days,
                                                 fake_transport, monkeypatch):
        trades_handler, _ = paged_trades([3])
        transport = fake_transport({
            ACCOUNT_PATH: {"success": True, "data": {"total_volume": "123456.78"}},
            TRADES_PATH: trades_handler,
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.AUTHENTICATED
        assert result.total_volume_usd == Decimal("123456.78")
        assert len(result.sample_trades) == 3
        assert result.estimated_days is None
        # One unpaged sample request, no pagination
        sample_calls = transport.calls_to(TRADES_PATH)
        assert len(sample_calls) == 1
        assert "page" not in sample_calls[0][1]

    @pytest.mark.asyncio
    async def test_sample_failure_keeps_account_total(self, credential, test_settings, five_days,
                                                      fake_transport, monkeypatch):
        transport = fake_transport({
            ACCOUNT_PATH: {"success": True, "data": {"total_volume": 42}},
            TRADES_PATH: TransportError("HTTP 500 on /v1/client/trades", status=500),
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.AUTHENTICATED
        assert result.total_volume_usd == Decimal("42")
        assert result.sample_trades == []

    @pytest.mark.asyncio
    async def test_requests_are_signed(self, credential, test_settings, five_days,
                                       fake_transport, monkeypatch):
        transport = fake_transport({
            ACCOUNT_PATH: {"success": True, "data": {"total_volume": "1"}},
            TRADES_PATH: {"success": True, "rows": []},
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        await exchange.get_historical_volume(five_days)

        for path, args, headers, query in transport.calls:
            assert headers["x-api-key"] == "test-key"
            assert query == canonical_query(args)
            assert headers["x-api-signature"] == generate_signature(args, "test-secret")
            assert "test-secret" not in query

    @pytest.mark.asyncio
    async def test_trade_range_is_sent_in_seconds(self, credential, test_settings, five_days,
                                                  fake_transport, monkeypatch):
        transport = fake_transport({
            ACCOUNT_PATH: {"success": True, "data": {"total_volume": "1"}},
            TRADES_PATH: {"success": True, "rows": []},
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        await exchange.get_historical_volume(five_days)

        args = transport.calls_to(TRADES_PATH)[0][1]
        assert int(args["start_time"]) == int(five_days.start_time.timestamp())
        assert int(args["end_time"]) == int(five_days.end_time.timestamp())
        assert len(args["timestamp"]) == 13


class TestTradeAggregationTier:
    """Tests for the trade-aggregation tier"""

    @pytest.mark.asyncio
    async def test_sums_all_pages(self, credential, test_settings, five_days,
                                  fake_transport, monkeypatch):
        trades_handler, rows = paged_trades([100, 100, 37])
        transport = fake_transport({
            ACCOUNT_PATH: {"success": True, "data": {"user_id": 1}},
            TRADES_PATH: trades_handler,
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        expected = sum(
            (Decimal(row["executed_price"]) * Decimal(row["executed_quantity"]) for row in rows),
            Decimal("0")
        )
        assert result.source_tier == SourceTier.AUTHENTICATED
        assert result.total_volume_usd == expected
        assert len(result.sample_trades) == 237
        assert transport.count(TRADES_PATH) == 3

    @pytest.mark.asyncio
    async def test_page_failure_falls_through_to_public(self, credential, test_settings, five_days,
                                                        fake_transport, monkeypatch):
        def flaky(args):
            if args.get("page") == "2":
                raise TransportError("HTTP 502 on /v1/client/trades", status=502)
            return {"success": True, "rows": [trade_row(i) for i in range(100)]}

        transport = fake_transport({
            ACCOUNT_PATH: TransportError("HTTP 500 on /v3/account/info", status=500),
            TRADES_PATH: flaky,
            MARKET_TRADES_PATH: public_trades,
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.PUBLIC


# ============================================
# Public Estimate
# ============================================

class TestPublicEstimateTier:
    """Tests for the public-estimate tier"""

    @pytest.mark.asyncio
    async def test_rejected_credential_goes_straight_to_public(self, credential, test_settings, five_days,
                                                               fake_transport, monkeypatch):
        transport = fake_transport({
            ACCOUNT_PATH: InvalidCredential("HTTP 401 on /v3/account/info"),
            TRADES_PATH: InvalidCredential("HTTP 401 on /v1/client/trades"),
            MARKET_TRADES_PATH: public_trades,
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        # 3 markets × 200 USD daily × multiplier 10 × 5 days
        assert result.source_tier == SourceTier.PUBLIC
        assert result.total_volume_usd == Decimal("30000")
        assert result.estimated_days == 5
        assert transport.count(TRADES_PATH) == 0
        assert transport.count(MARKET_TRADES_PATH) == 3

    @pytest.mark.asyncio
    async def test_no_credential_uses_public_only(self, test_settings, five_days,
                                                  fake_transport, monkeypatch):
        transport = fake_transport({MARKET_TRADES_PATH: public_trades})
        exchange = make_exchange(None, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.PUBLIC
        assert {call[0] for call in transport.calls} == {MARKET_TRADES_PATH}

    @pytest.mark.asyncio
    async def test_one_failing_market_is_skipped(self, test_settings, five_days,
                                                 fake_transport, monkeypatch):
        def partial(args):
            if args["symbol"] == "PERP_BTC_USDT":
                raise TransportError("HTTP 503 on /v1/public/market_trades", status=503)
            return public_trades(args)

        transport = fake_transport({MARKET_TRADES_PATH: partial})
        exchange = make_exchange(None, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.PUBLIC
        assert result.total_volume_usd == Decimal("20000")

    @pytest.mark.asyncio
    async def test_one_rejected_market_is_skipped(self, test_settings, five_days,
                                                  fake_transport, monkeypatch):
        def partial(args):
            if args["symbol"] == "SPOT_BTC_USDT":
                raise InvalidCredential("HTTP 403 on /v1/public/market_trades")
            return public_trades(args)

        transport = fake_transport({MARKET_TRADES_PATH: partial})
        exchange = make_exchange(None, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.PUBLIC
        assert result.total_volume_usd == Decimal("20000")
        assert transport.count(MARKET_TRADES_PATH) == 3

    @pytest.mark.asyncio
    async def test_sample_is_capped(self, test_settings, five_days, fake_transport, monkeypatch):
        config = test_settings.model_copy(update={"woox_sample_size": 4})
        transport = fake_transport({MARKET_TRADES_PATH: public_trades})
        exchange = make_exchange(None, config, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert len(result.sample_trades) == 4


# ============================================
# Total Outage
# ============================================

class TestTotalOutage:
    """Tests for the degraded placeholder"""

    @pytest.mark.asyncio
    async def test_every_source_failing_yields_error(self, credential, test_settings, five_days,
                                                     fake_transport, monkeypatch):
        outage = TransportError("connection refused")
        transport = fake_transport({
            ACCOUNT_PATH: outage,
            TRADES_PATH: outage,
            MARKET_TRADES_PATH: outage,
        })
        exchange = make_exchange(credential, test_settings, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.ERROR
        assert result.total_volume_usd >= 0
        assert result.error.startswith("TransportError")

    @pytest.mark.asyncio
    async def test_random_placeholder_bounded_by_woox_ceiling(self, test_settings, five_days,
                                                              fake_transport, monkeypatch):
        config = test_settings.model_copy(update={"degraded_volume_mode": "random"})
        transport = fake_transport({MARKET_TRADES_PATH: TransportError("down")})
        exchange = make_exchange(None, config, transport, monkeypatch)

        result = await exchange.get_historical_volume(five_days)

        assert result.source_tier == SourceTier.ERROR
        assert 0 <= result.total_volume_usd <= Decimal(str(config.woox_placeholder_ceiling))


class TestMarketSummary:
    """Tests for get_market_summary"""

    @pytest.mark.asyncio
    async def test_returns_public_info(self, test_settings, fake_transport, monkeypatch):
        transport = fake_transport({INFO_PATH: {"success": True, "rows": [{"symbol": "SPOT_BTC_USDT"}]}})
        exchange = make_exchange(None, test_settings, transport, monkeypatch)

        info = await exchange.get_market_summary()

        assert info["rows"][0]["symbol"] == "SPOT_BTC_USDT"

    @pytest.mark.asyncio
    async def test_rejected_payload_raises(self, test_settings, fake_transport, monkeypatch):
        transport = fake_transport({INFO_PATH: {"success": False, "message": "maintenance"}})
        exchange = make_exchange(None, test_settings, transport, monkeypatch)

        with pytest.raises(TransportError):
            await exchange.get_market_summary()
