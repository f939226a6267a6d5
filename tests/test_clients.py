import json

import httpx
import pytest

from topwallets_bot.clients.birdeye import BirdeyeClient
from topwallets_bot.clients.dexscreener import DexScreenerClient
from topwallets_bot.clients.topwallets import TopWalletsClient, clamp_count
from topwallets_bot.errors import UpstreamError, ValidationError

TOKEN = "97RggLo3zV5kFGYW4yoQTxr4Xkz4Vg2WPHzNYXXWpump"
WALLET = "DNfuF1L62WWyW3pNakVkyGGFzVVhj4Yr52jSmdTyeBHm"


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)


def topwallets(routes) -> tuple:
    recorder = Recorder(routes)
    client = TopWalletsClient(
        "tw-key", base_url="https://tw.test", transport=httpx.MockTransport(recorder)
    )
    return client, recorder


def birdeye(routes) -> tuple:
    recorder = Recorder(routes)
    client = BirdeyeClient(
        "be-key", base_url="https://be.test", transport=httpx.MockTransport(recorder)
    )
    return client, recorder


@pytest.mark.asyncio
async def test_fetch_token_snapshot_parses_envelope():
    client, recorder = topwallets(
        {
            "/api/bot/solana/token": (
                200,
                {
                    "success": True,
                    "data": {
                        "name": "Test",
                        "symbol": "TEST",
                        "price": 0.000123,
                        "marketCap": 50000,
                        "liquidity": 20000,
                        "riskScore": 3,
                        "isRugged": False,
                        "priceChange": {"24h": 4.2, "1w": 99},
                        "topWallets": [{"address": WALLET, "winrate": 80}],
                    },
                },
            )
        }
    )

    snapshot = await client.fetch_token_snapshot(TOKEN)
    await client.close()

    assert snapshot.address == TOKEN
    assert snapshot.market_cap == 50000
    assert snapshot.price_change == {"24h": 4.2}
    assert snapshot.top_wallets[0].winrate == 80
    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer tw-key"
    assert request.url.params["address"] == TOKEN


@pytest.mark.asyncio
async def test_success_false_is_an_upstream_error():
    client, _ = topwallets(
        {"/api/bot/solana/token": (200, {"success": False, "message": "Token not found"})}
    )

    with pytest.raises(UpstreamError) as excinfo:
        await client.fetch_token_snapshot(TOKEN)

    assert excinfo.value.message == "Token not found"
    assert excinfo.value.service == "topwallets"


@pytest.mark.asyncio
async def test_malformed_envelope_is_an_upstream_error():
    client, _ = topwallets(
        {"/api/bot/solana/token": (200, {"success": "maybe", "data": {}})}
    )

    with pytest.raises(UpstreamError) as excinfo:
        await client.fetch_token_snapshot(TOKEN)

    assert excinfo.value.message == "topwallets returned an unexpected payload"
    assert excinfo.value.service == "topwallets"


@pytest.mark.asyncio
async def test_http_error_status_carries_server_message():
    client, _ = topwallets(
        {"/api/bot/solana/token": (429, {"message": "Too many requests"})}
    )

    with pytest.raises(UpstreamError) as excinfo:
        await client.fetch_token_snapshot(TOKEN)

    assert str(excinfo.value) == "Too many requests"
    assert excinfo.value.status_code == 429


@pytest.mark.asyncio
async def test_transport_failure_is_an_upstream_error():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = topwallets({"/api/bot/solana/token": boom})

    with pytest.raises(UpstreamError):
        await client.fetch_token_snapshot(TOKEN)


@pytest.mark.asyncio
async def test_non_json_body_is_an_upstream_error():
    client, _ = topwallets(
        {"/api/bot/solana/token": lambda request: httpx.Response(200, text="<html>")}
    )

    with pytest.raises(UpstreamError):
        await client.fetch_token_snapshot(TOKEN)


@pytest.mark.asyncio
async def test_fetch_wallet_profile_posts_address():
    client, recorder = topwallets(
        {
            "/api/bot/solana/scan/wallet": (
                200,
                {
                    "success": True,
                    "data": {
                        "name": "Whale",
                        "type": "kols",
                        "winrate": 61.5,
                        "tokenTraded": 12,
                        "recentTokens": None,
                    },
                },
            )
        }
    )

    profile = await client.fetch_wallet_profile(WALLET)

    assert profile.is_kol
    assert profile.token_traded == 12
    assert profile.recent_tokens == []
    request = recorder.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == {"address": WALLET}


@pytest.mark.asyncio
async def test_trending_rejects_unknown_timeframe_without_network():
    client, recorder = topwallets({})

    with pytest.raises(ValidationError):
        await client.fetch_trending_tokens("1m", 5)

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_trending_clamps_count_and_builds_set():
    client, recorder = topwallets(
        {
            "/api/bot/solana/trending-tokens": (
                200,
                {
                    "success": True,
                    "data": {
                        "tokens": [
                            {"name": "A", "symbol": "A", "address": TOKEN, "riskScore": 2}
                        ]
                    },
                },
            )
        }
    )

    token_set = await client.fetch_trending_tokens("1h", 57)

    assert token_set.count == 20
    assert token_set.timeframe == "1h"
    assert token_set.tokens[0].risk_score == 2
    assert recorder.requests[0].url.params["count"] == "20"


def test_clamp_count_bounds():
    assert clamp_count(0) == 1
    assert clamp_count(-3) == 1
    assert clamp_count(7) == 7
    assert clamp_count(57) == 20


def test_clients_require_api_keys():
    with pytest.raises(ValueError):
        TopWalletsClient("")
    with pytest.raises(ValueError):
        BirdeyeClient("")


@pytest.mark.asyncio
async def test_fetch_candles_sends_granularity_and_headers():
    client, recorder = birdeye(
        {
            "/defi/ohlcv": (
                200,
                {
                    "success": True,
                    "data": {
                        "items": [
                            {"o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 10, "unixTime": 100}
                        ]
                    },
                },
            )
        }
    )

    candles = await client.fetch_candles(TOKEN, "15m")

    assert candles[0].high == 2
    assert candles[0].unix_time == 100
    request = recorder.requests[0]
    assert request.headers["X-API-KEY"] == "be-key"
    assert request.headers["x-chain"] == "solana"
    assert request.url.params["type"] == "15m"
    assert request.url.params["time_from"] == "0"


@pytest.mark.asyncio
async def test_zero_candles_is_an_upstream_error():
    client, _ = birdeye({"/defi/ohlcv": (200, {"success": True, "data": {"items": []}})})

    with pytest.raises(UpstreamError):
        await client.fetch_candles(TOKEN)


@pytest.mark.asyncio
async def test_top_holder_shares_percent_of_circulating_supply():
    client, _ = birdeye(
        {
            "/defi/v3/token/holder": (
                200,
                {
                    "success": True,
                    "data": {"items": [{"ui_amount": 125_000}, {"ui_amount": 33_333}]},
                },
            ),
            "/defi/v3/token/market-data": (
                200,
                {"success": True, "data": {"circulating_supply": 1_000_000}},
            ),
        }
    )

    assert await client.fetch_top_holder_shares(TOKEN) == [12.5, 3.33]


@pytest.mark.asyncio
async def test_top_holder_shares_empty_when_either_call_fails():
    client, _ = birdeye(
        {
            "/defi/v3/token/holder": (
                200,
                {"success": True, "data": {"items": [{"ui_amount": 1}]}},
            ),
            "/defi/v3/token/market-data": (500, {"message": "boom"}),
        }
    )

    assert await client.fetch_top_holder_shares(TOKEN) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "holder_body",
    [
        {"success": True, "data": {"items": 5}},
        {"success": "maybe", "data": {"items": [{"ui_amount": 1}]}},
        {"success": True, "data": "unexpected"},
    ],
)
async def test_top_holder_shares_empty_on_malformed_holder_payload(holder_body):
    client, _ = birdeye(
        {
            "/defi/v3/token/holder": (200, holder_body),
            "/defi/v3/token/market-data": (
                200,
                {"success": True, "data": {"circulating_supply": 1_000_000}},
            ),
        }
    )

    assert await client.fetch_top_holder_shares(TOKEN) == []


@pytest.mark.asyncio
async def test_top_holder_shares_empty_without_supply():
    client, _ = birdeye(
        {
            "/defi/v3/token/holder": (
                200,
                {"success": True, "data": {"items": [{"ui_amount": 1}]}},
            ),
            "/defi/v3/token/market-data": (200, {"success": True, "data": {}}),
        }
    )

    assert await client.fetch_top_holder_shares(TOKEN) == []


@pytest.mark.asyncio
async def test_dexscreener_returns_first_pair():
    recorder = Recorder(
        {
            f"/latest/dex/tokens/{TOKEN}": (
                200,
                {
                    "pairs": [
                        {
                            "pairAddress": "pair-1",
                            "fdv": 75000,
                            "volume": {"h24": 1234.5},
                            "liquidity": {"usd": 20000},
                            "pairCreatedAt": 1_700_000_000_000,
                        },
                        {"pairAddress": "pair-2"},
                    ]
                },
            )
        }
    )
    client = DexScreenerClient(
        base_url="https://ds.test", transport=httpx.MockTransport(recorder)
    )

    pair = await client.fetch_pair(TOKEN)

    assert pair.pair_address == "pair-1"
    assert pair.volume_24h == 1234.5
    assert pair.liquidity_usd == 20000
    assert pair.pair_created_at == 1_700_000_000_000


@pytest.mark.asyncio
async def test_dexscreener_without_pairs_is_an_upstream_error():
    recorder = Recorder({f"/latest/dex/tokens/{TOKEN}": (200, {"pairs": None})})
    client = DexScreenerClient(
        base_url="https://ds.test", transport=httpx.MockTransport(recorder)
    )

    with pytest.raises(UpstreamError):
        await client.fetch_pair(TOKEN)
