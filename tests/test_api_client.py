import asyncio
import hashlib
import hmac
import time
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from enclave_client.client import ApiClient
from enclave_client.config import Settings
from enclave_client.models import GetBalanceReq, GetPublicStatusRes
from enclave_client.transport.errors import (
    ApiRequestError,
    ProtocolError,
    RateLimitTimeoutError,
    TransportError,
    UnsuccessfulResponseError,
)
from enclave_client.transport.rate_limiter import TokenBucket
from enclave_client.transport.signer import KEY_ID_HEADER, SIGN_HEADER, TIMESTAMP_HEADER


def _expected_signature(secret: str, captured) -> str:
    timestamp = captured.headers[TIMESTAMP_HEADER]
    message = timestamp.encode() + captured.method.encode() + captured.path_qs.encode() + captured.body
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class TestApiClientConstruction:
    """客户端构建测试"""

    def test_from_env(self):
        """按环境名创建"""
        assert ApiClient.from_env("sandbox").api_endpoint == "https://api-sandbox.enclave.market"
        assert ApiClient.from_env("PROD").api_endpoint == "https://api.enclave.market"

    def test_from_env_unknown(self):
        """未知环境"""
        with pytest.raises(ValueError, match="unknown env"):
            ApiClient.from_env("staging")

    def test_from_settings(self):
        """按配置创建"""
        settings = Settings(
            _env_file=None,
            env="prod",
            key="k",
            secret="s",
            rate_limit_capacity=3,
            rate_limit_refill_per_second=2.0,
            rate_limit_timeout=1.5,
            probe_interval_seconds=0.5,
        )
        client = ApiClient.from_settings(settings)

        assert client.api_endpoint == "https://api.enclave.market"
        assert client.is_authenticated
        assert isinstance(client.rate_limiter, TokenBucket)
        assert client.rate_limiter.capacity == 3
        assert client.rate_limit_timeout == 1.5
        assert client.probe_interval == 0.5

    def test_from_settings_without_credentials(self):
        """无凭证时为公共客户端"""
        client = ApiClient.from_settings(Settings(_env_file=None, api_url="http://localhost:9999/"))

        assert client.api_endpoint == "http://localhost:9999"
        assert not client.is_authenticated
        assert client.rate_limiter is None

    def test_default_headers_are_read_only(self):
        """默认请求头只读"""
        client = ApiClient("http://localhost", headers={"X-Route": "blue"})

        assert client.headers["X-Route"] == "blue"
        with pytest.raises(TypeError):
            client.headers["X-Route"] = "green"

    def test_auth_headers_not_overridden_by_defaults(self):
        """默认请求头不能覆盖认证头"""
        client = ApiClient(
            "http://localhost",
            headers={KEY_ID_HEADER: "spoofed", "X-Route": "blue"},
        ).with_api_key("real", "secret")

        headers = client.get_headers("GET", "/authedHello", "null")

        assert headers[KEY_ID_HEADER] == "real"
        assert headers["X-Route"] == "blue"
        assert TIMESTAMP_HEADER in headers
        assert SIGN_HEADER in headers

    def test_no_auth_headers_without_credentials(self):
        """未配置凭证时不生成认证头"""
        headers = ApiClient("http://localhost").get_headers("GET", "/v1/markets", "null")
        assert headers == {}

    def test_repr(self):
        """字符串表示"""
        text = repr(ApiClient("http://localhost").with_api_key("k", "secret"))
        assert "authenticated=True" in text
        assert "connected=False" in text
        assert "secret" not in text


class TestApiClientRequests:
    """客户端请求测试"""

    @pytest.mark.asyncio
    async def test_connect_disconnect(self, venue):
        """连接和断开"""
        client = ApiClient(venue.url)
        assert not client.is_connected

        await client.connect()
        assert client.is_connected

        await client.disconnect()
        assert not client.is_connected

    @pytest.mark.asyncio
    async def test_signature_matches_bytes_sent(self, venue, api_client):
        """签名与实际发送的请求体一致"""
        venue.reply("POST", "/v0/get_balance", body={
            "success": True,
            "result": {
                "accountId": "acc-1",
                "symbol": "AVAX",
                "totalBalance": "10000",
                "reservedBalance": "7000",
                "freeBalance": "3000",
            },
        })

        res = await api_client.get_balance(GetBalanceReq(symbol="AVAX"))

        assert res.result.free_balance == "3000"
        captured = venue.requests[0]
        assert captured.body == b'{"symbol":"AVAX"}'
        assert captured.headers[KEY_ID_HEADER] == "test_key"
        assert captured.headers[SIGN_HEADER] == _expected_signature("test_secret", captured)

    @pytest.mark.asyncio
    async def test_signature_without_body(self, venue, api_client):
        """无请求体时按空字符串签名"""
        venue.reply("GET", "/authedHello", body={"success": True, "result": "hello"})

        res = await api_client.authed_hello()

        assert res.result == "hello"
        captured = venue.requests[0]
        assert captured.body == b""
        assert captured.headers[SIGN_HEADER] == _expected_signature("test_secret", captured)

    @pytest.mark.asyncio
    async def test_timestamp_fresh_per_request(self, venue, api_client):
        """每次请求生成新的时间戳"""
        venue.reply("GET", "/authedHello", body={"success": True, "result": "hello"})

        before = int(time.time() * 1000)
        await api_client.authed_hello()
        await asyncio.sleep(0.01)
        await api_client.authed_hello()

        first, second = (int(r.headers[TIMESTAMP_HEADER]) for r in venue.requests)
        assert before <= first < second

    @pytest.mark.asyncio
    async def test_default_headers_sent(self, venue):
        """默认请求头随请求发送"""
        venue.reply("GET", "/v1/markets", body={"success": True, "result": {"spot": {"tradingPairs": []}}})

        async with ApiClient(venue.url, headers={"X-Route": "blue"}) as client:
            res = await client.markets()

        assert res.result.spot.trading_pairs == []
        captured = venue.requests[0]
        assert captured.headers["X-Route"] == "blue"
        assert KEY_ID_HEADER not in captured.headers

    @pytest.mark.asyncio
    async def test_public_endpoints_are_unsigned(self, venue, api_client):
        """公共端点不带认证头"""
        venue.reply("GET", "/status", body={"marketStatuses": {"AVAX-USDC": "open"}})
        venue.reply("GET", "/hello", body={"hello": "world"})

        status = await api_client.get_public_status()
        hello = await api_client.hello()

        assert status.market_statuses == {"AVAX-USDC": "open"}
        assert hello == {"hello": "world"}
        assert all(KEY_ID_HEADER not in r.headers for r in venue.requests)

    @pytest.mark.asyncio
    async def test_protocol_error_wrapped_with_operation(self, venue, api_client):
        """非成功状态码包装为 ApiRequestError"""
        venue.reply("POST", "/v0/get_balance", status=404, body='{"success":false,"result":null,"error":"not found"}')

        with pytest.raises(ApiRequestError) as exc_info:
            await api_client.get_balance(GetBalanceReq(symbol="AVAX"))

        err = exc_info.value
        assert err.operation == "get balance"
        assert err.status_code == 404
        assert "404" in str(err)
        assert "not found" in str(err)
        assert isinstance(err.__cause__, ProtocolError)

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope(self, venue, api_client):
        """success=false 时抛出 UnsuccessfulResponseError"""
        venue.reply("GET", "/authedHello", body={"success": False, "result": None, "error": "bad key"})

        with pytest.raises(UnsuccessfulResponseError) as exc_info:
            await api_client.authed_hello()

        assert exc_info.value.response.error == "bad key"
        assert "bad key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_public_endpoint_errors_propagate_unchanged(self, venue, api_client):
        """认证层不引入新的错误类型"""
        venue.reply("GET", "/status", status=503, body="maintenance")

        with pytest.raises(ProtocolError) as exc_info:
            await api_client.get_public_status()
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_slow_response_wrapped_with_operation(self, venue):
        """会话超时包装为带操作名的 ApiRequestError"""
        venue.reply("GET", "/authedHello", body={"success": True, "result": "hello"}, delay=0.5)
        client = ApiClient(venue.url).with_api_key("test_key", "test_secret")
        client._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=0.1))

        async with client:
            with pytest.raises(ApiRequestError) as exc_info:
                await client.authed_hello()

        assert exc_info.value.operation == "authed hello"
        assert isinstance(exc_info.value.__cause__, TransportError)

    @pytest.mark.asyncio
    async def test_rate_limited_client_times_out_without_sending(self, venue):
        """限速等待超时时不发出请求"""
        venue.reply("GET", "/status", body={"marketStatuses": {}})
        client = ApiClient(
            venue.url,
            rate_limiter=TokenBucket(capacity=1, refill_rate=0.01),
            rate_limit_timeout=0.05,
        )

        async with client:
            await client.get_public_status()
            with pytest.raises(RateLimitTimeoutError):
                await client.get_public_status()

        assert len(venue.requests) == 1

    @pytest.mark.asyncio
    async def test_rate_limited_signature_taken_after_wait(self, venue):
        """限速等待后再生成时间戳"""
        venue.reply("GET", "/authedHello", body={"success": True, "result": "hello"})
        client = ApiClient(
            venue.url,
            rate_limiter=TokenBucket(capacity=1, refill_rate=5.0),
        ).with_api_key("test_key", "test_secret")

        async with client:
            await client.authed_hello()
            before_second = int(time.time() * 1000)
            await client.authed_hello()

        second = venue.requests[1]
        assert int(second.headers[TIMESTAMP_HEADER]) >= before_second + 150
        assert second.headers[SIGN_HEADER] == _expected_signature("test_secret", second)


class TestWaitForEndpoint:
    """连通性探测测试"""

    @pytest.mark.asyncio
    async def test_polls_until_success(self):
        """失败后继续轮询直到成功"""
        client = ApiClient("http://localhost", probe_interval=0)
        status = GetPublicStatusRes(market_statuses={})
        status_check = AsyncMock(side_effect=[
            TransportError("down"),
            ProtocolError(503, "starting"),
            status,
        ])

        with patch.object(client, "get_public_status", status_check):
            await client.wait_for_endpoint()

        assert status_check.await_count == 3

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_retried(self):
        """非客户端错误直接抛出"""
        client = ApiClient("http://localhost", probe_interval=0)
        status_check = AsyncMock(side_effect=RuntimeError("bug"))

        with patch.object(client, "get_public_status", status_check):
            with pytest.raises(RuntimeError):
                await client.wait_for_endpoint()

        assert status_check.await_count == 1

    @pytest.mark.asyncio
    async def test_against_venue(self, venue):
        """服务可用时立即返回"""
        venue.reply("GET", "/status", body={"marketStatuses": {"AVAX-USDC": "open"}})

        async with ApiClient(venue.url, probe_interval=0) as client:
            await client.wait_for_endpoint()

        assert len(venue.requests) == 1
