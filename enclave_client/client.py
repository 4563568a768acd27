from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception_type, wait_fixed

from enclave_client.config import ENVIRONMENT_URLS, Settings
from enclave_client.models import paths
from enclave_client.models.common import (
    GenericResponse,
    GetBalanceReq,
    GetPublicStatusRes,
    V0GetBalanceRes,
)
from enclave_client.models.markets import V1GetMarketsResult
from enclave_client.spot import SpotTradingMixin
from enclave_client.transport.errors import (
    ApiRequestError,
    EnclaveError,
    UnsuccessfulResponseError,
)
from enclave_client.transport.http import HttpJsonClient
from enclave_client.transport.rate_limiter import RateLimitedHttpJsonClient, TokenBucket
from enclave_client.transport.serializer import JsonSerializer
from enclave_client.transport.signer import Credentials, signature_headers
from enclave_client.utils.logger import LoggerMixin

ReplyT = TypeVar('ReplyT')


class ApiClient(SpotTradingMixin, LoggerMixin):
    """
    Enclave REST 客户端

    负责拼接请求路径、为请求签名并交给 HttpJsonClient 发送。未配置API密钥时
    请求不带认证头，只能访问公共端点。

    构建完成（with_api_key 等）后再交给并发调用方使用，之后不要修改凭证或请求头。
    """

    def __init__(
        self,
        api_endpoint: str,
        *,
        credentials: Optional[Credentials] = None,
        headers: Optional[Mapping[str, str]] = None,
        rate_limiter: Optional[TokenBucket] = None,
        rate_limit_timeout: Optional[float] = None,
        probe_interval: float = 2.0,
    ):
        self.api_endpoint = api_endpoint.rstrip("/")
        self._credentials = credentials
        self._headers: Mapping[str, str] = MappingProxyType(dict(headers or {}))
        self.rate_limiter = rate_limiter
        self.rate_limit_timeout = rate_limit_timeout
        self.probe_interval = probe_interval
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_env(cls, env: str, **kwargs: Any) -> "ApiClient":
        """根据环境名创建客户端：sandbox 或 prod"""
        try:
            api_url = ENVIRONMENT_URLS[env.lower()]
        except KeyError:
            raise ValueError(f"unknown env: {env}") from None
        return cls(api_url, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApiClient":
        """根据配置创建客户端"""
        credentials = Credentials(settings.key, settings.secret) if settings.has_credentials else None
        rate_limiter = None
        if settings.rate_limit_enabled:
            rate_limiter = TokenBucket(settings.rate_limit_capacity, settings.rate_limit_refill_per_second)
        return cls(
            settings.base_url,
            credentials=credentials,
            rate_limiter=rate_limiter,
            rate_limit_timeout=settings.rate_limit_timeout,
            probe_interval=settings.probe_interval_seconds,
        )

    def with_api_key(self, key_id: str, key_secret: str) -> "ApiClient":
        self._credentials = Credentials(key_id, key_secret)
        return self

    @property
    def headers(self) -> Mapping[str, str]:
        """客户端级默认请求头（只读）"""
        return self._headers

    @property
    def is_authenticated(self) -> bool:
        return self._credentials is not None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def connect(self):
        """创建HTTP会话"""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self.log_info("Connected to Enclave API", endpoint=self.api_endpoint)

    async def disconnect(self):
        """关闭HTTP会话"""
        if self._session:
            await self._session.close()
            self._session = None
            self.log_info("Disconnected from Enclave API")

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed

    def get_headers(self, method: str, path: str, body_text: str) -> Dict[str, str]:
        """默认请求头加认证头，认证头不会被默认请求头覆盖"""
        headers = dict(self._headers)
        if self._credentials is not None:
            headers.update(signature_headers(self._credentials, method, path, body_text))
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        reply_type: Type[ReplyT] = Any,
        request: Any = None,
        *,
        authenticate: bool = True,
        csv: bool = False,
    ) -> ReplyT:
        """
        发送一次请求。

        请求体只序列化一次，签名和发送使用同一份文本；传输层错误原样抛出。
        """
        body_text = JsonSerializer().to_json_string(request)
        client = HttpJsonClient(
            self.api_endpoint + path,
            reply_type,
            session=self._session,
            is_csv_response=csv,
        )
        if self.rate_limiter is not None:
            await RateLimitedHttpJsonClient(client, self.rate_limiter).acquire(self.rate_limit_timeout)

        # 限速等待之后再签名，时间戳取发送时刻
        if authenticate:
            client.set_headers(self.get_headers(method, path, body_text))
        else:
            client.set_headers(self._headers)
        return await client.send(method, body_text)

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        reply_type: Type[ReplyT],
        request: Any = None,
        detail: Optional[str] = None,
    ) -> ReplyT:
        """调用返回响应信封的端点，success=false 时抛出 UnsuccessfulResponseError"""
        try:
            res = await self._request(method, path, reply_type, request)
        except EnclaveError as e:
            raise ApiRequestError(operation, str(e)) from e

        if isinstance(res, GenericResponse) and not res.success:
            self.log_warning("Request was not successful", operation=operation, error=res.error)
            raise UnsuccessfulResponseError(operation, res, detail)
        return res

    async def wait_for_endpoint(self) -> None:
        """
        轮询公共状态端点直到服务可用，没有最大次数限制。

        仅用于测试/集成环境启动时的同步，不是生产环境的容错机制。
        """
        async for attempt in AsyncRetrying(
            wait=wait_fixed(self.probe_interval),
            retry=retry_if_exception_type(EnclaveError),
            reraise=True,
        ):
            with attempt:
                self.log_info(
                    "waiting for the service to become available",
                    attempt=attempt.retry_state.attempt_number,
                )
                await self.get_public_status()

    # Public endpoints

    async def get_public_status(self) -> GetPublicStatusRes:
        """获取各市场状态"""
        return await self._request("GET", paths.STATUS_PATH, GetPublicStatusRes, authenticate=False)

    async def hello(self) -> Dict[str, Any]:
        return await self._request("GET", paths.HELLO_PATH, Dict[str, Any], authenticate=False)

    # Authenticated endpoints

    async def authed_hello(self) -> GenericResponse[str]:
        """验证API密钥"""
        return await self._call("authed hello", "GET", paths.AUTHED_HELLO_PATH, GenericResponse[str])

    async def markets(self) -> GenericResponse[V1GetMarketsResult]:
        """获取可交易市场"""
        return await self._call("v1 markets", "GET", paths.V1_MARKETS_PATH, GenericResponse[V1GetMarketsResult])

    async def get_balance(self, req: GetBalanceReq) -> GenericResponse[V0GetBalanceRes]:
        """获取单个币种余额"""
        return await self._call(
            "get balance", "POST", paths.V0_GET_BALANCE_PATH,
            GenericResponse[V0GetBalanceRes], req, detail=req.symbol,
        )

    def __repr__(self) -> str:
        return (
            f"ApiClient(endpoint={self.api_endpoint}, "
            f"authenticated={self.is_authenticated}, "
            f"connected={self.is_connected})"
        )
