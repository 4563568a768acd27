import asyncio
from typing import Any, Dict, Generic, Mapping, Optional, Type, TypeVar

import aiohttp

from enclave_client.transport.errors import (
    DecodeError,
    EmptyResponseBodyError,
    ProtocolError,
    TransportError,
)
from enclave_client.transport.serializer import NULL_BODY, JsonSerializer
from enclave_client.utils.logger import LoggerMixin

ReplyT = TypeVar('ReplyT')

# 创建类端点可能返回201/202，其余状态码一律按错误处理
SUCCESS_STATUS_CODES = frozenset({200, 201, 202})


class HttpJsonClient(LoggerMixin, Generic[ReplyT]):
    """通用JSON HTTP客户端，一次调用对应一个HTTP请求"""

    def __init__(
        self,
        api_endpoint: str,
        reply_type: Type[ReplyT] = Any,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        is_csv_response: bool = False,
    ):
        self.api_endpoint = api_endpoint
        self.reply_type = reply_type
        self.is_csv_response = is_csv_response
        self._session = session
        self._headers: Dict[str, str] = {}
        self._reply_serializer = JsonSerializer(reply_type)

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    def with_header(self, key: str, value: str) -> "HttpJsonClient[ReplyT]":
        self._headers[key] = value
        return self

    def set_headers(self, headers: Mapping[str, str]) -> "HttpJsonClient[ReplyT]":
        self._headers.update(headers)
        return self

    async def get(self, request: Any = None) -> ReplyT:
        return await self.do("GET", request)

    async def post(self, request: Any) -> ReplyT:
        return await self.do("POST", request)

    async def delete(self, request: Any = None) -> ReplyT:
        return await self.do("DELETE", request)

    async def do(self, method: str, request: Any = None) -> ReplyT:
        """序列化请求后发送"""
        body_text = JsonSerializer().to_json_string(request)
        return await self.send(method, body_text)

    async def send(self, method: str, body_text: str) -> ReplyT:
        """
        发送已序列化的请求体。

        body_text 为 "null" 时不发送请求体，也不设置 Content-Type，
        以兼容拒绝请求体的端点。
        """
        headers: Dict[str, str] = {}
        data: Optional[bytes] = None
        if body_text != NULL_BODY:
            data = body_text.encode('utf-8')
            headers["Content-Type"] = "application/json"
        headers.update(self._headers)

        if self._session is not None:
            return await self._send_with(self._session, method, data, headers)

        async with aiohttp.ClientSession() as session:
            return await self._send_with(session, method, data, headers)

    async def _send_with(
        self,
        session: aiohttp.ClientSession,
        method: str,
        data: Optional[bytes],
        headers: Dict[str, str],
    ) -> ReplyT:
        self.log_debug("Making request", method=method, url=self.api_endpoint, has_body=data is not None)
        try:
            async with session.request(method, self.api_endpoint, data=data, headers=headers) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.log_error("HTTP request failed", method=method, url=self.api_endpoint, error=repr(e))
            raise TransportError(f"{method} {self.api_endpoint} failed: {e!r}") from e

        return self._handle_response(status, body)

    def _handle_response(self, status: int, body: bytes) -> ReplyT:
        """处理API响应"""
        text = body.decode('utf-8', errors='replace')

        if status not in SUCCESS_STATUS_CODES:
            # 错误响应与成功响应使用相同的信封结构
            reply = None
            try:
                reply = self._reply_serializer.from_json_string(text)
            except (DecodeError, EmptyResponseBodyError) as e:
                self.log_debug("Error body is not a structured reply", status=status, error=repr(e))
            self.log_error("API request failed", url=self.api_endpoint, status=status, body=text)
            raise ProtocolError(status, text, reply)

        if self.is_csv_response:
            return body

        # 部分服务端成功时返回 "" 而不是 "{}"
        if not body:
            raise EmptyResponseBodyError()

        return self._reply_serializer.from_json_string(text)

    def __repr__(self) -> str:
        return f"HttpJsonClient(endpoint={self.api_endpoint}, csv={self.is_csv_response})"
