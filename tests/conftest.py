"""
测试配置和通用fixture
"""
import asyncio
import json
import time
from dataclasses import dataclass, field
from typing import AsyncGenerator, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from enclave_client.client import ApiClient


@dataclass
class CapturedRequest:
    """服务端收到的请求"""
    method: str
    path_qs: str
    headers: Dict[str, str]
    body: bytes
    content_length: Optional[int]
    received_at: float


@dataclass
class FakeVenue:
    """进程内的模拟交易所HTTP服务"""
    server: TestServer
    routes: Dict[Tuple[str, str], Tuple[int, bytes]] = field(default_factory=dict)
    requests: List[CapturedRequest] = field(default_factory=list)
    delays: Dict[Tuple[str, str], float] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"http://{self.server.host}:{self.server.port}"

    def reply(
        self,
        method: str,
        path_qs: str,
        status: int = 200,
        body: Union[dict, list, str, bytes] = b"",
        delay: float = 0.0,
    ) -> None:
        """注册一个固定响应"""
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[(method, path_qs)] = (status, body)
        if delay:
            self.delays[(method, path_qs)] = delay

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(
            CapturedRequest(
                method=request.method,
                path_qs=request.path_qs,
                headers=dict(request.headers),
                body=await request.read(),
                content_length=request.content_length,
                received_at=time.monotonic(),
            )
        )
        delay = self.delays.get((request.method, request.path_qs))
        if delay:
            await asyncio.sleep(delay)
        status, body = self.routes.get((request.method, request.path_qs), (404, b""))
        return web.Response(status=status, body=body)


@pytest_asyncio.fixture
async def venue() -> AsyncGenerator[FakeVenue, None]:
    """启动模拟交易所"""
    app = web.Application()
    server = TestServer(app)
    fake = FakeVenue(server=server)
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    await server.start_server()
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def api_client(venue) -> AsyncGenerator[ApiClient, None]:
    """带API密钥的客户端"""
    client = ApiClient(venue.url, probe_interval=0).with_api_key("test_key", "test_secret")
    async with client:
        yield client


@pytest.fixture
def order_payload() -> dict:
    """服务端返回的订单样本"""
    return {
        "orderId": "o-1",
        "clientOrderId": "c-1",
        "side": "sell",
        "price": "21.11",
        "size": "1.5",
        "market": "AVAX-USDC",
        "filledSize": "0",
        "filledCost": "0",
        "fee": "0",
        "status": "open",
        "createdAt": "2024-01-02T03:04:05Z",
        "type": "limit",
    }


@pytest.fixture
def fill_payload() -> dict:
    """服务端返回的成交样本"""
    return {
        "id": "f-1",
        "orderId": "o-1",
        "market": "AVAX-USDC",
        "price": "21.05",
        "size": "0.34",
        "side": "buy",
        "filledCost": "7.157",
        "fee": "0.01",
        "time": "2024-01-02T03:04:05Z",
    }
