"""
请求速率限制

TokenBucket 为令牌桶算法实现；RateLimitedHttpJsonClient 在每次请求前
等待令牌，等待可通过 timeout 或任务取消中断，中断时不会发出请求。
"""

import asyncio
import time
from typing import Any, Optional

from enclave_client.transport.errors import RateLimitTimeoutError
from enclave_client.transport.http import HttpJsonClient
from enclave_client.utils.logger import get_logger

logger = get_logger(__name__)


class TokenBucket:
    """令牌桶算法实现"""

    def __init__(self, capacity: int, refill_rate: float):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if refill_rate <= 0:
            raise ValueError("refill_rate must be positive")
        self.capacity = capacity
        self.tokens = float(capacity)
        self.refill_rate = refill_rate
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    async def consume(self, tokens: int = 1) -> bool:
        """消耗令牌，不等待"""
        async with self._lock:
            self._refill()

            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False

    async def wait(self, tokens: int = 1) -> None:
        """
        阻塞直到获得令牌。

        等待期间被取消时不消耗任何令牌。不要在持有与其他限速调用共享的锁时调用，
        否则会造成队头阻塞甚至死锁。
        """
        if tokens > self.capacity:
            raise ValueError(f"cannot wait for {tokens} tokens, capacity is {self.capacity}")

        while True:
            async with self._lock:
                self._refill()
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                delay = (tokens - self.tokens) / self.refill_rate

            logger.debug("Waiting for rate limit token", delay=delay)
            await asyncio.sleep(delay)

    def _refill(self) -> None:
        """填充令牌"""
        now = time.monotonic()
        elapsed = now - self.last_refill

        tokens_to_add = elapsed * self.refill_rate
        self.tokens = min(self.capacity, self.tokens + tokens_to_add)
        self.last_refill = now

    async def get_available_tokens(self) -> int:
        """获取可用令牌数量"""
        async with self._lock:
            self._refill()
            return int(self.tokens)

    async def get_refill_time(self, required_tokens: int) -> float:
        """获取填充所需令牌的时间"""
        async with self._lock:
            self._refill()
            missing_tokens = required_tokens - self.tokens
        if missing_tokens <= 0:
            return 0.0
        return missing_tokens / self.refill_rate


class RateLimitedHttpJsonClient:
    """带速率限制的 HttpJsonClient 装饰器"""

    def __init__(self, client: HttpJsonClient, rate_limiter: TokenBucket):
        self.client = client
        self.rate_limiter = rate_limiter

    def with_header(self, key: str, value: str) -> "RateLimitedHttpJsonClient":
        self.client.with_header(key, value)
        return self

    async def acquire(self, timeout: Optional[float] = None) -> None:
        if timeout is None:
            await self.rate_limiter.wait()
            return
        try:
            await asyncio.wait_for(self.rate_limiter.wait(), timeout)
        except asyncio.TimeoutError as e:
            raise RateLimitTimeoutError(timeout) from e

    # 以下调用会阻塞直到获得令牌，避免在持有锁时调用

    async def get(self, request: Any = None, timeout: Optional[float] = None) -> Any:
        await self.acquire(timeout)
        return await self.client.get(request)

    async def post(self, request: Any, timeout: Optional[float] = None) -> Any:
        await self.acquire(timeout)
        return await self.client.post(request)

    async def delete(self, request: Any = None, timeout: Optional[float] = None) -> Any:
        await self.acquire(timeout)
        return await self.client.delete(request)

    async def do(self, method: str, request: Any = None, timeout: Optional[float] = None) -> Any:
        await self.acquire(timeout)
        return await self.client.do(method, request)

    async def send(self, method: str, body_text: str, timeout: Optional[float] = None) -> Any:
        await self.acquire(timeout)
        return await self.client.send(method, body_text)
