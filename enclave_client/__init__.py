"""
Enclave Markets REST API 客户端

主要组件：
- ApiClient: 带API密钥签名的异步客户端
- HttpJsonClient: 通用JSON HTTP传输
- RateLimitedHttpJsonClient / TokenBucket: 请求限速
"""

from .client import ApiClient
from .transport import (
    ApiRequestError,
    Credentials,
    DecodeError,
    EmptyResponseBodyError,
    EnclaveError,
    HttpJsonClient,
    ProtocolError,
    RateLimitedHttpJsonClient,
    RateLimitTimeoutError,
    TokenBucket,
    TransportError,
    UnsuccessfulResponseError,
)

__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "Credentials",
    "DecodeError",
    "EmptyResponseBodyError",
    "EnclaveError",
    "HttpJsonClient",
    "ProtocolError",
    "RateLimitedHttpJsonClient",
    "RateLimitTimeoutError",
    "TokenBucket",
    "TransportError",
    "UnsuccessfulResponseError",
]
