"""HTTP传输层：签名、序列化、请求发送与限速"""

from .errors import (
    ApiRequestError,
    DecodeError,
    EmptyResponseBodyError,
    EnclaveError,
    ProtocolError,
    RateLimitTimeoutError,
    TransportError,
    UnsuccessfulResponseError,
)
from .http import SUCCESS_STATUS_CODES, HttpJsonClient
from .rate_limiter import RateLimitedHttpJsonClient, TokenBucket
from .serializer import NULL_BODY, JsonSerializer
from .signer import Credentials, generate_signature, signature_headers

__all__ = [
    "ApiRequestError",
    "DecodeError",
    "EmptyResponseBodyError",
    "EnclaveError",
    "ProtocolError",
    "RateLimitTimeoutError",
    "TransportError",
    "UnsuccessfulResponseError",
    "SUCCESS_STATUS_CODES",
    "HttpJsonClient",
    "RateLimitedHttpJsonClient",
    "TokenBucket",
    "NULL_BODY",
    "JsonSerializer",
    "Credentials",
    "generate_signature",
    "signature_headers",
]
