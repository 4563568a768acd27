"""
请求签名

签名内容为 timestamp + method + path + body 的直接拼接（无分隔符），
使用 HMAC-SHA256，以十六进制编码放入请求头。服务端会以相同方式重新计算。
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Dict, Optional

from enclave_client.transport.serializer import NULL_BODY

KEY_ID_HEADER = "ENCLAVE-KEY-ID"
TIMESTAMP_HEADER = "ENCLAVE-TIMESTAMP"
SIGN_HEADER = "ENCLAVE-SIGN"


@dataclass(frozen=True)
class Credentials:
    """API密钥凭证"""
    key_id: str
    key_secret: str

    def __repr__(self) -> str:
        return f"Credentials(key_id={self.key_id!r})"


def generate_signature(secret: str, timestamp: str, method: str, path: str, body: str) -> bytes:
    """计算 HMAC-SHA256 签名"""
    message = timestamp + method + path + body
    return hmac.new(
        secret.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).digest()


def current_timestamp() -> str:
    """当前时间的毫秒时间戳字符串"""
    return str(time.time_ns() // 1_000_000)


def signature_headers(
    credentials: Credentials,
    method: str,
    path: str,
    body: str,
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """
    生成签名请求头，每次调用返回新的字典。

    body 必须是实际发送的请求体文本；"null" 哨兵表示不发送请求体，按空字符串签名。
    """
    if body == NULL_BODY:
        body = ""
    timestamp = timestamp or current_timestamp()
    signature = generate_signature(credentials.key_secret, timestamp, method, path, body)
    return {
        KEY_ID_HEADER: credentials.key_id,
        TIMESTAMP_HEADER: timestamp,
        SIGN_HEADER: signature.hex(),
    }
