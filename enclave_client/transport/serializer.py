from typing import Any, Generic, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from enclave_client.transport.errors import DecodeError, EmptyResponseBodyError

T = TypeVar('T')

# 请求值为空时的JSON文本，传输层据此不发送请求体
NULL_BODY = "null"


class JsonSerializer(Generic[T]):
    """基于pydantic TypeAdapter的JSON序列化器"""

    def __init__(self, type_: Type[T] = Any):
        self.type_ = type_
        self._adapter = TypeAdapter(type_)

    def to_json_string(self, value: T) -> str:
        if value is None:
            return NULL_BODY
        if self.type_ is Any:
            # 未指定类型时按值的实际类型序列化
            return TypeAdapter(type(value)).dump_json(value, by_alias=True).decode('utf-8')
        return self._adapter.dump_json(value, by_alias=True).decode('utf-8')

    def from_json_string(self, text: str) -> T:
        if text == "":
            raise EmptyResponseBodyError()
        try:
            return self._adapter.validate_json(text)
        except ValidationError as e:
            raise DecodeError(text, str(e)) from e
