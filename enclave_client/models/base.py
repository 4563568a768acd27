from enum import Enum
from typing import Any, ClassVar, Tuple

from pydantic import BaseModel, ConfigDict, SerializationInfo, model_serializer


class WireModel(BaseModel):
    """
    线上传输模型基类。

    字段使用驼峰别名收发；_omit_empty 中列出的字段在为空值时不输出。
    """
    model_config = ConfigDict(populate_by_name=True)

    _omit_empty: ClassVar[Tuple[str, ...]] = ()
    # 可选布尔等字段，仅在为 None 时不输出
    _omit_none: ClassVar[Tuple[str, ...]] = ()

    @model_serializer(mode="wrap")
    def _drop_empty_fields(self, handler, info: SerializationInfo) -> Any:
        data = handler(self)
        if not isinstance(data, dict):
            return data
        for name in self._omit_empty + self._omit_none:
            value = getattr(self, name)
            if value is None or (name in self._omit_empty and (value is False or value == "")):
                field = type(self).model_fields[name]
                key = field.alias if info.by_alias and field.alias else name
                data.pop(key, None)
        return data


class LowerCaseEnum(str, Enum):
    """小写字符串枚举，解析时忽略大小写，未知值直接报错"""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    def __str__(self) -> str:
        return self.value
