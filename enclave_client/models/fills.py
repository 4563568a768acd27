from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import ClassVar, List, Optional, Tuple

from pydantic import ConfigDict, Field

from enclave_client.models.base import WireModel
from enclave_client.models.markets import Market
from enclave_client.models.orders import BidAsk, OrderID

FillID = str


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _unix_millis(value: datetime) -> int:
    if value.tzinfo is None:
        raise ValueError(f"fill query times must be timezone-aware: {value!r}")
    return (value - EPOCH) // timedelta(milliseconds=1)


@dataclass
class FillParams:
    """成交查询参数，零值表示不设置；时间必须带时区"""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    market: Market = ""
    limit: int = 0
    cursor: str = ""

    def is_empty(self) -> bool:
        return (
            self.start_time is None
            and self.end_time is None
            and self.market == ""
            and self.limit == 0
            and self.cursor == ""
        )

    def to_query_string(self) -> str:
        """按 startTime, endTime, market, limit, cursor 的固定顺序拼接查询字符串"""
        if self.is_empty():
            return ""

        params: List[str] = []
        if self.start_time is not None:
            params.append(f"startTime={_unix_millis(self.start_time)}")
        if self.end_time is not None:
            params.append(f"endTime={_unix_millis(self.end_time)}")
        if self.market:
            params.append(f"market={self.market}")
        if self.limit > 0:
            params.append(f"limit={self.limit}")
        if self.cursor:
            params.append(f"cursor={self.cursor}")

        return "?" + "&".join(params)


class ApiFill(WireModel):
    """成交记录"""
    model_config = ConfigDict(frozen=True)

    _omit_empty: ClassVar[Tuple[str, ...]] = ("client_order_id", "fee_rebate")
    _omit_none: ClassVar[Tuple[str, ...]] = ("is_adl",)

    fill_id: FillID = Field(alias="id")
    order_id: OrderID = Field(alias="orderId")
    client_order_id: Optional[OrderID] = Field(default=None, alias="clientOrderId")
    market: Market
    price: Decimal
    # base currency
    size: Decimal
    side: BidAsk
    # quote currency
    cost: Decimal = Field(alias="filledCost")
    fee: Decimal
    fee_rebate: Optional[Decimal] = Field(default=None, alias="feeRebate")
    created_at: datetime = Field(alias="time")
    is_adl: Optional[bool] = Field(default=None, alias="isADL")
