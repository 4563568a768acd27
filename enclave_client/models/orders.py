from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple

from pydantic import ConfigDict, Field

from enclave_client.models.base import LowerCaseEnum, WireModel
from enclave_client.models.markets import Market

OrderID = str


class BidAsk(LowerCaseEnum):
    """买卖方向，线上为 "buy" / "sell" """
    BID = "buy"
    ASK = "sell"

    def opposite(self) -> "BidAsk":
        return BidAsk.ASK if self is BidAsk.BID else BidAsk.BID


class OrderType(LowerCaseEnum):
    LIMIT = "limit"
    MARKET = "market"


class OrderTimeInForce(str, Enum):
    GOOD_UNTIL_CANCELLED = "GTC"
    IMMEDIATE_OR_CANCEL = "IOC"


class CancelReason(LowerCaseEnum):
    """撤单原因，空字符串为默认值（用户主动撤单）"""
    USER = ""
    # liquidation
    LIQUIDATION = "liquidation"
    SELF_MATCH_PREVENTION = "selfmatchprevention"
    # websocket disconnect with cancel on disconnect enabled
    CANCEL_AFTER_TIMEOUT = "cancelaftertimeout"
    STARTUP_BAD_PRICES = "startupbadprice"
    # IOC order that could not fill
    IMMEDIATE_OR_CANCEL = "immediateorcancel"
    CANCEL_AFTER_TIMEOUT_ON_SHUTDOWN = "cancelaftertimeoutonshutdown"
    CANCEL_ON_STARTUP = "cancelonstartup"
    CANCEL_BY_ADMIN = "cancelbyadmin"


class OrderState(LowerCaseEnum):
    """订单状态"""
    # created but not yet accepted by the matching engine, never visible to users
    NEW = "new"
    OPEN = "open"
    FULLY_FILLED = "fullyfilled"
    # may or may not have been partially filled
    CANCELED = "canceled"
    CANCEL_REJECTED = "cancelrejected"
    REJECTED = "rejected"


class EmptyOrderStateQuery(ValueError):
    """查询参数中的订单状态为空"""
    def __init__(self):
        super().__init__("indicated empty order state for filter")


_QUERYABLE_ORDER_STATES = {
    "open": OrderState.OPEN,
    "fullyFilled": OrderState.FULLY_FILLED,
    "canceled": OrderState.CANCELED,
}


def order_state_from_query_param(value: str) -> OrderState:
    """解析订单列表过滤参数，仅支持 open / fullyFilled / canceled"""
    if value == "":
        raise EmptyOrderStateQuery()
    try:
        return _QUERYABLE_ORDER_STATES[value]
    except KeyError:
        raise ValueError(f"invalid order state query {value}") from None


class AddOrderReq(WireModel):
    """下单请求"""
    _omit_empty: ClassVar[Tuple[str, ...]] = ("client_order_id", "time_in_force", "reduce_only", "post_only")

    side: BidAsk
    price: Decimal = Decimal("0")
    size: Decimal = Decimal("0")
    quote_size: Decimal = Field(default=Decimal("0"), alias="quoteSize")
    market: Market

    client_order_id: Optional[OrderID] = Field(default=None, alias="clientOrderId")
    type: OrderType = OrderType.LIMIT
    time_in_force: Optional[OrderTimeInForce] = Field(default=None, alias="timeInForce")
    reduce_only: bool = Field(default=False, alias="reduceOnly")

    post_only: bool = Field(default=False, alias="postOnly")


class ApiOrder(WireModel):
    """服务端返回的订单"""
    model_config = ConfigDict(frozen=True)

    _omit_empty: ClassVar[Tuple[str, ...]] = (
        "client_order_id", "fee_rebate", "filled_at", "canceled_at",
        "cancel_reason", "time_in_force", "reduce_only",
    )

    order_id: OrderID = Field(alias="orderId")
    client_order_id: Optional[OrderID] = Field(default=None, alias="clientOrderId")
    side: BidAsk
    price: Decimal
    order_quantity: Decimal = Field(alias="size")
    market: Market
    filled_quantity: Decimal = Field(alias="filledSize")
    filled_cost: Decimal = Field(alias="filledCost")
    fee: Decimal
    fee_rebate: Optional[Decimal] = Field(default=None, alias="feeRebate")
    state: OrderState = Field(alias="status")
    created_at: datetime = Field(alias="createdAt")
    filled_at: Optional[datetime] = Field(default=None, alias="filledAt")

    canceled_at: Optional[datetime] = Field(default=None, alias="canceledAt")
    cancel_reason: CancelReason = Field(default=CancelReason.USER, alias="cancelReason")
    type: OrderType
    time_in_force: Optional[OrderTimeInForce] = Field(default=None, alias="timeInForce")
    reduce_only: bool = Field(default=False, alias="reduceOnly")

    @property
    def is_open(self) -> bool:
        return self.state is OrderState.OPEN
