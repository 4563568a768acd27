"""Enclave REST 接口数据模型"""

from .common import (
    AccountID,
    GenericResponse,
    GetBalanceReq,
    GetPublicStatusRes,
    PageInfo,
    PageResponse,
    Symbol,
    V0GetBalanceRes,
)
from .fills import ApiFill, FillID, FillParams
from .markets import (
    BookLevel,
    BookSnapshot,
    CurrencyPair,
    Market,
    SpotMarkets,
    V1GetMarketsResult,
    V1SpotMarketsResult,
)
from .orders import (
    AddOrderReq,
    ApiOrder,
    BidAsk,
    CancelReason,
    EmptyOrderStateQuery,
    OrderID,
    OrderState,
    OrderTimeInForce,
    OrderType,
    order_state_from_query_param,
)

__all__ = [
    "AccountID",
    "GenericResponse",
    "GetBalanceReq",
    "GetPublicStatusRes",
    "PageInfo",
    "PageResponse",
    "Symbol",
    "V0GetBalanceRes",
    "ApiFill",
    "FillID",
    "FillParams",
    "BookLevel",
    "BookSnapshot",
    "CurrencyPair",
    "Market",
    "SpotMarkets",
    "V1GetMarketsResult",
    "V1SpotMarketsResult",
    "AddOrderReq",
    "ApiOrder",
    "BidAsk",
    "CancelReason",
    "EmptyOrderStateQuery",
    "OrderID",
    "OrderState",
    "OrderTimeInForce",
    "OrderType",
    "order_state_from_query_param",
]
