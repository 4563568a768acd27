from typing import ClassVar, Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import Field, model_validator

from enclave_client.models.base import WireModel

T = TypeVar('T')

AccountID = str
Symbol = str


class GenericResponse(WireModel, Generic[T]):
    """
    通用响应信封 {success, result, error}

    success=true 时 error 为空；success=false 时 error 非空。
    """
    _omit_empty: ClassVar[Tuple[str, ...]] = ("error",)

    success: bool
    result: Optional[T] = None
    error: str = ""

    @model_validator(mode="after")
    def check_success_error_pairing(self) -> "GenericResponse[T]":
        if self.success and self.error:
            raise ValueError(f"successful response carries an error: {self.error}")
        if not self.success and not self.error:
            raise ValueError("unsuccessful response carries no error message")
        return self


class PageInfo(WireModel):
    """分页游标，空字符串表示该方向没有更多数据"""
    prev_cursor: str = Field(default="", alias="prevCursor")
    next_cursor: str = Field(default="", alias="nextCursor")


class PageResponse(WireModel, Generic[T]):
    """分页响应"""
    result: List[T] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")

    @property
    def has_next(self) -> bool:
        return bool(self.page_info.next_cursor)

    @property
    def has_prev(self) -> bool:
        return bool(self.page_info.prev_cursor)


class GetPublicStatusRes(WireModel):
    market_statuses: Dict[str, str] = Field(default_factory=dict, alias="marketStatuses")


class GetBalanceReq(WireModel):
    # the coin for which the customer wants to get balance, e.g. AVAX
    symbol: Symbol


class V0GetBalanceRes(WireModel):
    """单个币种的余额"""
    account_id: AccountID = Field(alias="accountId")
    symbol: Symbol
    total_balance: str = Field(alias="totalBalance")
    # held in open orders
    reserved_balance: str = Field(alias="reservedBalance")
    free_balance: str = Field(alias="freeBalance")
