from decimal import Decimal
from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_serializer, model_validator

from enclave_client.models.base import WireModel

Market = str


class CurrencyPair(WireModel):
    base: str
    quote: str


class V1SpotMarketsResult(WireModel):
    _omit_empty: ClassVar[Tuple[str, ...]] = ("disabled",)

    market: Market
    base_increment: Decimal = Field(alias="baseIncrement")
    pair: Optional[CurrencyPair] = None
    quote_increment: Decimal = Field(alias="quoteIncrement")
    disabled: bool = False


class SpotMarkets(WireModel):
    trading_pairs: List[V1SpotMarketsResult] = Field(default_factory=list, alias="tradingPairs")


class V1GetMarketsResult(WireModel):
    # spot markets that the user is allowed to trade in
    spot: SpotMarkets

    def find_spot_market(self, market: Market) -> Optional[V1SpotMarketsResult]:
        for pair in self.spot.trading_pairs:
            if pair.market == market:
                return pair
        return None


class BookLevel(BaseModel):
    """
    订单簿档位，线上格式为 [price, size] 两元素数组而不是对象，
    例如 ["21.05", "0.34"]。
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    price: Decimal
    quantity: Decimal = Field(alias="size")

    @model_validator(mode="before")
    @classmethod
    def from_pair(cls, data: Any, info: ValidationInfo) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"expected 2 elements, got {len(data)}")
            return {"price": data[0], "size": data[1]}
        if info.mode == "json":
            raise ValueError("book level must be a [price, size] array")
        return data

    @model_serializer(mode="plain")
    def to_pair(self) -> List[str]:
        return [format(self.price, "f"), format(self.quantity, "f")]


class BookSnapshot(WireModel):
    # best n bids / asks in the market, e.g. [["21.05", "0.34"], ["21.02", "1.25"]]
    bids: List[BookLevel] = Field(default_factory=list)
    asks: List[BookLevel] = Field(default_factory=list)

    @property
    def best_bid(self) -> Optional[BookLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[BookLevel]:
        return self.asks[0] if self.asks else None
