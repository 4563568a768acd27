"""现货交易端点"""

from typing import Any, List, Optional

from enclave_client.models import paths
from enclave_client.models.common import GenericResponse, PageResponse
from enclave_client.models.fills import ApiFill, FillParams
from enclave_client.models.markets import BookSnapshot, Market
from enclave_client.models.orders import AddOrderReq, ApiOrder, OrderID
from enclave_client.transport.errors import ApiRequestError, EnclaveError


def _order_path(order_id: OrderID) -> str:
    return paths.V1_SPOT_INDIVIDUAL_ORDERS_PATH.replace(paths.ORDER_ID_PARAM, order_id)


def _client_order_path(client_order_id: OrderID) -> str:
    return _order_path(paths.V1_SPOT_CLIENT_ORDER_ID_PREFIX + client_order_id)


def _fills_by_order_path(order_id: OrderID) -> str:
    return paths.V1_SPOT_FILLS_BY_ORDER_ID_PATH.replace(paths.ORDER_ID_PARAM, order_id)


class SpotTradingMixin:
    """现货下单、撤单、订单簿与成交查询，依赖 ApiClient 的 _call/_request"""

    async def add_spot_order(self, req: AddOrderReq) -> GenericResponse[ApiOrder]:
        """下单"""
        return await self._call(
            "spot add order", "POST", paths.V1_SPOT_ORDERS_PATH,
            GenericResponse[ApiOrder], req, detail=repr(req),
        )

    async def get_spot_depth_book(self, market: Market) -> GenericResponse[BookSnapshot]:
        """获取订单簿"""
        path = f"{paths.V1_SPOT_DEPTH_PATH}?market={market}"
        return await self._call("spot get depth book", "GET", path, GenericResponse[BookSnapshot], detail=market)

    async def get_spot_order(self, order_id: OrderID) -> GenericResponse[ApiOrder]:
        """查询订单"""
        return await self._call(
            "spot get order", "GET", _order_path(order_id),
            GenericResponse[ApiOrder], detail=order_id,
        )

    async def cancel_all_spot_orders(self) -> None:
        """撤销所有订单"""
        await self._call("spot delete all orders", "DELETE", paths.V1_SPOT_ORDERS_PATH, GenericResponse[Any])

    async def cancel_spot_order(self, order_id: OrderID) -> GenericResponse[Any]:
        """撤单"""
        return await self._call(
            "spot delete order", "DELETE", _order_path(order_id),
            GenericResponse[Any], detail=order_id,
        )

    async def cancel_spot_order_by_client_id(self, client_order_id: OrderID) -> GenericResponse[Any]:
        """按客户端订单ID撤单"""
        return await self._call(
            "spot delete order by client id", "DELETE", _client_order_path(client_order_id),
            GenericResponse[Any], detail=client_order_id,
        )

    async def get_spot_fills(self, params: Optional[FillParams] = None) -> PageResponse[ApiFill]:
        """分页查询成交记录，分页响应没有 success 字段"""
        params = params or FillParams()
        path = paths.V1_SPOT_FILLS_PATH + params.to_query_string()
        return await self._call("spot get fills", "GET", path, PageResponse[ApiFill])

    async def get_spot_fills_by_order_id(self, order_id: OrderID) -> GenericResponse[List[ApiFill]]:
        """查询订单的成交记录"""
        return await self._call(
            "spot get fills by order id", "GET", _fills_by_order_path(order_id),
            GenericResponse[List[ApiFill]], detail=order_id,
        )

    async def get_spot_fills_by_client_order_id(self, client_order_id: OrderID) -> GenericResponse[List[ApiFill]]:
        """按客户端订单ID查询成交记录"""
        return await self._call(
            "spot get fills by client order id", "GET",
            _fills_by_order_path(paths.V1_SPOT_CLIENT_ORDER_ID_PREFIX + client_order_id),
            GenericResponse[List[ApiFill]], detail=client_order_id,
        )

    # CSV 导出，响应为原始字节

    async def get_spot_orders_csv(self) -> bytes:
        """导出订单CSV"""
        return await self._csv("spot orders csv", paths.V1_SPOT_ORDERS_CSV_PATH)

    async def get_spot_fills_csv(self, params: Optional[FillParams] = None) -> bytes:
        """导出成交CSV"""
        params = params or FillParams()
        return await self._csv("spot fills csv", paths.V1_SPOT_FILLS_CSV_PATH + params.to_query_string())

    async def _csv(self, operation: str, path: str) -> bytes:
        try:
            return await self._request("GET", path, bytes, csv=True)
        except EnclaveError as e:
            raise ApiRequestError(operation, str(e)) from e
