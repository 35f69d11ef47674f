"""
订单API路由 - 顾客/结账端
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_order_service
from application.dtos.orders import CreatedOrderDTO, CreateOrderDTO, OrderDTO, UpdateOrderStatusDTO
from application.services.order_service import OrderService
from core.response import success_response

router = APIRouter(
    prefix="/orders",
    tags=["订单"]
)


@router.post("", summary="创建订单", status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: CreateOrderDTO,
    service: OrderService = Depends(get_order_service),
):
    """
    创建订单并生成支付会话

    - **items**: 订单行（productId/name/price/quantity，价格单位为分）
    - **total**: 订单总额（分），按提交值原样保存
    - **customerName** / **customerEmail**: 顾客信息

    未配置网关凭据时返回 mock 支付会话（payment.isMock = true）。
    """
    order, session = await service.create_order(payload)
    return success_response(
        data={
            "order": CreatedOrderDTO.from_entity(order),
            "payment": session,
        },
        message="Order created",
    )


@router.get("/{order_id}", summary="获取订单")
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    return success_response(data={"order": OrderDTO.from_entity(order)})


@router.get("", summary="订单列表")
async def list_orders(
    email: Optional[str] = Query(None, description="按顾客邮箱过滤"),
    service: OrderService = Depends(get_order_service),
):
    orders = await service.list_orders(email)
    return success_response(data={"orders": [OrderDTO.from_entity(o) for o in orders]})


@router.patch("/{order_id}/status", summary="更新订单状态")
async def update_order_status(
    order_id: str,
    payload: UpdateOrderStatusDTO,
    service: OrderService = Depends(get_order_service),
):
    """status ∈ pending / processing / completed / failed / cancelled"""
    order = await service.set_status(order_id, payload.status, payload.transaction_id)
    return success_response(data={"order": OrderDTO.from_entity(order)}, message="Order updated")
