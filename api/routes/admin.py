"""
管理端订单API路由（需要 admin 角色）
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_current_admin, get_order_service
from application.dtos.orders import AdminUpdateOrderStatusDTO, OrderDTO
from application.services.order_service import OrderService
from core.config import settings
from core.response import paginated_response, success_response

router = APIRouter(
    prefix="/admin",
    tags=["管理端"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/stats", summary="订单统计")
async def order_stats(service: OrderService = Depends(get_order_service)):
    stats = await service.stats()
    return success_response(data=stats)


@router.get("/orders", summary="订单列表（分页）")
async def admin_list_orders(
    status: Optional[str] = Query(None, description="状态过滤，all 表示不过滤"),
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: OrderService = Depends(get_order_service),
):
    orders, total = await service.admin_list_orders(status=status, page=page, size=size)
    return paginated_response(
        items=[OrderDTO.from_entity(o) for o in orders],
        total=total,
        page=page,
        size=size,
    )


@router.get("/orders/{order_id}", summary="订单详情")
async def admin_get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    return success_response(data={"order": OrderDTO.from_entity(order)})


@router.patch("/orders/{order_id}/status", summary="管理端更新订单状态")
async def admin_update_order_status(
    order_id: str,
    payload: AdminUpdateOrderStatusDTO,
    service: OrderService = Depends(get_order_service),
):
    """
    status ∈ pending / processing / shipped / delivered / cancelled

    shipped / delivered 会发送邮件并创建站内通知；cancelled 只创建站内通知。
    """
    order = await service.admin_set_status(
        order_id,
        payload.status,
        transaction_id=payload.transaction_id,
        tracking_number=payload.tracking_number,
    )
    return success_response(data={"order": OrderDTO.from_entity(order)}, message="Order updated")
