"""
站内通知API路由（当前登录用户）
"""
from fastapi import APIRouter, Depends, Query

from api.dependencies import CurrentUser, get_current_user, get_notification_dispatcher
from application.dtos.notifications import NotificationDTO
from application.services.notification_service import NotificationDispatcher
from core.response import success_response
from domain.common.exceptions import NotificationNotFoundException

router = APIRouter(
    prefix="/notifications",
    tags=["站内通知"]
)


@router.get("", summary="通知列表")
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    user: CurrentUser = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    items = await dispatcher.list(user.id, limit)
    unread = await dispatcher.unread_count(user.id)
    return success_response(
        data={
            "notifications": [NotificationDTO.from_entity(n) for n in items],
            "unreadCount": unread,
        }
    )


@router.get("/unread-count", summary="未读数量")
async def unread_count(
    user: CurrentUser = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    return success_response(data={"count": await dispatcher.unread_count(user.id)})


@router.patch("/{notification_id}/read", summary="标记已读")
async def mark_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    notification = await dispatcher.mark_read(notification_id, user_id=user.id)
    return success_response(data={"notification": NotificationDTO.from_entity(notification)})


@router.post("/mark-all-read", summary="全部标记已读")
async def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    count = await dispatcher.mark_all_read(user.id)
    return success_response(data={"count": count})


@router.delete("/{notification_id}", summary="删除通知")
async def delete_notification(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    if not await dispatcher.delete(notification_id, user_id=user.id):
        raise NotificationNotFoundException(notification_id)
    return success_response(data={"deleted": True})
