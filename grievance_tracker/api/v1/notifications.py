"""
Notification read-state endpoints for admins and individual users.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from grievance_tracker.api import deps
from grievance_tracker.models.user import User
from grievance_tracker.schemas.notification import (
    MessageResponse,
    NotificationResponse,
    UnreadCountResponse,
    UserNotificationResponse,
)
from grievance_tracker.services.notification import NotificationDispatcher

router = APIRouter(tags=["Notifications"])


# --- Admin audience -----------------------------------------------------------

@router.get("/notifications", response_model=List[NotificationResponse])
def list_admin_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    return deps.raise_for_result(NotificationDispatcher(db).list_admin(limit))


@router.put("/notifications/read-all", response_model=MessageResponse)
def mark_all_admin_notifications_read(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    count = deps.raise_for_result(NotificationDispatcher(db).mark_all_admin_read())
    return MessageResponse(message=f"{count} notifications marked as read")


@router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_admin_notification_read(
    notification_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    return deps.raise_for_result(NotificationDispatcher(db).mark_admin_read(notification_id))


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
def admin_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_admin_user),
):
    return UnreadCountResponse(count=deps.raise_for_result(NotificationDispatcher(db).admin_unread_count()))


# --- Per user -----------------------------------------------------------------

@router.get("/user-notifications", response_model=List[UserNotificationResponse])
def list_user_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return deps.raise_for_result(NotificationDispatcher(db).list_for_user(current_user, limit))


@router.put("/user-notifications/read-all", response_model=MessageResponse)
def mark_all_user_notifications_read(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    count = deps.raise_for_result(NotificationDispatcher(db).mark_all_user_read(current_user))
    return MessageResponse(message=f"{count} notifications marked as read")


@router.put("/user-notifications/{notification_id}/read", response_model=UserNotificationResponse)
def mark_user_notification_read(
    notification_id: int,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    """Only the recipient can mark their own notification; others get 404."""
    return deps.raise_for_result(NotificationDispatcher(db).mark_user_read(notification_id, current_user))


@router.get("/user-notifications/unread-count", response_model=UnreadCountResponse)
def user_unread_count(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return UnreadCountResponse(count=deps.raise_for_result(NotificationDispatcher(db).user_unread_count(current_user)))
