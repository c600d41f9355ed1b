"""Notification inbox routes."""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tutorhub.database import get_db
from tutorhub.dependencies import get_actor
from tutorhub.errors import NotFound, Forbidden
from tutorhub.models.notification import Notification
from tutorhub.models.user import User
from tutorhub.schemas.notification import NotificationOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[NotificationOut])
def list_notifications(
    unread_only: bool = Query(False),
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """The caller's notifications, newest first."""
    query = db.query(Notification).filter(Notification.recipient_user_id == actor.user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).all()


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    notification = db.query(Notification).filter(Notification.notification_id == notification_id).first()
    if not notification:
        raise NotFound("Notification not found")
    if notification.recipient_user_id != actor.user_id:
        raise Forbidden("You can only update your own notifications")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
