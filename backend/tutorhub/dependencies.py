"""Shared FastAPI dependencies: caller resolution and notification delivery."""
from fastapi import Depends, Query
from sqlalchemy.orm import Session

from tutorhub.database import SessionLocal, get_db
from tutorhub.errors import NotFound, Forbidden
from tutorhub.models.user import User, UserRole
from tutorhub.services.notification_service import NotificationSink


def get_notification_sink() -> NotificationSink:
    return NotificationSink(SessionLocal)


def get_actor(
    actor_user_id: str = Query(..., description="ID of the user performing the action"),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.user_id == actor_user_id).first()
    if not user:
        raise NotFound("Acting user not found")
    return user


def require_admin(actor: User = Depends(get_actor)) -> User:
    """Only administrators may moderate classes, students and requests."""
    if actor.role != UserRole.admin:
        raise Forbidden("Administrator privileges required")
    return actor
