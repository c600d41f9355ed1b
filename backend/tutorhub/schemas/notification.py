"""Pydantic schemas for Notifications."""
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel


class NotificationOut(BaseModel):
    notification_id: str
    recipient_user_id: str
    type: str
    title: str
    message: str
    data: Optional[dict[str, Any]] = None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
