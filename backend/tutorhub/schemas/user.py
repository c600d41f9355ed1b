"""Pydantic schemas for Users."""
from datetime import datetime
from pydantic import BaseModel

from tutorhub.models.user import UserRole


class UserCreate(BaseModel):
    full_name: str
    email: str
    role: UserRole = UserRole.student


class UserOut(BaseModel):
    user_id: str
    full_name: str
    email: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}
