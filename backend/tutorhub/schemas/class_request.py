"""Pydantic schemas for class enrollment requests."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from tutorhub.models.class_request import RequestStatus


class ClassRequestCreate(BaseModel):
    class_id: str
    reason: str = Field(min_length=1, max_length=1000)


class AdminNote(BaseModel):
    admin_note: Optional[str] = Field(default=None, max_length=500)


class StatusChange(AdminNote):
    status: RequestStatus


class AdminResponseOut(BaseModel):
    acted_by: str
    acted_at: datetime
    note: Optional[str] = None


class ClassRequestOut(BaseModel):
    request_id: str
    student_id: str
    class_id: str
    reason: str
    status: str
    admin_response: Optional[AdminResponseOut] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ClassRequestEnvelope(BaseModel):
    message: str
    request: ClassRequestOut


class ClassRequestList(BaseModel):
    requests: list[ClassRequestOut]
    total: int


class PendingCount(BaseModel):
    count: int


class BulkFailureOut(BaseModel):
    request_id: str
    student_name: str
    class_name: str
    reason: str
    message: str

    model_config = {"from_attributes": True}


class BulkApprovalOut(BaseModel):
    message: str
    approved_count: int
    failed_count: int
    failures: list[BulkFailureOut] = []

    model_config = {"from_attributes": True}


class DeletedRequestOut(BaseModel):
    request_id: str
    student_name: str
    class_name: str
    status: str


class AdminDeleteOut(BaseModel):
    message: str
    deleted_request: DeletedRequestOut


class MessageOut(BaseModel):
    message: str
