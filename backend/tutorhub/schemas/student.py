"""Pydantic schemas for Students."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from tutorhub.models.student import StudentStatus
from tutorhub.schemas.school_class import ClassOut


class StudentCreate(BaseModel):
    first_name: str
    last_name: str
    selected_grade: str


class StudentUpdate(BaseModel):
    """Fields a student may edit on their own profile; anything else in the body is ignored."""
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    selected_grade: Optional[str] = Field(default=None, min_length=1)


class StudentStatusUpdate(BaseModel):
    status: StudentStatus
    note: Optional[str] = None


class StudentOut(BaseModel):
    student_id: str
    user_id: str
    first_name: str
    last_name: str
    selected_grade: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class StudentProfileOut(StudentOut):
    enrolled_classes: list[ClassOut] = []
