"""Pydantic schemas for classes."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    grade: str
    category: str
    class_type: str = "Normal"
    venue: Optional[str] = None
    schedule: Optional[str] = None
    capacity: int = Field(gt=0)
    is_active: bool = True


class ClassUpdate(BaseModel):
    grade: Optional[str] = None
    category: Optional[str] = None
    class_type: Optional[str] = None
    venue: Optional[str] = None
    schedule: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class ClassOut(BaseModel):
    class_id: str
    grade: str
    category: str
    class_type: str
    venue: Optional[str] = None
    schedule: Optional[str] = None
    is_active: bool
    capacity: int
    enrolled_count: int
    available_spots: int
    created_at: datetime

    model_config = {"from_attributes": True}


class EnrolledStudentOut(BaseModel):
    student_id: str
    first_name: str
    last_name: str
    selected_grade: str

    model_config = {"from_attributes": True}


class ClassDetailOut(ClassOut):
    enrolled_students: list[EnrolledStudentOut] = []
