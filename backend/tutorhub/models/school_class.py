"""SchoolClass and ClassEnrollment ORM models.

A ClassEnrollment row is the single record of a student belonging to a class;
both ``Student.enrolled_classes`` and ``SchoolClass.enrolled_students`` read
from it. ``SchoolClass.enrolled_count`` mirrors the row count and is the column
the conditional capacity update targets.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tutorhub.database import Base


class SchoolClass(Base):
    __tablename__ = "classes"
    __table_args__ = (
        CheckConstraint("enrolled_count >= 0", name="ck_classes_enrolled_count_nonnegative"),
        CheckConstraint("enrolled_count <= capacity", name="ck_classes_enrolled_count_capacity"),
    )

    class_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    grade = Column(String(50), nullable=False)
    category = Column(String(100), nullable=False)
    class_type = Column(String(50), nullable=False, default="Normal")
    venue = Column(String(255), nullable=True)
    schedule = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    capacity = Column(Integer, nullable=False)
    enrolled_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    enrolled_students = relationship(
        "Student",
        secondary="class_enrollments",
        order_by="ClassEnrollment.enrolled_at",
        viewonly=True,
    )

    @property
    def label(self) -> str:
        return f"{self.grade} - {self.category}"

    @property
    def available_spots(self) -> int:
        return max(self.capacity - self.enrolled_count, 0)


class ClassEnrollment(Base):
    __tablename__ = "class_enrollments"

    class_id = Column(String(36), ForeignKey("classes.class_id"), primary_key=True)
    student_id = Column(String(36), ForeignKey("students.student_id"), primary_key=True)
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
