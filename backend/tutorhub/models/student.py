"""Student ORM model — registration profile owned by a user."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tutorhub.database import Base


class StudentStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class Student(Base):
    __tablename__ = "students"

    student_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    selected_grade = Column(String(50), nullable=False)
    status = Column(SAEnum(StudentStatus), nullable=False, default=StudentStatus.pending)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Read-only view; ClassEnrollment rows are written by enrollment_service only
    enrolled_classes = relationship(
        "SchoolClass",
        secondary="class_enrollments",
        order_by="ClassEnrollment.enrolled_at",
        viewonly=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
