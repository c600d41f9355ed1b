"""ClassRequest ORM model — a student's application to join a class."""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, Enum as SAEnum, text
from sqlalchemy.orm import relationship
from tutorhub.database import Base


class RequestStatus(str, enum.Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class ClassRequest(Base):
    __tablename__ = "class_requests"
    __table_args__ = (
        # At most one pending request per (student, class)
        Index(
            "uq_class_requests_pending_pair",
            "student_id",
            "class_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    request_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.student_id"), nullable=False)
    class_id = Column(String(36), ForeignKey("classes.class_id"), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(SAEnum(RequestStatus), nullable=False, default=RequestStatus.pending)
    acted_by_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    acted_at = Column(DateTime(timezone=True), nullable=True)
    admin_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    student = relationship("Student")
    school_class = relationship("SchoolClass")

    @property
    def admin_response(self) -> dict | None:
        if self.acted_at is None:
            return None
        return {
            "acted_by": self.acted_by_user_id,
            "acted_at": self.acted_at,
            "note": self.admin_note,
        }
