"""Student registration and approval routes."""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from tutorhub.database import get_db
from tutorhub.dependencies import get_actor, require_admin, get_notification_sink
from tutorhub.errors import NotFound, InvalidState
from tutorhub.models.student import Student, StudentStatus
from tutorhub.models.user import User
from tutorhub.schemas.student import (
    StudentCreate,
    StudentOut,
    StudentProfileOut,
    StudentStatusUpdate,
    StudentUpdate,
)
from tutorhub.services import notification_service
from tutorhub.services.notification_service import NotificationEvent, NotificationSink

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def register_student(payload: StudentCreate, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Register the caller as a student. The profile waits for admin approval."""
    if db.query(Student).filter(Student.user_id == actor.user_id).first():
        raise InvalidState("You are already registered as a student")

    student = Student(
        user_id=actor.user_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        selected_grade=payload.selected_grade,
        status=StudentStatus.pending,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info("Student %s registered for user %s", student.student_id, actor.user_id)
    return student


def _own_student(db: Session, actor: User) -> Student:
    student = db.query(Student).filter(Student.user_id == actor.user_id).first()
    if not student:
        raise NotFound("Student profile not found")
    return student


def _profile(student: Student) -> StudentProfileOut:
    profile = StudentProfileOut.model_validate(student)
    profile.enrolled_classes = [c for c in profile.enrolled_classes if c.is_active]
    return profile


@router.get("/me", response_model=StudentProfileOut)
def get_my_profile(actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """The caller's profile with the active classes they are enrolled in."""
    return _profile(_own_student(db, actor))


@router.patch("/me", response_model=StudentProfileOut)
def update_my_profile(payload: StudentUpdate, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Edit name and grade. Registration status and ownership are not editable here."""
    student = _own_student(db, actor)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in updates.items():
        setattr(student, field, value)
    db.commit()
    db.refresh(student)
    logger.info("Student %s updated own profile: %s", student.student_id, sorted(updates))
    return _profile(student)


@router.get("/", response_model=list[StudentOut])
def list_students(
    status_filter: Optional[StudentStatus] = Query(None),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Student)
    if status_filter:
        query = query.filter(Student.status == status_filter)
    return query.order_by(Student.created_at.desc()).all()


@router.patch("/{student_id}/status", response_model=StudentOut)
def set_student_status(
    student_id: str,
    payload: StudentStatusUpdate,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Approve or reject a student registration."""
    student = db.query(Student).filter(Student.student_id == student_id).first()
    if not student:
        raise NotFound("Student not found")

    old_status = student.status
    student.status = payload.status
    db.commit()
    db.refresh(student)
    logger.info(
        "Student %s registration %s -> %s by %s",
        student_id, old_status.value, payload.status.value, admin.user_id,
    )

    event = NotificationEvent(
        recipient_user_id=student.user_id,
        type="registration_status_change",
        title="Registration Status Update",
        message=f"Your student registration has been {payload.status.value.lower()}.",
        data={"student_id": student.student_id, "admin_note": payload.note},
    )
    background_tasks.add_task(notification_service.dispatch, sink, [event])
    return student
