"""Class catalogue routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from tutorhub.config import settings
from tutorhub.database import get_db
from tutorhub.dependencies import get_actor, require_admin
from tutorhub.errors import NotFound, InvalidState
from tutorhub.models.school_class import SchoolClass, ClassEnrollment
from tutorhub.models.student import Student
from tutorhub.models.user import User
from tutorhub.schemas.school_class import ClassCreate, ClassUpdate, ClassOut, ClassDetailOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(payload: ClassCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    school_class = SchoolClass(**payload.model_dump(), enrolled_count=0)
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    logger.info("Class %s (%s) created by %s", school_class.class_id, school_class.label, admin.user_id)
    return school_class


@router.get("/available", response_model=list[ClassOut])
def list_available_classes(
    grade: Optional[str] = Query(None),
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Active enrollable classes the caller is not already enrolled in."""
    query = db.query(SchoolClass).filter(
        SchoolClass.class_type == settings.ENROLLABLE_CLASS_TYPE,
        SchoolClass.is_active.is_(True),
    )
    if grade:
        query = query.filter(SchoolClass.grade == grade)

    student = db.query(Student).filter(Student.user_id == actor.user_id).first()
    if student:
        enrolled = select(ClassEnrollment.class_id).where(ClassEnrollment.student_id == student.student_id)
        query = query.filter(SchoolClass.class_id.not_in(enrolled))

    return query.order_by(SchoolClass.grade, SchoolClass.category).all()


@router.get("/grades", response_model=list[str])
def list_grades(db: Session = Depends(get_db)):
    rows = (
        db.query(SchoolClass.grade)
        .filter(SchoolClass.class_type == settings.ENROLLABLE_CLASS_TYPE, SchoolClass.is_active.is_(True))
        .distinct()
        .all()
    )
    return sorted(grade for (grade,) in rows)


@router.get("/{class_id}", response_model=ClassDetailOut)
def get_class(class_id: str, db: Session = Depends(get_db)):
    """Fetch a class with its enrolled students."""
    school_class = db.query(SchoolClass).filter(SchoolClass.class_id == class_id).first()
    if not school_class:
        raise NotFound("Class not found")
    return school_class


@router.patch("/{class_id}", response_model=ClassOut)
def update_class(
    class_id: str,
    payload: ClassUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Partial update. Capacity cannot drop below the current enrollment."""
    school_class = db.query(SchoolClass).filter(SchoolClass.class_id == class_id).first()
    if not school_class:
        raise NotFound("Class not found")

    updates = payload.model_dump(exclude_unset=True)
    if "capacity" in updates and updates["capacity"] < school_class.enrolled_count:
        raise InvalidState(
            f"Capacity cannot be lower than the {school_class.enrolled_count} students already enrolled"
        )
    for field, value in updates.items():
        setattr(school_class, field, value)
    db.commit()
    db.refresh(school_class)
    logger.info("Class %s updated by %s: %s", class_id, admin.user_id, sorted(updates))
    return school_class
