"""Class enrollment request coordinator.

Owns the ClassRequest lifecycle (pending -> approved / rejected, plus admin
status changes and deletion) and keeps class membership consistent with it:

- Membership is one ClassEnrollment row per (class, student), so the student
  side and the class side are always the same fact.
- A seat is taken with a single conditional UPDATE on
  ``classes.enrolled_count`` (only when below capacity), inside the same
  transaction that inserts the membership row and changes the request status.
- Add and remove are idempotent: an existing membership never takes a second
  seat, a missing one is never decremented.
- Notifications are collected into an outbox and appended only after the
  transaction commits; delivery happens elsewhere and cannot fail the call.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tutorhub.config import settings
from tutorhub.errors import NotFound, InvalidState, CapacityExceeded, Forbidden
from tutorhub.models.class_request import ClassRequest, RequestStatus
from tutorhub.models.school_class import SchoolClass, ClassEnrollment
from tutorhub.models.student import Student, StudentStatus
from tutorhub.services.notification_service import NotificationEvent

logger = logging.getLogger(__name__)

CAPACITY_REASON = "capacity"
PROCESSING_ERROR_REASON = "processing_error"


@dataclass
class BulkFailure:
    request_id: str
    student_name: str
    class_name: str
    reason: str
    message: str


@dataclass
class BulkApprovalResult:
    approved_count: int = 0
    failed_count: int = 0
    failures: list[BulkFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        text = f"Successfully approved {self.approved_count} class requests"
        if self.failed_count:
            text += f". {self.failed_count} requests failed to approve."
        return text


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def _get_request(db: Session, request_id: str) -> ClassRequest:
    cr = db.query(ClassRequest).filter(ClassRequest.request_id == request_id).first()
    if not cr:
        raise NotFound("Class request not found")
    return cr


def _get_student_for_user(db: Session, user_id: str) -> Student:
    student = db.query(Student).filter(Student.user_id == user_id).first()
    if not student:
        raise NotFound("Student profile not found")
    return student


def is_enrolled(db: Session, class_id: str, student_id: str) -> bool:
    return (
        db.query(ClassEnrollment)
        .filter(ClassEnrollment.class_id == class_id, ClassEnrollment.student_id == student_id)
        .first()
        is not None
    )


# ---------------------------------------------------------------------------
# Membership primitives
# ---------------------------------------------------------------------------
def _enroll(db: Session, class_id: str, student_id: str) -> bool:
    """Add the membership if absent. Returns True when a seat was taken."""
    if is_enrolled(db, class_id, student_id):
        return False

    result = db.execute(
        update(SchoolClass)
        .where(SchoolClass.class_id == class_id, SchoolClass.enrolled_count < SchoolClass.capacity)
        .values(enrolled_count=SchoolClass.enrolled_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning("Class %s is full, cannot enroll student %s", class_id, student_id)
        raise CapacityExceeded("Class is at full capacity")

    db.add(ClassEnrollment(class_id=class_id, student_id=student_id))
    db.flush()
    return True


def _unenroll(db: Session, class_id: str, student_id: str) -> bool:
    """Remove the membership if present. Returns True when a seat was released."""
    result = db.execute(
        delete(ClassEnrollment)
        .where(ClassEnrollment.class_id == class_id, ClassEnrollment.student_id == student_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False

    db.execute(
        update(SchoolClass)
        .where(SchoolClass.class_id == class_id, SchoolClass.enrolled_count > 0)
        .values(enrolled_count=SchoolClass.enrolled_count - 1)
        .execution_options(synchronize_session=False)
    )
    return True


def _release_seat(db: Session, cr: ClassRequest) -> bool:
    """Unenroll as ``cr`` leaves Approved, unless another approved request still holds the membership."""
    still_held = (
        db.query(ClassRequest.request_id)
        .filter(
            ClassRequest.student_id == cr.student_id,
            ClassRequest.class_id == cr.class_id,
            ClassRequest.status == RequestStatus.approved,
            ClassRequest.request_id != cr.request_id,
        )
        .first()
    )
    if still_held is not None:
        logger.info("Student %s keeps class %s through request %s", cr.student_id, cr.class_id, still_held[0])
        return False
    return _unenroll(db, cr.class_id, cr.student_id)


def _transition(
    db: Session,
    cr: ClassRequest,
    new_status: RequestStatus,
    actor_user_id: str,
    note: str,
) -> RequestStatus:
    """Move a request to ``new_status``, syncing membership. Caller commits."""
    if cr.school_class is None:
        raise NotFound("Associated class not found")

    old_status = cr.status
    if old_status == RequestStatus.approved and new_status != RequestStatus.approved:
        _release_seat(db, cr)
    elif old_status != RequestStatus.approved and new_status == RequestStatus.approved:
        _enroll(db, cr.class_id, cr.student_id)

    cr.status = new_status
    cr.acted_by_user_id = actor_user_id
    cr.acted_at = datetime.now(timezone.utc)
    cr.admin_note = note
    return old_status


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _event(cr: ClassRequest, type: str, title: str, message: str, **data) -> NotificationEvent:
    payload = {"class_request_id": cr.request_id, "class_id": cr.class_id}
    payload.update(data)
    return NotificationEvent(
        recipient_user_id=cr.student.user_id,
        type=type,
        title=title,
        message=message,
        data=payload,
    )


def _queue(outbox: Optional[list[NotificationEvent]], event: NotificationEvent) -> None:
    if outbox is not None:
        outbox.append(event)


# ---------------------------------------------------------------------------
# Student operations
# ---------------------------------------------------------------------------
def create_request(db: Session, user_id: str, class_id: str, reason: str) -> ClassRequest:
    """Submit a pending enrollment request for the student owned by ``user_id``."""
    student = _get_student_for_user(db, user_id)
    if student.status != StudentStatus.approved:
        raise InvalidState("Student registration must be approved before requesting class enrollment")

    school_class = db.query(SchoolClass).filter(SchoolClass.class_id == class_id).first()
    if not school_class:
        raise NotFound("Class not found")
    if not school_class.is_active or school_class.class_type != settings.ENROLLABLE_CLASS_TYPE:
        raise InvalidState("Class is not available for enrollment")
    if is_enrolled(db, class_id, student.student_id):
        raise InvalidState("Already enrolled in this class")

    cr = ClassRequest(
        student_id=student.student_id,
        class_id=class_id,
        reason=reason,
        status=RequestStatus.pending,
    )
    db.add(cr)
    try:
        db.commit()
    except IntegrityError:
        # uq_class_requests_pending_pair
        db.rollback()
        raise InvalidState("You already have a pending request for this class")
    db.refresh(cr)
    logger.info("ClassRequest %s created by student %s for class %s", cr.request_id, student.student_id, class_id)
    return cr


def list_own_requests(db: Session, user_id: str) -> list[ClassRequest]:
    student = _get_student_for_user(db, user_id)
    return (
        db.query(ClassRequest)
        .filter(ClassRequest.student_id == student.student_id)
        .order_by(ClassRequest.created_at.desc())
        .all()
    )


def delete_request(db: Session, request_id: str, user_id: str) -> None:
    """Withdraw one of the student's own pending requests."""
    cr = _get_request(db, request_id)
    student = db.query(Student).filter(Student.user_id == user_id).first()
    if student is None or cr.student_id != student.student_id:
        raise Forbidden("You can only delete your own class requests")
    if cr.status != RequestStatus.pending:
        raise InvalidState("You can only delete pending class requests")

    db.delete(cr)
    _commit(db)
    logger.info("ClassRequest %s withdrawn by student %s", request_id, student.student_id)


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------
def list_requests(db: Session, status_filter: Optional[RequestStatus] = None) -> list[ClassRequest]:
    query = db.query(ClassRequest)
    if status_filter:
        query = query.filter(ClassRequest.status == status_filter)
    return query.order_by(ClassRequest.created_at.desc()).all()


def pending_count(db: Session) -> int:
    return db.query(ClassRequest).filter(ClassRequest.status == RequestStatus.pending).count()


def approve_request(
    db: Session,
    request_id: str,
    actor_user_id: str,
    note: Optional[str] = None,
    outbox: Optional[list[NotificationEvent]] = None,
) -> ClassRequest:
    cr = _get_request(db, request_id)
    if cr.status != RequestStatus.pending:
        raise InvalidState("Class request is not pending")

    try:
        _transition(db, cr, RequestStatus.approved, actor_user_id, note or "Request approved")
    except Exception:
        db.rollback()
        raise
    _commit(db)
    db.refresh(cr)
    logger.info("ClassRequest %s approved by %s", request_id, actor_user_id)

    _queue(outbox, _event(
        cr,
        "class_request_approved",
        "Class Enrollment Request Approved",
        f"Your request to join {cr.school_class.label} class has been approved.",
        admin_note=note,
    ))
    return cr


def reject_request(
    db: Session,
    request_id: str,
    actor_user_id: str,
    note: Optional[str] = None,
    outbox: Optional[list[NotificationEvent]] = None,
) -> ClassRequest:
    cr = _get_request(db, request_id)
    if cr.status != RequestStatus.pending:
        raise InvalidState("Class request is not pending")

    try:
        _transition(db, cr, RequestStatus.rejected, actor_user_id, note or "Request rejected")
    except Exception:
        db.rollback()
        raise
    _commit(db)
    db.refresh(cr)
    logger.info("ClassRequest %s rejected by %s", request_id, actor_user_id)

    _queue(outbox, _event(
        cr,
        "class_request_rejected",
        "Class Enrollment Request Update",
        f"Your request to join {cr.school_class.label} class has been reviewed. "
        "Please contact administration for more information.",
        admin_note=note,
    ))
    return cr


def change_status(
    db: Session,
    request_id: str,
    new_status: RequestStatus,
    actor_user_id: str,
    note: Optional[str] = None,
    outbox: Optional[list[NotificationEvent]] = None,
) -> tuple[ClassRequest, RequestStatus]:
    """General admin transition between any two statuses.

    Returns the request and the status it had before the change.
    """
    cr = _get_request(db, request_id)
    old_status = cr.status
    try:
        _transition(
            db, cr, new_status, actor_user_id,
            note or f"Status changed from {old_status.value} to {new_status.value}",
        )
    except Exception:
        db.rollback()
        raise
    _commit(db)
    db.refresh(cr)
    logger.info("ClassRequest %s status %s -> %s by %s", request_id, old_status.value, new_status.value, actor_user_id)

    _queue(outbox, _event(
        cr,
        "class_request_status_change",
        "Class Request Status Update",
        f"Your class enrollment request status has been updated to {new_status.value}.",
        old_status=old_status.value,
        new_status=new_status.value,
        admin_note=note,
    ))
    return cr, old_status


def approve_all_pending(
    db: Session,
    actor_user_id: str,
    note: Optional[str] = None,
    outbox: Optional[list[NotificationEvent]] = None,
) -> BulkApprovalResult:
    """Approve every request pending at call time, oldest first.

    Each request commits on its own; a failure is recorded and the loop moves
    on, earlier approvals stay in place.
    """
    pending_ids = [
        rid for (rid,) in db.query(ClassRequest.request_id)
        .filter(ClassRequest.status == RequestStatus.pending)
        .order_by(ClassRequest.created_at)
        .all()
    ]
    if not pending_ids:
        raise InvalidState("No pending class requests found")

    result = BulkApprovalResult()
    for rid in pending_ids:
        cr = db.query(ClassRequest).filter(ClassRequest.request_id == rid).first()
        if cr is None or cr.status != RequestStatus.pending:
            logger.info("ClassRequest %s left the pending set during bulk approval, skipping", rid)
            continue

        student_name = cr.student.full_name if cr.student else "Unknown student"
        class_name = cr.school_class.label if cr.school_class else "Unknown class"
        try:
            _transition(db, cr, RequestStatus.approved, actor_user_id, note or "Bulk approval by administrator")
            db.commit()
        except CapacityExceeded as exc:
            db.rollback()
            result.failed_count += 1
            result.failures.append(BulkFailure(rid, student_name, class_name, CAPACITY_REASON, exc.message))
            continue
        except Exception:
            db.rollback()
            logger.exception("Error approving ClassRequest %s during bulk approval", rid)
            result.failed_count += 1
            result.failures.append(
                BulkFailure(rid, student_name, class_name, PROCESSING_ERROR_REASON, "Processing error")
            )
            continue

        result.approved_count += 1
        _queue(outbox, _event(
            cr,
            "class_request_approved",
            "Class Request Approved",
            f"Your class enrollment request for {class_name} has been approved.",
            admin_note=note,
        ))

    logger.info(
        "Bulk approval by %s: %d approved, %d failed",
        actor_user_id, result.approved_count, result.failed_count,
    )
    return result


def admin_delete(
    db: Session,
    request_id: str,
    actor_user_id: str,
    outbox: Optional[list[NotificationEvent]] = None,
) -> dict:
    """Delete a request in any status, releasing the seat if it was approved."""
    cr = _get_request(db, request_id)
    summary = {
        "request_id": cr.request_id,
        "student_name": cr.student.full_name,
        "class_name": cr.school_class.label,
        "status": cr.status.value,
    }
    event = _event(
        cr,
        "general",
        "Class Request Deleted",
        f"Your class enrollment request for {summary['class_name']} has been deleted by an administrator.",
        admin_note="Request deleted by administrator",
    )

    try:
        if cr.status == RequestStatus.approved:
            _release_seat(db, cr)
        db.delete(cr)
    except Exception:
        db.rollback()
        raise
    _commit(db)
    logger.info("ClassRequest %s (%s) deleted by admin %s", request_id, summary["status"], actor_user_id)

    _queue(outbox, event)
    return summary
