"""Class enrollment request API routes — delegates to enrollment_service.

Notifications produced by a transition are delivered in a background task
after the response, so delivery problems never change the outcome.
"""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from tutorhub.database import get_db
from tutorhub.dependencies import get_actor, require_admin, get_notification_sink
from tutorhub.models.class_request import RequestStatus
from tutorhub.models.user import User
from tutorhub.services import enrollment_service, notification_service
from tutorhub.services.notification_service import NotificationSink
from tutorhub.schemas.class_request import (
    AdminDeleteOut,
    AdminNote,
    BulkApprovalOut,
    BulkFailureOut,
    ClassRequestCreate,
    ClassRequestEnvelope,
    ClassRequestList,
    ClassRequestOut,
    MessageOut,
    PendingCount,
    StatusChange,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _envelope(message: str, cr) -> ClassRequestEnvelope:
    return ClassRequestEnvelope(message=message, request=ClassRequestOut.model_validate(cr))


def _deliver_later(background_tasks: BackgroundTasks, sink: NotificationSink, outbox: list) -> None:
    if outbox:
        background_tasks.add_task(notification_service.dispatch, sink, list(outbox))


# ---------------------------------------------------------------------------
# Student endpoints
# ---------------------------------------------------------------------------
@router.post("/", response_model=ClassRequestEnvelope, status_code=status.HTTP_201_CREATED)
def create_class_request(
    payload: ClassRequestCreate,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Submit an enrollment request for the calling student."""
    cr = enrollment_service.create_request(db, actor.user_id, payload.class_id, payload.reason)
    return _envelope("Class enrollment request submitted successfully", cr)


@router.get("/mine", response_model=ClassRequestList)
def list_my_class_requests(actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """List the calling student's requests, newest first."""
    requests = enrollment_service.list_own_requests(db, actor.user_id)
    return ClassRequestList(requests=[ClassRequestOut.model_validate(r) for r in requests], total=len(requests))


@router.delete("/{request_id}", response_model=MessageOut)
def delete_class_request(request_id: str, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Withdraw one of the caller's own pending requests."""
    enrollment_service.delete_request(db, request_id, actor.user_id)
    return MessageOut(message="Class request deleted successfully")


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------
@router.get("/", response_model=ClassRequestList)
def list_class_requests(
    status_filter: Optional[RequestStatus] = Query(None),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List all requests, optionally filtered by status."""
    requests = enrollment_service.list_requests(db, status_filter)
    return ClassRequestList(requests=[ClassRequestOut.model_validate(r) for r in requests], total=len(requests))


@router.get("/pending-count", response_model=PendingCount)
def get_pending_count(_admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return PendingCount(count=enrollment_service.pending_count(db))


@router.post("/approve-all", response_model=BulkApprovalOut)
def approve_all_pending_requests(
    background_tasks: BackgroundTasks,
    payload: AdminNote = AdminNote(),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Approve every pending request; per-request failures are reported, not raised."""
    outbox: list = []
    result = enrollment_service.approve_all_pending(db, admin.user_id, payload.admin_note, outbox)
    _deliver_later(background_tasks, sink, outbox)
    return BulkApprovalOut(
        message=result.message,
        approved_count=result.approved_count,
        failed_count=result.failed_count,
        failures=[BulkFailureOut.model_validate(f) for f in result.failures],
    )


@router.post("/{request_id}/approve", response_model=ClassRequestEnvelope)
def approve_class_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    payload: AdminNote = AdminNote(),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    outbox: list = []
    cr = enrollment_service.approve_request(db, request_id, admin.user_id, payload.admin_note, outbox)
    _deliver_later(background_tasks, sink, outbox)
    return _envelope("Class request approved successfully", cr)


@router.post("/{request_id}/reject", response_model=ClassRequestEnvelope)
def reject_class_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    payload: AdminNote = AdminNote(),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    outbox: list = []
    cr = enrollment_service.reject_request(db, request_id, admin.user_id, payload.admin_note, outbox)
    _deliver_later(background_tasks, sink, outbox)
    return _envelope("Class request rejected", cr)


@router.patch("/{request_id}/status", response_model=ClassRequestEnvelope)
def change_class_request_status(
    request_id: str,
    payload: StatusChange,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Move a request between any two statuses, syncing class membership."""
    outbox: list = []
    cr, old_status = enrollment_service.change_status(
        db, request_id, payload.status, admin.user_id, payload.admin_note, outbox,
    )
    _deliver_later(background_tasks, sink, outbox)
    return _envelope(
        f"Class request status changed from {old_status.value} to {payload.status.value} successfully", cr,
    )


@router.delete("/{request_id}/admin", response_model=AdminDeleteOut)
def admin_delete_class_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Delete a request in any status; an approved one also releases the seat."""
    outbox: list = []
    summary = enrollment_service.admin_delete(db, request_id, admin.user_id, outbox)
    _deliver_later(background_tasks, sink, outbox)
    return AdminDeleteOut(message="Class request deleted successfully", deleted_request=summary)
