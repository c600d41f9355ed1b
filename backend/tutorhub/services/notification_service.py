"""Best-effort notification delivery.

Coordinator operations collect ``NotificationEvent`` values and hand them over
only after their transaction commits. ``dispatch`` delivers them one by one;
a failing send is logged and never reaches the caller.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.orm import Session

from tutorhub.models.notification import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    recipient_user_id: str
    type: str
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


class NotificationSink:
    """Persists notifications into the recipient's inbox using its own session."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def send(self, recipient_user_id: str, type: str, title: str, message: str, data: dict[str, Any]) -> None:
        db = self._session_factory()
        try:
            db.add(Notification(
                recipient_user_id=recipient_user_id,
                type=type,
                title=title,
                message=message,
                data=data,
            ))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def dispatch(sink: NotificationSink, events: list[NotificationEvent]) -> int:
    """Deliver queued events; returns how many were delivered."""
    delivered = 0
    for ev in events:
        try:
            sink.send(ev.recipient_user_id, ev.type, ev.title, ev.message, ev.data)
        except Exception:
            logger.exception("Failed to deliver '%s' notification to user %s", ev.type, ev.recipient_user_id)
            continue
        delivered += 1
    return delivered
