"""Messages handed off to the salon manager."""
from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime

from .errors import NotFoundError
from .models import ManagerMessage, MessageStatus, Priority

logger = logging.getLogger(__name__)


class EscalationQueue:
    def __init__(self):
        self._lock = threading.RLock()
        self._messages: dict[str, ManagerMessage] = {}

    def escalate(
        self,
        client_request: str,
        reason: str,
        priority: Priority = Priority.normal,
        now: datetime | None = None,
    ) -> ManagerMessage:
        msg = ManagerMessage(
            id=f"msg-{uuid.uuid4().hex[:12]}",
            client_request=client_request,
            reason=reason,
            priority=Priority(priority),
            created_at=now or datetime.now(),
        )
        with self._lock:
            self._messages[msg.id] = msg
        logger.info("Escalated %s to manager (priority=%s)", msg.id, msg.priority.value)
        return msg.model_copy()

    def respond(self, message_id: str, response_text: str, now: datetime | None = None) -> ManagerMessage:
        """Record the manager's answer; a message can be answered only once.

        Raises:
            NotFoundError: unknown id, or the message was already answered
        """
        with self._lock:
            msg = self._messages.get(message_id)
            if msg is None:
                raise NotFoundError(f"No manager message with id {message_id}", message_id=message_id)
            if msg.status is MessageStatus.responded:
                raise NotFoundError(f"Message {message_id} was already answered", message_id=message_id)

            msg.status = MessageStatus.responded
            msg.response = response_text
            msg.responded_at = now or datetime.now()
            logger.info("Manager responded to %s", message_id)
            return msg.model_copy()

    def get(self, message_id: str) -> ManagerMessage | None:
        with self._lock:
            msg = self._messages.get(message_id)
            return msg.model_copy() if msg else None

    def all(self) -> list[ManagerMessage]:
        with self._lock:
            return [msg.model_copy() for msg in self._messages.values()]

    def pending(self) -> list[ManagerMessage]:
        """Unanswered messages, urgent first, then oldest first."""
        with self._lock:
            waiting = [msg.model_copy() for msg in self._messages.values() if msg.status is MessageStatus.pending]
        return sorted(waiting, key=lambda msg: (msg.priority is not Priority.urgent, msg.created_at))

    def pending_count(self) -> int:
        with self._lock:
            return sum(1 for msg in self._messages.values() if msg.status is MessageStatus.pending)
