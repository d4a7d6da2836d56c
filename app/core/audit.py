import json
import logging
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field

from app.models.shared.enums import AuditAction

audit_logger = logging.getLogger("audit")


class AuditEvent(BaseModel):
    """One access or lifecycle event on a fingerprint template"""
    record_id: int
    employee_id: str
    actor_id: str
    action: AuditAction
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True


class AuditSink(Protocol):
    def emit(self, event: AuditEvent) -> None:
        ...


class LoggingAuditSink:
    """Writes audit events as JSON lines to the ``audit`` logger"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or audit_logger

    def emit(self, event: AuditEvent) -> None:
        self.logger.info(f"[AUDIT] {json.dumps(event.model_dump(mode='json'), sort_keys=True)}")


class InMemoryAuditSink:
    """Keeps events in a list; used by tests and batch tooling"""

    def __init__(self):
        self.events: List[AuditEvent] = []

    def emit(self, event: AuditEvent) -> None:
        self.events.append(event)

    def actions(self) -> List[AuditAction]:
        return [event.action for event in self.events]
