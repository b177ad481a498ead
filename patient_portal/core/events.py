"""Session lifecycle events published by the API client."""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from patient_portal.core.logging import logger


class SessionExpired(BaseModel):
    """
    Published once when the active session ended without a logout: a 401
    response, or a stored session whose verification failed.
    
    `status_code` is None when the server could not be reached.
    """
    
    path: str
    status_code: Optional[int] = 401
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


SessionExpiredHandler = Callable[[SessionExpired], None]


class SessionEvents:
    """In-process fan-out of session events to their observers."""
    
    def __init__(self) -> None:
        self._handlers: List[SessionExpiredHandler] = []
    
    def subscribe(self, handler: SessionExpiredHandler) -> SessionExpiredHandler:
        self._handlers.append(handler)
        return handler
    
    def unsubscribe(self, handler: SessionExpiredHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)
    
    def publish(self, event: SessionExpired) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:  # noqa: BLE001
                logger.exception(f"Session event handler error: {e}")
