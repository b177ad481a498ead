# Authentication Feature - Session Store

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from patient_portal.core.logging import logger
from patient_portal.core.storage import TOKEN_KEY, USER_KEY, Storage
from patient_portal.features.auth.schemas import User


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class Session(BaseModel):
    """The authenticated identity and token held for the current login."""
    
    user: User
    token: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    
    @property
    def user_id(self) -> int:
        return self.user.id
    
    @property
    def email(self) -> str:
        return self.user.email
    
    @property
    def display_name(self) -> str:
        return self.user.name
    
    @property
    def role(self) -> str:
        return self.user.role


class SessionStore:
    """
    Holds the current session and mirrors it to durable storage.
    
    The store is explicit state passed to whoever needs it (the API client,
    the auth service, the app shell); nothing reads a module-level session.
    """
    
    def __init__(self, storage: Storage):
        self.storage = storage
        self._session: Optional[Session] = None
    
    @property
    def session(self) -> Optional[Session]:
        return self._session
    
    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None
    
    @property
    def user(self) -> Optional[User]:
        return self._session.user if self._session else None
    
    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None
    
    @property
    def state(self) -> SessionState:
        if self.is_authenticated:
            return SessionState.AUTHENTICATED
        return SessionState.UNAUTHENTICATED
    
    def start(self, token: str, user: User) -> Session:
        """Enter the authenticated state and persist token + user."""
        self._session = Session(user=user, token=token)
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.model_dump_json(by_alias=True))
        logger.info(f"Session started for user {user.id}")
        return self._session
    
    def update_user(self, user: User) -> None:
        """Replace the cached user of the active session."""
        if self._session is None:
            return
        self._session = self._session.model_copy(update={"user": user})
        self.storage.set_item(USER_KEY, user.model_dump_json(by_alias=True))
    
    def restore(self) -> Optional[Session]:
        """
        Load the session persisted by a previous run.
        
        Returns:
            Session if both token and user were stored, None otherwise
        
        Raises:
            pydantic.ValidationError: If the stored user record is corrupt
        """
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            return None
        
        user = User.model_validate_json(raw_user)
        self._session = Session(user=user, token=token)
        logger.info(f"Restored stored session for user {user.id}")
        return self._session
    
    def clear(self) -> None:
        """Drop in-memory and durable session state. Always succeeds."""
        self._session = None
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
    
    def invalidate(self, token: Optional[str]) -> bool:
        """
        End the session because the server rejected `token`.
        
        Returns:
            bool: True only for the call that actually ended the session
        """
        if not token or token != self.token:
            return False
        self.clear()
        logger.info("Session invalidated")
        return True
