# Authentication Feature

from patient_portal.features.auth.schemas import User
from patient_portal.features.auth.service import AuthService
from patient_portal.features.auth.session import Session, SessionState, SessionStore

__all__ = ["User", "AuthService", "Session", "SessionState", "SessionStore"]
