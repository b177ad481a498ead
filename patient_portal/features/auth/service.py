import asyncio
from typing import List, Optional

from patient_portal.core.events import SessionExpired
from patient_portal.core.http import ApiClient
from patient_portal.core.logging import logger
from patient_portal.features.auth.schemas import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    User,
    UserListResponse,
)
from patient_portal.features.auth.session import SessionStore
from patient_portal.shared.exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    PortalException,
)
from patient_portal.shared.schemas import parse_response, validate_input


class AuthService:
    """Authentication service: login, logout and session rehydration."""

    def __init__(self, client: ApiClient, session: SessionStore):
        self.client = client
        self.session = session
        self._verification: Optional[asyncio.Task] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def is_loading(self) -> bool:
        """True while a rehydrated token is still being verified."""
        return self._verification is not None and not self._verification.done()

    async def login(self, email: str, password: str) -> User:
        """
        Authenticate and start a session.

        Raises:
            ValidationError: If email or password is missing
            AuthError: With the server's message, or "Login failed"
        """
        request = validate_input(LoginRequest, {"email": email, "password": password})

        try:
            data = await self.client.post("/auth/login", request.model_dump())
            response = parse_response(AuthResponse, data)
        except (ApiError, NetworkError) as e:
            logger.warning(f"Login failed for {request.email}: {e.detail}")
            raise self._auth_failure(e, "Login failed") from e

        self.session.start(response.token, response.user)
        return response.user

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        role: Optional[str] = None,
    ) -> User:
        """
        Create an account and start a session for it.

        Raises:
            ValidationError: If a field fails client-side checks
            AuthError: With the server's message, or "Registration failed"
        """
        request = validate_input(
            RegisterRequest,
            {"email": email, "password": password, "name": name, "role": role},
        )

        try:
            data = await self.client.post(
                "/auth/register", request.model_dump(exclude_none=True)
            )
            response = parse_response(AuthResponse, data)
        except (ApiError, NetworkError) as e:
            logger.warning(f"Registration failed for {request.email}: {e.detail}")
            raise self._auth_failure(e, "Registration failed") from e

        self.session.start(response.token, response.user)
        return response.user

    @staticmethod
    def _auth_failure(error: PortalException, fallback: str) -> AuthError:
        if isinstance(error, ApiError):
            return AuthError(
                fallback,
                status_code=error.status_code,
                server_message=error.server_message,
                details=error.details,
            )
        return AuthError(fallback, status_code=None)

    def logout(self) -> None:
        """Clear the session. Safe to call when already logged out."""
        was_authenticated = self.session.is_authenticated
        self.session.clear()
        if was_authenticated:
            logger.info("Logged out")

    async def rehydrate(self) -> bool:
        """
        Restore the stored session at startup.

        The stored session is trusted immediately and verified against
        /auth/me in the background; a failed check logs out. Corrupt storage
        logs out instead of raising.

        Returns:
            bool: Whether a session was restored
        """
        try:
            session = self.session.restore()
        except Exception as e:
            logger.error(f"Error parsing stored session: {e}")
            self.logout()
            return False

        if session is None:
            return False

        self._verification = asyncio.create_task(self._verify(session.token))
        return True

    async def _verify(self, token: str) -> None:
        try:
            user = await self.get_profile()
        except Exception as e:
            # A newer login or an explicit logout owns the session now
            if self.session.token == token:
                logger.warning(f"Stored session is no longer valid: {e}")
                self.logout()
                # Only non-401 failures get here; a 401 already cleared the token
                self.client.events.publish(
                    SessionExpired(
                        path="/auth/me",
                        status_code=getattr(e, "status_code", None),
                    )
                )
            return

        if self.session.token == token:
            self.session.update_user(user)
            logger.info(f"Verified stored session for user {user.id}")

    async def wait_until_ready(self) -> None:
        """Wait for background verification of a rehydrated session."""
        if self._verification is not None:
            await self._verification

    async def get_profile(self) -> User:
        """Fetch the current user's profile."""
        data = await self.client.get("/auth/me")
        return parse_response(ProfileResponse, data).user

    async def list_users(self) -> List[User]:
        """List all users (admin only)."""
        data = await self.client.get("/auth/users")
        return parse_response(UserListResponse, data).users
