"""Application shell: wires session, API client and features together."""

from typing import Optional

import httpx

from patient_portal.config import Settings, settings as default_settings
from patient_portal.core.events import SessionEvents, SessionExpired
from patient_portal.core.http import ApiClient
from patient_portal.core.logging import logger, setup_logging
from patient_portal.core.storage import JsonFileStorage, Storage
from patient_portal.features.auth.schemas import User
from patient_portal.features.auth.service import AuthService
from patient_portal.features.auth.session import SessionStore
from patient_portal.features.dashboard.controller import DashboardController
from patient_portal.features.patients.service import PatientService


LOGIN_ROUTE = "/"
DASHBOARD_ROUTE = "/dashboard"


class PortalApp:
    """
    One client instance: a single session, its API client and the dashboard.
    
    Lifecycle: construct, `await start()` to rehydrate the stored session,
    `await aclose()` on shutdown (or use it as an async context manager).
    """
    
    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[Storage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        setup_logging(self.settings.LOG_LEVEL)
        self.storage = storage or JsonFileStorage(self.settings.SESSION_FILE)
        self.events = SessionEvents()
        self.session = SessionStore(self.storage)
        self.client = ApiClient(
            self.session,
            base_url=self.settings.api_base_url,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
            events=self.events,
            transport=transport,
        )
        self.auth = AuthService(self.client, self.session)
        self.patients = PatientService(self.client)
        self.dashboard = DashboardController(self.patients)
        self.route = LOGIN_ROUTE
        
        self.events.subscribe(self._on_session_expired)
    
    async def __aenter__(self) -> "PortalApp":
        await self.start()
        return self
    
    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
    
    async def start(self) -> None:
        """Rehydrate the stored session and pick the landing route."""
        logger.info(f"Starting {self.settings.APP_NAME}...")
        restored = await self.auth.rehydrate()
        self.route = DASHBOARD_ROUTE if restored else LOGIN_ROUTE
        logger.info(f"Landing on {self.route}")
    
    async def aclose(self) -> None:
        await self.client.aclose()
        logger.info("Client shutdown complete")
    
    def navigate(self, path: str) -> str:
        """
        Move to `path`, redirecting to the login entry point when a protected
        route is requested without a session.
        
        Returns:
            str: The route actually reached
        """
        if path != LOGIN_ROUTE and not self.session.is_authenticated:
            logger.info(f"Redirecting unauthenticated visit of {path} to login")
            path = LOGIN_ROUTE
        self.route = path
        return path
    
    async def login(self, email: str, password: str) -> User:
        user = await self.auth.login(email, password)
        self.navigate(DASHBOARD_ROUTE)
        return user
    
    def logout(self) -> None:
        self.auth.logout()
        self.dashboard.reset()
        self.navigate(LOGIN_ROUTE)
    
    def _on_session_expired(self, event: SessionExpired) -> None:
        self.dashboard.reset()
        if self.route != LOGIN_ROUTE:
            logger.warning(f"Session expired on {self.route}, redirecting to login")
            self.route = LOGIN_ROUTE
