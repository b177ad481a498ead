"""End-to-end tests for the application shell against the fake API."""

import json
import logging

import httpx
import pytest

from patient_portal.config import Settings
from patient_portal.core.logging import LOGGER_NAME, setup_logging
from patient_portal.main import DASHBOARD_ROUTE, LOGIN_ROUTE, PortalApp

from conftest import BASE_URL, DEMO_USER


@pytest.mark.asyncio
async def test_start_without_session_lands_on_login(portal):
    await portal.start()
    
    assert portal.route == LOGIN_ROUTE
    assert portal.navigate(DASHBOARD_ROUTE) == LOGIN_ROUTE
    await portal.aclose()


@pytest.mark.asyncio
async def test_login_then_list_carries_bearer_token(portal, fake_api):
    await portal.start()
    
    await portal.login("demo@example.com", "password123")
    assert portal.session.is_authenticated is True
    assert portal.route == DASHBOARD_ROUTE
    
    await portal.patients.list()
    
    request = fake_api.calls("GET", "/patients")[-1]
    assert request.headers["Authorization"] == "Bearer t1"
    await portal.aclose()


@pytest.mark.asyncio
async def test_start_with_stored_session_lands_on_dashboard(portal, fake_api, storage):
    fake_api.tokens["t1"] = dict(DEMO_USER)
    storage.set_item("authToken", "t1")
    storage.set_item("user", json.dumps(DEMO_USER))
    
    await portal.start()
    
    assert portal.route == DASHBOARD_ROUTE
    await portal.auth.wait_until_ready()
    assert portal.session.is_authenticated
    assert portal.route == DASHBOARD_ROUTE


@pytest.mark.asyncio
async def test_stale_stored_session_redirects_to_login(portal, storage):
    storage.set_item("authToken", "expired")
    storage.set_item("user", json.dumps(DEMO_USER))
    
    await portal.start()
    assert portal.route == DASHBOARD_ROUTE
    
    await portal.auth.wait_until_ready()
    
    assert portal.route == LOGIN_ROUTE
    assert storage.get_item("authToken") is None


@pytest.mark.asyncio
async def test_401_during_dashboard_use_redirects_and_forgets_patients(portal, fake_api, storage):
    fake_api.seed(id=1)
    await portal.start()
    await portal.login("demo@example.com", "password123")
    await portal.dashboard.load_all()
    assert len(portal.dashboard.patients) == 1
    
    fake_api.tokens.clear()
    await portal.dashboard.load_all()
    
    assert portal.route == LOGIN_ROUTE
    assert portal.dashboard.patients == ()
    assert portal.dashboard.error is None
    assert storage.get_item("authToken") is None
    assert storage.get_item("user") is None


@pytest.mark.asyncio
async def test_logout_returns_to_login(portal):
    await portal.start()
    await portal.login("demo@example.com", "password123")
    
    portal.logout()
    
    assert portal.route == LOGIN_ROUTE
    assert not portal.session.is_authenticated
    assert portal.navigate(DASHBOARD_ROUTE) == LOGIN_ROUTE


@pytest.mark.asyncio
async def test_context_manager_starts_and_closes(portal):
    async with portal as app:
        assert app.route == LOGIN_ROUTE
        assert (await app.patients.health()).status == "OK"


@pytest.mark.asyncio
async def test_unverifiable_stored_session_redirects_to_login(storage, test_settings):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)
    
    storage.set_item("authToken", "t1")
    storage.set_item("user", json.dumps(DEMO_USER))
    portal = PortalApp(settings=test_settings, storage=storage, transport=httpx.MockTransport(handler))
    
    await portal.start()
    await portal.auth.wait_until_ready()
    
    assert not portal.session.is_authenticated
    assert portal.route == LOGIN_ROUTE
    assert portal.navigate(DASHBOARD_ROUTE) == LOGIN_ROUTE
    await portal.aclose()


@pytest.mark.asyncio
async def test_app_applies_its_own_log_level(storage):
    portal_logger = logging.getLogger(LOGGER_NAME)
    try:
        app = PortalApp(
            settings=Settings(API_BASE_URL=BASE_URL, LOG_LEVEL="DEBUG"),
            storage=storage,
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )
        
        assert portal_logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in portal_logger.handlers)
        await app.aclose()
    finally:
        setup_logging("INFO")


def test_setup_logging_does_not_stack_handlers():
    try:
        setup_logging("WARNING")
        setup_logging("ERROR")
        
        portal_logger = logging.getLogger(LOGGER_NAME)
        assert len(portal_logger.handlers) == 1
        assert portal_logger.level == logging.ERROR
    finally:
        setup_logging("INFO")
