"""Shared fixtures: an in-memory fake of the patient records API."""

import json
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

from patient_portal.config import Settings
from patient_portal.core.storage import MemoryStorage
from patient_portal.main import PortalApp


BASE_URL = "http://api.test/api"

DEMO_USER = {
    "id": 1,
    "email": "demo@example.com",
    "name": "Demo User",
    "role": "user",
    "createdAt": "2024-01-01T00:00:00Z",
}


class FakeApi:
    """Callable handler for httpx.MockTransport that behaves like the remote API."""
    
    def __init__(self) -> None:
        self.patients: Dict[int, dict] = {}
        self.next_id = 1
        self.credentials = {"demo@example.com": "password123"}
        self.issued_token = "t1"
        self.tokens: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []
        self.failures: Dict[Tuple[str, str], Tuple[int, Optional[dict]]] = {}
    
    # ---- helpers for tests ----
    
    def fail(self, method: str, path: str, status: int, body: Optional[dict] = None) -> None:
        self.failures[(method, path)] = (status, body)
    
    def seed(self, **fields) -> dict:
        patient = {
            "id": self.next_id,
            "name": "Patient",
            "age": 40,
            "gender": "Other",
            "medicalHistory": [],
            "allergies": [],
            "medications": [],
            "createdAt": "2024-01-01T00:00:00Z",
        }
        patient.update(fields)
        self.patients[patient["id"]] = patient
        self.next_id = max(self.next_id, patient["id"]) + 1
        return patient
    
    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and self._path(r) == path]
    
    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path
    
    # ---- request handling ----
    
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        
        failure = self.failures.get((request.method, path))
        if failure is not None:
            status, body = failure
            return httpx.Response(status, json=body) if body is not None else httpx.Response(status)
        
        if path == "/health":
            return httpx.Response(200, json={"status": "OK", "timestamp": "2024-01-01T00:00:00Z"})
        if path == "/auth/login" and request.method == "POST":
            return self._login(json.loads(request.content))
        
        user = self._authorized_user(request)
        if user is None:
            return httpx.Response(401, json={"error": "Access token required"})
        
        if path == "/auth/me":
            return httpx.Response(200, json={"user": user})
        if path == "/auth/users":
            return httpx.Response(200, json={"users": [user]})
        if path == "/patients":
            if request.method == "GET":
                return httpx.Response(200, json=list(self.patients.values()))
            if request.method == "POST":
                return self._create(json.loads(request.content))
        if path.startswith("/patients/"):
            patient_id = int(path.rsplit("/", 1)[1])
            if patient_id not in self.patients:
                return httpx.Response(404, json={"error": "Patient not found"})
            if request.method == "GET":
                return httpx.Response(200, json=self.patients[patient_id])
            if request.method == "PUT":
                self.patients[patient_id].update(json.loads(request.content))
                return httpx.Response(200, json=self.patients[patient_id])
            if request.method == "DELETE":
                del self.patients[patient_id]
                return httpx.Response(200, json={"message": "Patient deleted successfully"})
        return httpx.Response(404, json={"error": "Not found"})
    
    def _login(self, body: dict) -> httpx.Response:
        if self.credentials.get(body.get("email")) != body.get("password"):
            return httpx.Response(401, json={"error": "Invalid credentials"})
        self.tokens[self.issued_token] = dict(DEMO_USER)
        return httpx.Response(200, json={"token": self.issued_token, "user": DEMO_USER})
    
    def _authorized_user(self, request: httpx.Request) -> Optional[dict]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.tokens.get(header[len("Bearer "):])
    
    def _create(self, body: dict) -> httpx.Response:
        if not body.get("name"):
            return httpx.Response(400, json={"error": "Name is required"})
        patient = {
            "medicalHistory": [],
            "allergies": [],
            "medications": [],
            **body,
            "id": self.next_id,
            "createdAt": "2024-01-01T00:00:00Z",
        }
        self.patients[patient["id"]] = patient
        self.next_id += 1
        return httpx.Response(201, json=patient)


class CountingStorage(MemoryStorage):
    """MemoryStorage that counts removals."""
    
    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.removals: List[str] = []
    
    def remove_item(self, key: str) -> None:
        self.removals.append(key)
        super().remove_item(key)


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def storage() -> CountingStorage:
    return CountingStorage()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(API_BASE_URL=BASE_URL, REQUEST_TIMEOUT_SECONDS=2.0, SESSION_FILE="/nonexistent/session.json")


@pytest.fixture
def portal(fake_api, storage, test_settings) -> PortalApp:
    return PortalApp(settings=test_settings, storage=storage, transport=httpx.MockTransport(fake_api))
