import pytest
from fastapi.testclient import TestClient

from conftest import at
from medpanel.assistant.session import SessionRegistry, get_session_registry
from medpanel.main import app
from medpanel.routers.assistant import get_message_repository
from medpanel.routers.auth import get_user_service
from medpanel.routers.chat import get_chat_service
from medpanel.routers.dashboard import get_dashboard_service
from medpanel.routers.health import get_health_service
from medpanel.routers.patients import get_patient_service
from medpanel.schemas.dashboard import DashboardStats
from medpanel.schemas.patient import PatientSummary
from medpanel.services.patient_service import PatientValidationError
from medpanel.utils.dependencies import get_current_doctor, get_current_user


DOCTOR_USER = {"_id": "doc-user", "email": "house@example.com", "role": "doctor", "hashed_password": "x"}
PATIENT_USER = {"_id": "pat-user", "email": "ada@example.com", "role": "patient", "hashed_password": "x"}
DOCTOR = {"_id": "d1", "user_id": "doc-user", "name": "Gregory", "surname": "House"}
ADA = PatientSummary(id="p1", user_id="pat-user", name="Ada", surname="Lovelace", age=36, diagnosis="Asthma")


class FakeUserService:

    async def login(self, email, password):
        return "token-123" if (email, password) == ("house@example.com", "secret1") else None


class FakePatientService:

    def __init__(self):
        self.searches = []

    async def roster(self, doctor_id, search=None):
        self.searches.append((doctor_id, search))
        return [ADA]

    async def get_patient(self, doctor_id, patient_id):
        if patient_id == "p1":
            return ADA
        if patient_id == "someone-elses":
            raise PermissionError("Patient is not assigned to this doctor")
        raise LookupError("Patient not found")

    async def add_patient(self, doctor_id, form):
        if not form.name:
            raise PatientValidationError("Name is required")
        if form.email == "taken@example.com":
            raise ValueError("Email already registered")
        return ADA


class FakeHealthService:

    async def list_measurements(self, patient_id, limit=20):
        return [{"_id": "h1", "patient_id": patient_id, "value": 72.0, "measured_at": at(0),
                 "measurement_type": {"name": "Heart rate", "unit": "bpm"}}][:limit]

    async def list_complaints(self, patient_id):
        return []

    async def list_exercise_plans(self, patient_id, limit=None):
        return []

    async def add_exercise_plan(self, patient_id, data):
        raise ValueError("Please fill in all fields")

    async def remove_exercise_plan(self, patient_id, plan_id):
        raise LookupError("Exercise plan not found")


class FakeChatService:

    def __init__(self):
        self.since = []

    async def get_unread(self, user_id, from_user_id=None):
        return [{"_id": "m1", "content": "hi", "sender_id": "pat-user", "receiver_id": user_id, "created_at": at(1)}]

    async def get_conversation(self, user_id, peer_id, since=None):
        self.since.append(since)
        return [{"_id": "m2", "content": "hello", "sender_id": user_id, "receiver_id": peer_id, "created_at": at(2)}]

    async def send_message(self, sender_id, receiver_id, content):
        if not content.strip():
            raise ValueError("Message content cannot be empty")
        return {"_id": "m3", "content": content.strip(), "sender_id": sender_id, "receiver_id": receiver_id,
                "type": 1, "created_at": at(3), "is_read": False}


class FakeDashboardService:

    async def stats(self, doctor_id, doctor_user_id):
        return DashboardStats(total_patients=2, unread_messages=1, pending_complaints=0)


class FakeMessageRepository:

    async def recent_involving(self, user_id, limit=10):
        return []


class EchoGenerator:

    async def generate(self, prompt):
        return "Noted."


@pytest.fixture
def services():
    return {"patients": FakePatientService(), "chat": FakeChatService(), "registry": SessionRegistry(EchoGenerator())}


@pytest.fixture
def client(services):
    overrides = {
        get_current_user: lambda: DOCTOR_USER,
        get_current_doctor: lambda: DOCTOR,
        get_user_service: FakeUserService,
        get_patient_service: lambda: services["patients"],
        get_health_service: FakeHealthService,
        get_chat_service: lambda: services["chat"],
        get_dashboard_service: FakeDashboardService,
        get_message_repository: FakeMessageRepository,
        get_session_registry: lambda: services["registry"],
    }
    app.dependency_overrides.update(overrides)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_login(client):
    ok = client.post("/auth/login", data={"username": "House@Example.com", "password": "secret1"})
    bad = client.post("/auth/login", data={"username": "house@example.com", "password": "nope"})

    assert ok.status_code == 200
    assert ok.json() == {"access_token": "token-123", "token_type": "bearer"}
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid email or password"


def test_me(client):
    resp = client.get("/auth/me")

    assert resp.json() == {"email": "house@example.com", "id": "doc-user", "role": "doctor"}


def test_logout_drops_session_state(client, services):
    client.post("/assistant/messages", json={"content": "hello"})
    assert "doc-user" in services["registry"]

    resp = client.post("/auth/logout")

    assert resp.json() == {"ok": True}
    assert "doc-user" not in services["registry"]


def test_patient_accounts_cannot_use_dashboard(client):
    app.dependency_overrides[get_current_user] = lambda: PATIENT_USER
    del app.dependency_overrides[get_current_doctor]

    resp = client.get("/dashboard/layout")

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Doctor account required"


def test_list_patients_with_search(client, services):
    resp = client.get("/patients", params={"search": "ada"})

    assert resp.status_code == 200
    assert resp.json()["total"] == 1
    assert resp.json()["items"][0]["name"] == "Ada"
    assert services["patients"].searches == [("d1", "ada")]


def test_add_patient_errors(client):
    invalid = client.post("/patients", json={"email": "x@example.com", "password": "secret1", "name": ""})
    duplicate = client.post("/patients", json={"email": "taken@example.com", "password": "secret1", "name": "Ada"})
    created = client.post("/patients", json={"email": "ada@example.com", "password": "secret1", "name": "Ada"})

    assert invalid.status_code == 422
    assert invalid.json()["detail"] == "Name is required"
    assert duplicate.status_code == 400
    assert created.status_code == 201


@pytest.mark.parametrize("patient_id", ["missing", "someone-elses"])
def test_unknown_or_foreign_patient_is_404(client, patient_id):
    assert client.get(f"/patients/{patient_id}").status_code == 404
    assert client.get(f"/patients/{patient_id}/measurements").status_code == 404


def test_measurements(client):
    resp = client.get("/patients/p1/measurements", params={"limit": 5})

    item = resp.json()["items"][0]
    assert item["id"] == "h1"
    assert item["measurement_type"] == {"name": "Heart rate", "unit": "bpm"}


def test_exercise_plan_errors(client):
    added = client.post("/patients/p1/exercise-plans", json={"exercise_id": "e1"})
    removed = client.delete("/patients/p1/exercise-plans/plan9")

    assert added.status_code == 400
    assert added.json()["detail"] == "Please fill in all fields"
    assert removed.status_code == 404


def test_unread_route_is_not_a_peer(client):
    resp = client.get("/messages/unread")

    assert resp.json()["items"][0]["id"] == "m1"


def test_conversation_since(client, services):
    resp = client.get("/messages/pat-user", params={"since": at(1).isoformat()})

    assert resp.json()["items"][0]["id"] == "m2"
    assert services["chat"].since == [at(1)]


def test_send_message(client):
    sent = client.post("/messages/pat-user", json={"content": " hi "})
    empty = client.post("/messages/pat-user", json={"content": "  "})
    to_self = client.post("/messages/doc-user", json={"content": "hi"})

    assert sent.status_code == 201
    assert sent.json()["content"] == "hi"
    assert empty.status_code == 400
    assert to_self.status_code == 400


def test_dashboard_stats(client):
    assert client.get("/dashboard/stats").json() == {"total_patients": 2, "unread_messages": 1, "pending_complaints": 0}


def test_layout_roundtrip_is_clamped(client):
    assert client.get("/dashboard/layout").json() == {"left": 30.0, "right": 35.0, "middle": 35.0}

    resp = client.put("/dashboard/layout", json={"left": 45, "right": 90})

    assert resp.json() == {"left": 45.0, "right": 50.0, "middle": 5.0}
    assert client.get("/dashboard/layout").json()["right"] == 50.0


def test_assistant_conversation(client):
    state = client.post("/assistant/messages", json={"content": "What is HbA1c?"}).json()

    assert [(m["role"], m["content"]) for m in state["messages"]] == [("user", "What is HbA1c?"), ("assistant", "Noted.")]
    assert state["is_loading"] is False
    assert client.delete("/assistant/messages").json()["messages"] == []


def test_assistant_report(client):
    state = client.post("/assistant/reports/p1").json()

    assert state["messages"][0]["content"] == "Medical report requested for Ada Lovelace."
    assert state["messages"][1]["content"] == "Noted."
    assert client.post("/assistant/reports/missing").status_code == 404
