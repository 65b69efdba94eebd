import pytest

from conftest import at
from medpanel.services.dashboard_service import DashboardService, truncate


PATIENTS = [
    {"_id": "p1", "user_id": "u1", "name": "Ada", "surname": "Lovelace"},
    {"_id": "p2", "user_id": "u2", "name": "Alan", "surname": "Turing"},
]


class FakePatients:

    async def list_for_doctor(self, doctor_id):
        return [dict(p) for p in PATIENTS] if doctor_id == "d1" else []


class FakeMessages:

    def __init__(self):
        self.rows = [
            {"_id": "m1", "sender_id": "u1", "receiver_id": "doc", "content": "x" * 80, "created_at": at(10), "is_read": False},
            {"_id": "m2", "sender_id": "u2", "receiver_id": "doc", "content": "Thanks", "created_at": at(30), "is_read": True},
            {"_id": "m3", "sender_id": "stranger", "receiver_id": "doc", "content": "spam", "created_at": at(40), "is_read": False},
        ]

    def _from(self, sender_ids):
        senders = set(sender_ids)
        return sorted((m for m in self.rows if m["sender_id"] in senders), key=lambda m: m["created_at"], reverse=True)

    async def count_unread(self, receiver_id, sender_ids):
        return sum(1 for m in self._from(sender_ids) if m["receiver_id"] == receiver_id and not m["is_read"])

    async def get_unread(self, receiver_id, from_user_id=None, sender_ids=None, limit=1000):
        return [m for m in self._from(sender_ids or []) if not m["is_read"]][:limit]

    async def recent_from_senders(self, sender_ids, limit=5):
        return self._from(sender_ids)[:limit]


class FakeComplaints:

    async def count_active(self, patient_ids):
        return 1

    async def recent_for_patients(self, patient_ids, limit=5):
        return [{"_id": "c1", "patient_id": "p2", "description": "Dizziness", "is_active": True, "created_at": at(20)}]


class FakeMeasurements:

    async def recent_for_patients(self, patient_ids, limit=5):
        return [{"_id": "h1", "patient_id": "p1", "value": 72, "measured_at": at(50),
                 "measurement_type": {"name": "Heart rate", "unit": "bpm"}}]


@pytest.fixture
def service():
    return DashboardService(FakePatients(), FakeMessages(), FakeComplaints(), FakeMeasurements())


def test_truncate():
    assert truncate("short") == "short"
    assert truncate("a" * 50) == "a" * 50
    assert truncate("a" * 51) == "a" * 50 + "..."
    assert truncate(None) == ""


async def test_stats_count_only_patient_messages(service):
    stats = await service.stats("d1", "doc")

    assert stats.total_patients == 2
    assert stats.unread_messages == 1
    assert stats.pending_complaints == 1


async def test_unread_messages_carry_sender_name(service):
    unread = await service.unread_messages("d1", "doc")

    assert [(u.id, u.sender_name, u.sender_surname) for u in unread] == [("m1", "Ada", "Lovelace")]


async def test_unread_messages_without_patients(service):
    assert await service.unread_messages("nobody", "doc") == []


async def test_recent_activities_newest_first(service):
    activities = await service.recent_activities("d1")

    assert [(a.type, a.id) for a in activities] == [
        ("measurement", "h1"),
        ("message", "m2"),
        ("complaint", "c1"),
        ("message", "m1"),
    ]
    measurement, read_message, complaint, long_message = activities
    assert measurement.description == "Heart rate: 72 bpm"
    assert measurement.status == "recorded"
    assert read_message.status == "read"
    assert complaint.patient_name == "Alan Turing"
    assert complaint.status == "active"
    assert long_message.description == "x" * 50 + "..."
    assert long_message.status == "unread"


async def test_recent_activities_limit(service):
    assert len(await service.recent_activities("d1", limit=2)) == 2
