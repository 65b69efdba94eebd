from datetime import date, datetime, timezone

import pytest

from medpanel.schemas.patient import PatientCreate, PatientSummary
from medpanel.services.patient_service import (
    PatientService,
    PatientValidationError,
    calculate_age,
    filter_patients,
    to_summary,
    validate_patient_form,
)
from medpanel.utils.security import verify_password


class FakeUserRepository:

    def __init__(self):
        self.users = {}

    async def get_user_by_email(self, email):
        return next((u for u in self.users.values() if u["email"] == email), None)

    async def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    async def create_user(self, email, hashed_password, role):
        user_id = f"u{len(self.users) + 1}"
        self.users[user_id] = {"_id": user_id, "email": email, "hashed_password": hashed_password, "role": role}
        return user_id

    async def get_emails(self, user_ids):
        return {uid: self.users[uid]["email"] for uid in user_ids if uid in self.users}


class FakePatientRepository:

    def __init__(self):
        self.patients = {}
        self.links = set()

    async def create_patient(self, user_id, name, surname, birth_date, gender, patient_note=None):
        pid = f"p{len(self.patients) + 1}"
        doc = {
            "_id": pid, "user_id": user_id, "name": name, "surname": surname, "birth_date": birth_date,
            "gender": gender, "patient_note": patient_note, "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        self.patients[pid] = doc
        return dict(doc)

    async def link_to_doctor(self, doctor_id, patient_id):
        self.links.add((doctor_id, patient_id))

    async def is_linked(self, doctor_id, patient_id):
        return (doctor_id, patient_id) in self.links

    async def get_patient(self, patient_id):
        doc = self.patients.get(patient_id)
        return dict(doc) if doc else None

    async def list_for_doctor(self, doctor_id):
        return [dict(self.patients[pid]) for d, pid in sorted(self.links) if d == doctor_id]


class FakeDoctorRepository:

    def __init__(self):
        self.counts = {}

    async def increment_patient_count(self, doctor_id, by=1):
        self.counts[doctor_id] = self.counts.get(doctor_id, 0) + by


@pytest.fixture
def repos():
    return FakePatientRepository(), FakeDoctorRepository(), FakeUserRepository()


@pytest.fixture
def service(repos):
    return PatientService(*repos)


def form(**overrides) -> PatientCreate:
    fields = dict(email="ada@example.com", password="secret1", name="Ada", surname="Lovelace", gender="female")
    fields.update(overrides)
    return PatientCreate(**fields)


def test_age_before_and_after_birthday():
    today = date(2024, 6, 15)

    assert calculate_age(date(1990, 6, 15), today) == 34
    assert calculate_age(date(1990, 6, 16), today) == 33
    assert calculate_age(datetime(1990, 1, 1, tzinfo=timezone.utc), today) == 34
    assert calculate_age(None, today) == 0


def test_filter_patients_matches_any_field():
    patients = [
        PatientSummary(id="1", name="Ada", surname="Lovelace", age=36, diagnosis="Hypertension"),
        PatientSummary(id="2", name="Alan", surname="Turing", age=41, diagnosis=None),
    ]

    assert [p.id for p in filter_patients(patients, "ada lov")] == ["1"]
    assert [p.id for p in filter_patients(patients, "TURING")] == ["2"]
    assert [p.id for p in filter_patients(patients, "tension")] == ["1"]
    assert [p.id for p in filter_patients(patients, "  ")] == ["1", "2"]
    assert filter_patients(patients, "zzz") == []


@pytest.mark.parametrize("overrides, error", [
    ({"email": " "}, "Email address is required"),
    ({"password": ""}, "Password is required"),
    ({"password": "12345"}, "Password must be at least 6 characters"),
    ({"name": ""}, "Name is required"),
    ({"surname": " "}, "Surname is required"),
    ({"gender": ""}, "Gender selection is required"),
    ({"email": "not-an-email"}, "Please enter a valid email address"),
])
def test_validate_patient_form_reports_first_error(overrides, error):
    assert validate_patient_form(form(**overrides)) == error


def test_validate_patient_form_accepts_valid_input():
    assert validate_patient_form(form()) is None


def test_to_summary_maps_note_to_diagnosis():
    doc = {"_id": "p1", "user_id": "u1", "name": "Ada", "surname": "Lovelace", "patient_note": "Asthma", "birth_date": None}

    summary = to_summary(doc, "ada@example.com")

    assert summary.diagnosis == "Asthma"
    assert summary.age == 0
    assert summary.status == "active"
    assert summary.full_name == "Ada Lovelace"


async def test_add_patient_creates_account_and_link(service, repos):
    patients, doctors, users = repos

    summary = await service.add_patient("d1", form(email=" Ada@Example.com ", birth_date=date(1990, 2, 3), patient_note="  Asthma "))

    user = users.users[summary.user_id]
    assert user["email"] == "ada@example.com"
    assert user["role"] == "patient"
    assert verify_password("secret1", user["hashed_password"])
    assert ("d1", summary.id) in patients.links
    assert doctors.counts == {"d1": 1}
    assert patients.patients[summary.id]["birth_date"] == datetime(1990, 2, 3, tzinfo=timezone.utc)
    assert summary.diagnosis == "Asthma"
    assert summary.email == "ada@example.com"


async def test_add_patient_rejects_invalid_form(service, repos):
    with pytest.raises(PatientValidationError, match="Name is required"):
        await service.add_patient("d1", form(name=""))
    assert repos[0].patients == {}


async def test_add_patient_rejects_duplicate_email(service):
    await service.add_patient("d1", form())
    with pytest.raises(ValueError, match="Email already registered"):
        await service.add_patient("d1", form(name="Other"))


async def test_roster_is_filtered_and_carries_email(service):
    await service.add_patient("d1", form())
    await service.add_patient("d1", form(email="alan@example.com", name="Alan", surname="Turing", gender="male"))
    await service.add_patient("d2", form(email="grace@example.com", name="Grace", surname="Hopper"))

    everyone = await service.roster("d1")
    turing = await service.roster("d1", "turing")

    assert sorted(p.name for p in everyone) == ["Ada", "Alan"]
    assert [p.email for p in turing] == ["alan@example.com"]


async def test_get_patient_checks_ownership(service):
    mine = await service.add_patient("d1", form())

    assert (await service.get_patient("d1", mine.id)).id == mine.id
    with pytest.raises(PermissionError):
        await service.get_patient("d2", mine.id)
    with pytest.raises(LookupError):
        await service.get_patient("d1", "missing")


def test_form_without_gender_is_rejected():
    missing = PatientCreate(email="ada@example.com", password="secret1", name="Ada", surname="Lovelace")

    assert validate_patient_form(missing) == "Gender selection is required"
