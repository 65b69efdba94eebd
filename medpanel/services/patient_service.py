import logging
import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from medpanel.repositories.doctor_repository import DoctorRepository
from medpanel.repositories.patient_repository import PatientRepository
from medpanel.repositories.user_repository import UserRepository
from medpanel.schemas.patient import PatientCreate, PatientSummary
from medpanel.services.user_service import UserService


logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
GENDERS = ("male", "female", "other")


class PatientValidationError(ValueError):
    """Form input rejected before anything is written."""


def calculate_age(birth_date: Optional[date | datetime], today: Optional[date] = None) -> int:
    if birth_date is None:
        return 0
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return max(age, 0)


def filter_patients(patients: Iterable[PatientSummary], search: Optional[str]) -> List[PatientSummary]:
    """Case-insensitive substring match on name, surname, full name or diagnosis."""
    items = list(patients)
    term = (search or "").strip().lower()
    if not term:
        return items
    matched = []
    for p in items:
        haystacks = [p.name, p.surname, p.full_name, p.diagnosis or ""]
        if any(term in h.lower() for h in haystacks):
            matched.append(p)
    return matched


def validate_patient_form(form: PatientCreate) -> Optional[str]:
    if not form.email.strip():
        return "Email address is required"
    if not form.password.strip():
        return "Password is required"
    if len(form.password) < 6:
        return "Password must be at least 6 characters"
    if not form.name.strip():
        return "Name is required"
    if not form.surname.strip():
        return "Surname is required"
    if form.gender not in GENDERS:
        return "Gender selection is required"
    if not EMAIL_RE.match(form.email.strip()):
        return "Please enter a valid email address"
    return None


def to_summary(doc: Dict[str, Any], email: Optional[str] = None, today: Optional[date] = None) -> PatientSummary:
    return PatientSummary(
        id=doc["_id"],
        user_id=doc.get("user_id"),
        name=doc.get("name") or "",
        surname=doc.get("surname") or "",
        age=calculate_age(doc.get("birth_date"), today),
        gender=doc.get("gender"),
        diagnosis=doc.get("patient_note") or None,
        email=email,
        last_visit=doc.get("created_at"),
        status="active",
    )


class PatientService:

    def __init__(
        self,
        patient_repo: PatientRepository,
        doctor_repo: DoctorRepository,
        user_repo: UserRepository,
    ) -> None:
        self._patient_repo = patient_repo
        self._doctor_repo = doctor_repo
        self._user_repo = user_repo

    async def roster(self, doctor_id: str, search: Optional[str] = None) -> List[PatientSummary]:
        docs = await self._patient_repo.list_for_doctor(doctor_id)
        emails = await self._user_repo.get_emails(d["user_id"] for d in docs if d.get("user_id"))
        patients = [to_summary(d, emails.get(d.get("user_id"))) for d in docs]
        return filter_patients(patients, search)

    async def get_patient_document(self, doctor_id: str, patient_id: str) -> Dict[str, Any]:
        patient = await self._patient_repo.get_patient(patient_id)
        if not patient:
            raise LookupError("Patient not found")
        if not await self._patient_repo.is_linked(doctor_id, patient_id):
            raise PermissionError("Patient is not assigned to this doctor")
        return patient

    async def get_patient(self, doctor_id: str, patient_id: str) -> PatientSummary:
        patient = await self.get_patient_document(doctor_id, patient_id)
        emails = await self._user_repo.get_emails([patient["user_id"]]) if patient.get("user_id") else {}
        return to_summary(patient, emails.get(patient.get("user_id")))

    async def add_patient(self, doctor_id: str, form: PatientCreate) -> PatientSummary:
        error = validate_patient_form(form)
        if error:
            raise PatientValidationError(error)

        email = form.email.strip().lower()
        account = await UserService(self._user_repo).register_user(email, form.password, role="patient")
        birth = datetime.combine(form.birth_date, time.min, tzinfo=timezone.utc) if form.birth_date else None
        patient = await self._patient_repo.create_patient(
            user_id=account.id,
            name=form.name.strip(),
            surname=form.surname.strip(),
            birth_date=birth,
            gender=form.gender,
            patient_note=(form.patient_note or "").strip() or None,
        )
        await self._patient_repo.link_to_doctor(doctor_id, patient["_id"])
        await self._doctor_repo.increment_patient_count(doctor_id)
        logger.info("Doctor %s added patient %s", doctor_id, patient["_id"])
        return to_summary(patient, email)
