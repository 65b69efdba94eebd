import logging
from typing import Any, Dict, List

from medpanel.repositories.doctor_repository import DoctorRepository
from medpanel.repositories.user_repository import UserRepository
from medpanel.schemas.doctor import DoctorProfile, DoctorProfileUpdate


logger = logging.getLogger(__name__)


class DoctorService:

    def __init__(self, doctor_repo: DoctorRepository, user_repo: UserRepository) -> None:
        self._doctor_repo = doctor_repo
        self._user_repo = user_repo

    async def get_doctor_for_user(self, user_id: str) -> Dict[str, Any]:
        doctor = await self._doctor_repo.get_by_user_id(user_id)
        if not doctor:
            logger.warning("No doctor profile for user %s", user_id)
            raise LookupError("Doctor profile not found")
        return doctor

    async def _to_profile(self, doctor: Dict[str, Any]) -> DoctorProfile:
        user = await self._user_repo.get_user_by_id(doctor["user_id"])
        specialization = await self._doctor_repo.get_specialization(doctor.get("specialization_id"))
        return DoctorProfile(
            id=doctor["_id"],
            name=doctor.get("name"),
            surname=doctor.get("surname"),
            email=(user or {}).get("email", ""),
            specialization_name=(specialization or {}).get("name"),
            patient_count=doctor.get("patient_count"),
            created_at=doctor.get("created_at"),
        )

    async def get_profile(self, user_id: str) -> DoctorProfile:
        return await self._to_profile(await self.get_doctor_for_user(user_id))

    async def update_profile(self, user_id: str, updates: DoctorProfileUpdate) -> DoctorProfile:
        doctor = await self.get_doctor_for_user(user_id)
        fields = updates.model_dump(exclude_unset=True)
        if "specialization_id" in fields and fields["specialization_id"] is not None:
            if not await self._doctor_repo.get_specialization(fields["specialization_id"]):
                raise ValueError("Unknown specialization")
        if fields:
            ok = await self._doctor_repo.update_profile(doctor["_id"], fields)
            if not ok:
                raise LookupError("Doctor profile not found")
            logger.info("Doctor %s profile updated: %s", doctor["_id"], sorted(fields))
        return await self.get_profile(user_id)

    async def list_specializations(self) -> List[Dict[str, Any]]:
        return await self._doctor_repo.list_specializations()
