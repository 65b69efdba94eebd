import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from medpanel.database.connection import close_mongo_connection, connect_to_mongo, get_database
from medpanel.logging_setup import configure_logging
from medpanel.repositories.complaint_repository import ComplaintRepository
from medpanel.repositories.device_repository import DeviceRepository
from medpanel.repositories.doctor_repository import DoctorRepository
from medpanel.repositories.exercise_repository import ExerciseRepository
from medpanel.repositories.measurement_repository import MeasurementRepository
from medpanel.repositories.message_repository import MessageRepository
from medpanel.repositories.patient_repository import PatientRepository
from medpanel.repositories.user_repository import UserRepository
from medpanel.routers.assistant import router as assistant_router
from medpanel.routers.auth import router as auth_router
from medpanel.routers.chat import router as chat_router
from medpanel.routers.dashboard import router as dashboard_router
from medpanel.routers.devices import router as devices_router
from medpanel.routers.doctors import router as doctors_router
from medpanel.routers.health import router as health_router
from medpanel.routers.patients import router as patients_router


logger = logging.getLogger(__name__)

REPOSITORIES = (
    UserRepository,
    DoctorRepository,
    PatientRepository,
    MessageRepository,
    MeasurementRepository,
    ComplaintRepository,
    ExerciseRepository,
    DeviceRepository,
)


async def ensure_indexes() -> None:
    db = get_database()
    for repo_cls in REPOSITORIES:
        await repo_cls(db).ensure_indexes()


@asynccontextmanager
async def lifespan(app: FastAPI):

    configure_logging()
    await connect_to_mongo()
    try:
        await ensure_indexes()
        logger.info("Indexes ensured")
        yield
    finally:
        await close_mongo_connection()


app = FastAPI(title="Medpanel doctor dashboard", lifespan=lifespan)


app.include_router(auth_router)
app.include_router(doctors_router)
app.include_router(patients_router)
app.include_router(health_router)
app.include_router(dashboard_router)
app.include_router(chat_router)
app.include_router(devices_router)
app.include_router(assistant_router)


@app.get("/")
async def root():

    db = get_database()
    collections = await db.list_collection_names()
    return {"message": "Connected to MongoDB!", "collections": collections}
