import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from medpanel.assistant.session import SessionRegistry, SessionState, get_session_registry
from medpanel.database.connection import mongo_db_dependency
from medpanel.repositories.doctor_repository import DoctorRepository
from medpanel.repositories.user_repository import UserRepository
from medpanel.services.doctor_service import DoctorService
from medpanel.utils.security import decode_access_token


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_user_repository(db = Depends(mongo_db_dependency)) -> UserRepository:
    return UserRepository(db)


async def get_current_user(token: str = Depends(oauth2_scheme), users: UserRepository = Depends(get_user_repository)) -> dict:
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired", headers={"WWW-Authenticate": "Bearer"})
    except jwt.InvalidTokenError:
        raise credentials_error
    user_id = payload.get("sub")
    if not user_id:
        raise credentials_error
    user = await users.get_user_by_id(user_id)
    if not user:
        raise credentials_error
    return user


async def get_current_doctor_user(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != "doctor":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Doctor account required")
    return current_user


def get_doctor_service(db = Depends(mongo_db_dependency)) -> DoctorService:
    return DoctorService(DoctorRepository(db), UserRepository(db))


async def get_current_doctor(current_user: dict = Depends(get_current_doctor_user), service: DoctorService = Depends(get_doctor_service)) -> dict:
    try:
        return await service.get_doctor_for_user(current_user["_id"])
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def get_session_state(current_user: dict = Depends(get_current_doctor_user), registry: SessionRegistry = Depends(get_session_registry)) -> SessionState:
    return registry.get(current_user["_id"])
