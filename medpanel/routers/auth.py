from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from medpanel.assistant.session import SessionRegistry, get_session_registry
from medpanel.repositories.user_repository import UserRepository
from medpanel.schemas.user import PasswordChange, Token, UserPublic
from medpanel.services.user_service import UserService
from medpanel.utils.dependencies import get_current_user, get_user_repository


router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_service(users: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(users)


@router.post("/login", response_model=Token)
async def login(form: OAuth2PasswordRequestForm = Depends(), service: UserService = Depends(get_user_service)):
    token = await service.login(form.username.strip().lower(), form.password)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=token)


@router.get("/me", response_model=UserPublic)
async def me(current_user: dict = Depends(get_current_user)):
    return UserPublic.model_validate(current_user)


@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user), registry: SessionRegistry = Depends(get_session_registry)):
    registry.drop(current_user["_id"])
    return {"ok": True}


@router.post("/password")
async def change_password(body: PasswordChange, current_user: dict = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    try:
        await service.change_password(current_user, body.current_password, body.new_password)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"ok": True}
