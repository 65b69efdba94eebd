import logging
from typing import Optional

from medpanel.repositories.user_repository import UserRepository
from medpanel.schemas.user import UserPublic
from medpanel.utils.security import create_access_token, hash_password, verify_password


logger = logging.getLogger(__name__)


class UserService:
    """Account logic shared by login, password changes and patient onboarding."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def register_user(self, email: str, password: str, role: str) -> UserPublic:
        """
        Create a new account
        - reject an email that is already registered
        - hash the password
        - insert the user row
        """
        existing = await self.user_repository.get_user_by_email(email)
        if existing:
            raise ValueError("Email already registered")

        new_id = await self.user_repository.create_user(
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        logger.info("Registered %s account %s", role, new_id)
        return UserPublic(id=new_id, email=email, role=role)

    async def authenticate_user(self, email: str, password: str) -> Optional[dict]:
        """
        Check login credentials
        - look the user up by email
        - verify the password hash
        - return the user document, or None when either step fails
        """
        user = await self.user_repository.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.get("hashed_password", "")):
            return None

        return user

    async def login(self, email: str, password: str) -> Optional[str]:
        user = await self.authenticate_user(email, password)
        if not user:
            logger.info("Rejected login for %s", email)
            return None
        logger.info("User %s signed in", user["_id"])
        return create_access_token(user["_id"], user.get("role", "patient"))

    async def change_password(self, user: dict, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.get("hashed_password", "")):
            raise PermissionError("Current password is incorrect")
        if len(new_password) < 6:
            raise ValueError("Password must be at least 6 characters")
        await self.user_repository.update_password(user["_id"], hash_password(new_password))
        logger.info("Password updated for user %s", user["_id"])
