from typing import Literal

from pydantic import AliasChoices, BaseModel, EmailStr, Field


class UserBase(BaseModel):

    email: EmailStr


class UserPublic(UserBase):

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    role: Literal["doctor", "patient"]


class Token(BaseModel):

    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):

    sub: str
    role: str
    exp: int


class PasswordChange(BaseModel):

    current_password: str
    new_password: str = Field(min_length=6)
