from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class AuthPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LoginIn(AuthPayload):
    email: str = ""
    password: str = ""


class VerifyTokenIn(AuthPayload):
    token: Optional[str] = None


class ProfileIn(AuthPayload):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


class ChangePasswordIn(AuthPayload):
    current_password: str = Field(default="", alias="currentPassword")
    new_password: str = Field(default="", alias="newPassword")
