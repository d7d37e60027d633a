from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(_Camel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=72)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    broker_codes: list[str] = []


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(_Camel):
    id: int
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    brokers: list[str] = []


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    token: str


class ClaimsResponse(_Camel):
    user_id: int
    username: str
    brokers: list[str]
