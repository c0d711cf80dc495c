from __future__ import annotations

from pydantic import Field

from ..http.schema import RequestSchema


class RegisterBody(RequestSchema):
    tenant_id: str
    username: str = Field(..., min_length=3, max_length=32)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)


class CreateUserBody(RequestSchema):
    username: str = Field(..., min_length=3, max_length=32)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)


class PasswordLoginBody(RequestSchema):
    tenant_id: str
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PinLoginBody(RequestSchema):
    tenant_id: str
    identifier: str = Field(..., min_length=1)
    pin: str = Field(..., min_length=1)


class ResetPasswordBody(RequestSchema):
    token: str
    new_password: str = Field(..., min_length=6, max_length=128)


class ChangePasswordBody(RequestSchema):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class SetPinBody(RequestSchema):
    pin: str = Field(..., pattern=r"^\d{4,6}$")


class BlockUserBody(RequestSchema):
    minutes: int = Field(..., gt=0, le=60 * 24 * 365)
