from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Accepts camelCase on the wire and snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelResponse(BaseModel):
    """Built from ORM rows by field name, dumped with camelCase keys"""
    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel),
        from_attributes=True,
    )


# Request fields are optional so that a missing field is reported with the
# form-level message ("Please fill in all fields") instead of a schema error.

class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    contact_number: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = Field(None, validation_alias=AliasChoices("code", "otp"))


class ResendCodeRequest(CamelModel):
    email: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    """Either ``email`` + ``otp``/``code`` or the emailed link ``token``"""
    email: Optional[str] = None
    code: Optional[str] = Field(None, validation_alias=AliasChoices("otp", "code"))
    token: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class UserPublic(CamelResponse):
    """Wire shape of an account; never carries credential state"""
    id: str
    name: str
    email: str
    contact_number: str
    is_verified: bool
