"""
models/user_model.py

Candidate profile (``users`` collection) and the account forms.
Form validation runs before any call to the auth provider or the store.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\d{10}$")
ADMISSION_PATTERN = re.compile(r"^\d{6}$")

BRANCHES = (
    "Computer Science Engineering",
    "Information Technology",
    "Electronics & Communication",
    "Mechanical Engineering",
    "Civil Engineering",
    "Electrical Engineering",
    "Chemical Engineering",
    "Biotechnology",
)


def _check_email(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Email is required")
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Email must contain @ and . symbols")
    return v


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    name: str
    email: str
    phone: str
    admission_number: str
    branch: str
    created_at: datetime
    updated_at: datetime

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Password is required")
        return v


class SignupForm(LoginForm):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str
    phone: str
    admission_number: str
    branch: str
    confirm_password: str = Field(...)

    @field_validator("name", "branch")
    @classmethod
    def validate_required(cls, v: str, info) -> str:
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Phone number is required")
        if not PHONE_PATTERN.match(v):
            raise ValueError("Phone number must be exactly 10 digits")
        return v

    @field_validator("admission_number")
    @classmethod
    def validate_admission_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Admission number is required")
        if not ADMISSION_PATTERN.match(v):
            raise ValueError("Admission number must be exactly 6 digits")
        return v

    @model_validator(mode="after")
    def validate_passwords_match(self) -> "SignupForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class PasswordResetForm(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter your email address")
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v
