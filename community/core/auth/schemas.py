"""Typed schemas for sign-in and sign-up."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, field_validator


class CredentialsRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value
