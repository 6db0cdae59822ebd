import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Literal["admin", "worker"]
    clinic: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ResetPasswordRequest(BaseModel):
    email: str
    old_password: str
    new_password: str


class UpdateProfileRequest(BaseModel):
    email: str
    name: str
    profile_pic: str | None = None


class Preferences(BaseModel):
    font_size: Literal["small", "medium", "large"] = "medium"
    bold_font: bool = False
    show_prices: bool = True
    clinics_hide_prices: list[str] = []


class PreferencesUpdate(BaseModel):
    font_size: Literal["small", "medium", "large"] | None = None
    bold_font: bool | None = None
    show_prices: bool | None = None
    clinics_hide_prices: list[str] | None = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    clinic: str | None = None
    profile_pic: str = ""
    preferences: Preferences = Preferences()
    active: bool = True
    created_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("preferences", mode="before")
    @classmethod
    def parse_preferences(cls, v):
        if isinstance(v, str):
            return json.loads(v or "{}")
        return v
