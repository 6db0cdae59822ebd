from typing import Any

from pydantic import BaseModel


class SettingsUpdate(BaseModel):
    settings: dict[str, Any]


class SettingOut(BaseModel):
    key: str
    value: Any
