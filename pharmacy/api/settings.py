from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmacy.api.auth import get_current_user, require_admin
from pharmacy.database import get_db
from pharmacy.models.user import User
from pharmacy.schemas.setting import SettingOut, SettingsUpdate
from pharmacy.services import settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("")
def get_settings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return settings_service.get_all(db)


@router.put("")
def update_settings(data: SettingsUpdate, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    settings_service.update_settings(db, data.settings, user.id)
    return {"message": "Settings updated successfully"}


@router.get("/{key}", response_model=SettingOut)
def get_setting(key: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return SettingOut(key=key, value=settings_service.get_setting(db, key))
