import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from pharmacy.database import atomic
from pharmacy.exceptions import InvalidInputError, NotFoundError
from pharmacy.models.setting import GlobalSetting

logger = logging.getLogger(__name__)


def get_all(db: Session) -> dict[str, Any]:
    return {s.key: json.loads(s.value) for s in db.query(GlobalSetting).order_by(GlobalSetting.key).all()}


def get_setting(db: Session, key: str) -> Any:
    setting = db.query(GlobalSetting).filter(GlobalSetting.key == key).first()
    if not setting:
        raise NotFoundError("Setting not found")
    return json.loads(setting.value)


def update_settings(db: Session, values: dict[str, Any], user_id: str) -> dict[str, Any]:
    """Upsert every key in one transaction; either all settings change or none do."""
    if not isinstance(values, dict) or not values:
        raise InvalidInputError("Invalid settings object")

    with atomic(db):
        existing = {
            s.key: s for s in db.query(GlobalSetting).filter(GlobalSetting.key.in_(list(values))).all()
        }
        for key, value in values.items():
            if not key:
                raise InvalidInputError("Setting key cannot be empty")
            setting = existing.get(key)
            if setting is None:
                setting = GlobalSetting(key=key)
                db.add(setting)
            setting.value = json.dumps(value)
            setting.updated_by = user_id

    logger.info("Settings %s updated by %s", ", ".join(sorted(values)), user_id)
    return get_all(db)
