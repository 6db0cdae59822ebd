import json
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from pharmacy.config import settings
from pharmacy.exceptions import InvalidInputError, NotFoundError
from pharmacy.models.user import User, UserRole
from pharmacy.schemas.user import Preferences, PreferencesUpdate, SignupRequest

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


def create_access_token(user: User) -> str:
    payload = {
        "sub": user.id,
        "role": user.role,
        "clinic": user.clinic,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except (jwt.ExpiredSignatureError, jwt.InvalidTokenError):
        return None


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if not user or not user.active or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(db: Session, data: SignupRequest) -> User:
    if not data.name.strip() or not data.email.strip() or not data.password:
        raise InvalidInputError("All fields are required")
    if get_user_by_email(db, data.email):
        raise InvalidInputError("User already exists")
    if len(data.password) < settings.MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
    user = User(
        name=data.name.strip(),
        email=_normalize_email(data.email),
        password_hash=hash_password(data.password),
        role=data.role,
        clinic=(data.clinic or "").strip() or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s created with role %s", user.email, user.role)
    return user


def reset_password(db: Session, email: str, old_password: str, new_password: str) -> None:
    if not email or not old_password or not new_password:
        raise InvalidInputError("All fields are required")
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(old_password, user.password_hash):
        raise InvalidInputError("Current password is incorrect")
    if len(new_password) < settings.MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"New password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
    user.password_hash = hash_password(new_password)
    db.commit()


def update_profile(db: Session, email: str, name: str, profile_pic: str | None = None) -> User:
    if not email or not name:
        raise InvalidInputError("Email and name are required")
    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    user.name = name
    if profile_pic:
        user.profile_pic = profile_pic
    db.commit()
    db.refresh(user)
    return user


def update_preferences(db: Session, user: User, data: PreferencesUpdate) -> User:
    current = Preferences.model_validate(json.loads(user.preferences or "{}"))
    merged = current.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
    user.preferences = merged.model_dump_json()
    db.commit()
    db.refresh(user)
    return user


def ensure_default_admin(db: Session) -> None:
    """Create default admin user if no users exist."""
    count = db.query(User).count()
    if count == 0:
        create_user(
            db,
            SignupRequest(
                name=settings.DEFAULT_ADMIN_NAME,
                email=settings.DEFAULT_ADMIN_EMAIL,
                password=settings.DEFAULT_ADMIN_PASSWORD,
                role=UserRole.ADMIN.value,
            ),
        )
