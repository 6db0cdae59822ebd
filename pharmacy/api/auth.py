from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from pharmacy.database import get_db
from pharmacy.exceptions import PermissionDeniedError
from pharmacy.models.user import User
from pharmacy.schemas.user import (
    LoginRequest,
    PreferencesUpdate,
    ResetPasswordRequest,
    SignupRequest,
    UpdateProfileRequest,
    UserOut,
)
from pharmacy.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


def get_current_user(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None, alias="token"),
    db: Session = Depends(get_db),
) -> User:
    """Dependency: extract user from a Bearer header or the JWT cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(401, "Not authenticated")
    payload = auth_service.decode_token(token)
    if not payload:
        raise HTTPException(401, "Invalid or expired token")
    user = auth_service.get_user_by_id(db, payload["sub"])
    if not user or not user.active:
        raise HTTPException(401, "User not found or disabled")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise PermissionDeniedError("Access denied: Admin privileges required")
    return user


@router.post("/signup", status_code=201)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    auth_service.create_user(db, data)
    return {"message": "User created successfully"}


@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, data.email, data.password)
    if not user:
        raise HTTPException(400, "Invalid credentials")
    token = auth_service.create_access_token(user)
    response.set_cookie("token", token, httponly=True, samesite="lax", max_age=3600 * 24)
    return {"token": token, "user": UserOut.model_validate(user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie("token")
    return {"ok": True}


@router.post("/reset-password")
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, data.email, data.old_password, data.new_password)
    return {"message": "Password updated successfully"}


@router.put("/update-profile")
def update_profile(data: UpdateProfileRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not user.is_admin and auth_service.get_user_by_email(db, data.email) is not user:
        raise PermissionDeniedError("Cannot update another user's profile")
    auth_service.update_profile(db, data.email, data.name, data.profile_pic)
    return {"message": "Profile updated successfully"}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/preferences", response_model=UserOut)
def update_preferences(data: PreferencesUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return auth_service.update_preferences(db, user, data)
