# aviasafe/api/v1/auth.py
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from aviasafe.core.auth import authenticate_user, get_current_user, get_db
from aviasafe.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    create_access_token,
)
from aviasafe.models.profile import Profile
from aviasafe.schemas.common import MessageOut
from aviasafe.schemas.profile import ProfileOut, TokenOut
from aviasafe.services.audit import audit_log, ip_from_request

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
def login(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    Password sign-in. Sets the HTTP-only session cookie and also returns the
    token for bearer-style clients.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login_at = datetime.utcnow()
    db.add(user)
    db.commit()

    audit_log(
        db,
        user_id=user.id,
        action="LOGIN_SUCCESS",
        entity_type="auth",
        entity_id=user.id,
        meta={"email": user.email},
        ip=ip_from_request(request),
    )

    token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return TokenOut(access_token=token)


@router.post("/logout", response_model=MessageOut)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return MessageOut(message="Signed out")


@router.get("/me", response_model=ProfileOut)
def me(current_user: Profile = Depends(get_current_user)):
    return ProfileOut.model_validate(current_user)
