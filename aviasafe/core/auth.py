# aviasafe/core/auth.py
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import func
from sqlalchemy.orm import Session

from aviasafe.core.security import (
    ALGORITHM,
    SECRET_KEY,
    SESSION_COOKIE_NAME,
    verify_password,
)
from aviasafe.db.session import SessionLocal
from aviasafe.models.profile import Profile
from aviasafe.services.stages import ProfileRole

# Bearer scheme for Swagger "Authorize"; the session cookie is checked first
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db():
    """Yield a DB session and make sure it's closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def authenticate_user(db: Session, email: str, password: str) -> Optional[Profile]:
    """
    Return the profile when the credentials match an active account, else None.
    Does not reveal whether the account exists.
    """
    user = (
        db.query(Profile)
        .filter(func.lower(Profile.email) == (email or "").strip().lower())
        .first()
    )
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    """
    Resolve the session (cookie, then bearer header) to an active profile or 401.
    Stores the user id on request.state for request logging.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME) or bearer
    if not token:
        raise _unauthorized()

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized()

    email: Optional[str] = payload.get("sub")
    if not email:
        raise _unauthorized()

    user = db.query(Profile).filter(Profile.email == email).first()
    if user is None or not user.is_active:
        raise _unauthorized()

    try:
        request.state.user_id = user.id
    except AttributeError:
        pass

    return user


def require_admin(current_user: Profile = Depends(get_current_user)) -> Profile:
    if current_user.role != ProfileRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required",
        )
    return current_user
