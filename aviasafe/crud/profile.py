# aviasafe/crud/profile.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from aviasafe.core.security import hash_password
from aviasafe.models.profile import Profile
from aviasafe.services.stages import INVESTIGATOR_ROLES


def get_by_email(db: Session, email: str) -> Optional[Profile]:
    return (
        db.query(Profile)
        .filter(func.lower(Profile.email) == email.strip().lower())
        .first()
    )


def get_profile(db: Session, profile_id: int) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def list_investigators(db: Session) -> List[Profile]:
    return (
        db.query(Profile)
        .filter(Profile.role.in_(INVESTIGATOR_ROLES), Profile.is_active.is_(True))
        .order_by(Profile.full_name.asc(), Profile.id.asc())
        .all()
    )


def profiles_by_ids(db: Session, ids: Iterable[Optional[int]]) -> Dict[int, Profile]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    rows = db.query(Profile).filter(Profile.id.in_(wanted)).all()
    return {p.id: p for p in rows}


def create_profile(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: Optional[str] = None,
    role: str = "reporter",
) -> Profile:
    obj = Profile(
        email=email.strip().lower(),
        hashed_password=hash_password(password),
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
