# aviasafe/db/seed.py
"""Idempotent development seed: one profile per role and a demo aircraft."""
from __future__ import annotations

import logging
import os
from typing import Dict, List

from sqlalchemy.orm import Session

from aviasafe.crud.profile import create_profile, get_by_email
from aviasafe.models.aircraft import Aircraft
from aviasafe.models.profile import Profile

log = logging.getLogger("aviasafe.seed")

DEFAULT_PASSWORD = os.getenv("SEED_PASSWORD", "ChangeMe123!")

SEED_PROFILES: List[Dict[str, str]] = [
    {"email": "admin@aviasafe.local", "full_name": "System Admin", "role": "admin"},
    {"email": "investigator@aviasafe.local", "full_name": "Ivana Investigator", "role": "investigator"},
    {"email": "safety@aviasafe.local", "full_name": "Sam Safety", "role": "safety_officer"},
    {"email": "reporter@aviasafe.local", "full_name": "Rita Reporter", "role": "reporter"},
]

SEED_AIRCRAFT: List[Dict[str, str]] = [
    {"registration": "9A-ABC", "type": "Cessna", "model": "172S"},
    {"registration": "9A-DEF", "type": "Piper", "model": "PA-28"},
]


def seed_profiles(db: Session, password: str = DEFAULT_PASSWORD) -> List[Profile]:
    out: List[Profile] = []
    for p in SEED_PROFILES:
        existing = get_by_email(db, p["email"])
        if existing:
            out.append(existing)
            continue
        out.append(create_profile(db, password=password, **p))
        log.info("seeded profile email=%s role=%s", p["email"], p["role"])
    return out


def seed_aircraft(db: Session) -> int:
    created = 0
    for a in SEED_AIRCRAFT:
        if db.query(Aircraft.id).filter(Aircraft.registration == a["registration"]).first():
            continue
        db.add(Aircraft(**a))
        created += 1
    db.commit()
    return created


def run_seed(db: Session) -> Dict[str, int]:
    profiles = seed_profiles(db)
    aircraft = seed_aircraft(db)
    return {"profiles": len(profiles), "aircraft_created": aircraft}
