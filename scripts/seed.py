#!/usr/bin/env python3
"""
Development seed:
- one profile per role (admin, investigator, safety_officer, reporter)
- a couple of aircraft
Safe to run multiple times (idempotent). Password from SEED_PASSWORD.
"""
import logging
import os
import sys

# enable 'aviasafe.' imports
sys.path.append(os.getcwd())

from dotenv import load_dotenv

load_dotenv()

from aviasafe.db.session import SessionLocal, engine
from aviasafe.db.seed import run_seed
from aviasafe.models import Base


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        result = run_seed(db)
    finally:
        db.close()
    print(f"Seed done: {result}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
