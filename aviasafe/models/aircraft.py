# aviasafe/models/aircraft.py
from sqlalchemy import Column, DateTime, Integer, String, func

from aviasafe.db.base import Base


class Aircraft(Base):
    __tablename__ = "aircraft"

    id = Column(Integer, primary_key=True)
    registration = Column(String(20), unique=True, index=True, nullable=False)
    type = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
