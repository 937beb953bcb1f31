# aviasafe/schemas/common.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class ProfileBrief(BaseModel):
    id: int
    full_name: Optional[str] = None
    email: str

    class Config:
        from_attributes = True


class MessageOut(BaseModel):
    message: str
