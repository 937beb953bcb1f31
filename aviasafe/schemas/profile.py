# aviasafe/schemas/profile.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class ProfileOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str

    class Config:
        from_attributes = True


class InvestigatorsOut(BaseModel):
    investigators: List[ProfileOut]


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
