# aviasafe/api/v1/investigators.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud.profile import list_investigators
from aviasafe.models.profile import Profile
from aviasafe.schemas.profile import InvestigatorsOut, ProfileOut

router = APIRouter(tags=["investigators"])


@router.get("/investigators", response_model=InvestigatorsOut)
def get_investigators(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    """Active profiles with the investigator or safety_officer role, by name."""
    rows = list_investigators(db)
    return InvestigatorsOut(investigators=[ProfileOut.model_validate(r) for r in rows])
