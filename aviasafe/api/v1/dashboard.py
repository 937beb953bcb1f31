# aviasafe/api/v1/dashboard.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud import investigation as investigation_crud
from aviasafe.crud import occurrence as occurrence_crud
from aviasafe.models.profile import Profile
from aviasafe.services.stages import STAGES, OccurrenceStatus
from aviasafe.services.statistics import (
    investigation_stats,
    occurrence_distribution,
    occurrence_stats,
    stat_cards,
)

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/summary")
def dashboard_summary(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Occurrence and investigation statistics plus the stat cards rendered on
    the dashboard (count, share of total, caption). Empty datasets give
    zero counts and 0% everywhere.
    """
    occ_rows = occurrence_crud.rows_for_stats(db)
    occ = occurrence_stats(occ_rows)
    inv = investigation_stats(investigation_crud.rows_for_stats(db))
    return {
        "occurrences": {
            "stats": occ,
            "cards": stat_cards(occurrence_distribution(occ_rows), list(OccurrenceStatus)),
        },
        "investigations": {
            "stats": inv,
            "cards": stat_cards(inv, STAGES),
        },
    }
