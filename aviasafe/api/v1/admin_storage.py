# aviasafe/api/v1/admin_storage.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from aviasafe.core.auth import get_db, require_admin
from aviasafe.models.profile import Profile
from aviasafe.services.audit import audit_log, ip_from_request
from aviasafe.services.storage import ObjectStorage, get_storage

router = APIRouter(prefix="/admin/storage", tags=["admin"])


@router.post("/initialize")
def initialize_storage(
    request: Request,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: Profile = Depends(require_admin),
):
    """Create the attachments bucket if it does not exist yet (admin only)."""
    created = storage.ensure_bucket()
    if not created:
        return {"message": "Storage bucket already exists", "bucket": storage.bucket}

    audit_log(
        db,
        user_id=admin.id,
        action="STORAGE_BUCKET_CREATED",
        entity_type="storage",
        entity_id=None,
        meta={"bucket": storage.bucket},
        ip=ip_from_request(request),
    )
    return {"message": "Attachments bucket created successfully", "bucket": storage.bucket}
