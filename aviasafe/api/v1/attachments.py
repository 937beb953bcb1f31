# aviasafe/api/v1/attachments.py
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aviasafe.core.auth import get_current_user, get_db
from aviasafe.crud import attachment as attachment_crud
from aviasafe.crud import occurrence as occurrence_crud
from aviasafe.crud.profile import profiles_by_ids
from aviasafe.models.attachment import Attachment
from aviasafe.models.profile import Profile
from aviasafe.schemas.attachment import AttachmentListOut, AttachmentOut, AttachmentUploadOut
from aviasafe.schemas.common import MessageOut, ProfileBrief
from aviasafe.services.attachment_policy import (
    MAX_FILE_SIZE,
    file_icon_type,
    format_size,
    storage_file_name,
)
from aviasafe.services.audit import audit_log, ip_from_request
from aviasafe.services.storage import ObjectStorage, StorageError, get_storage
from aviasafe.services.views import validate_upload

log = logging.getLogger("aviasafe.attachments")

router = APIRouter(prefix="/attachments", tags=["attachments"])


def _to_out(att: Attachment, uploader: Optional[Profile]) -> AttachmentOut:
    out = AttachmentOut.model_validate(att)
    out.size_label = format_size(att.file_size)
    out.icon = file_icon_type(att.file_type)
    out.uploader = ProfileBrief.model_validate(uploader) if uploader else None
    return out


# ---------------------------
# LIST
# ---------------------------
@router.get("/{occurrence_id}/list", response_model=AttachmentListOut)
def list_attachments(
    occurrence_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    if not occurrence_crud.get_occurrence(db, occurrence_id):
        raise HTTPException(status_code=404, detail="Occurrence not found or access denied")

    rows = attachment_crud.list_for_occurrence(db, occurrence_id)
    uploaders = profiles_by_ids(db, (r.uploaded_by for r in rows))
    return AttachmentListOut(
        attachments=[_to_out(r, uploaders.get(r.uploaded_by)) for r in rows]
    )


# ---------------------------
# UPLOAD
# ---------------------------
@router.post("/upload", response_model=AttachmentUploadOut)
async def upload_attachment(
    request: Request,
    file: Optional[UploadFile] = File(None),
    occurrence_id: Optional[str] = Form(None, alias="occurrenceId"),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Profile = Depends(get_current_user),
):
    """
    Upload one file (multipart/form-data: file, occurrenceId).
    Type and size are validated before anything is written to storage. If
    the metadata insert fails, the stored object is removed again.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    if not occurrence_id:
        raise HTTPException(status_code=400, detail="Occurrence ID is required")

    # read at most one byte past the limit
    data = await file.read(MAX_FILE_SIZE + 1)
    size = len(data)
    problem = validate_upload(file.filename, file.content_type, size)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    try:
        occ_id = int(occurrence_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Occurrence not found or access denied")
    if not occurrence_crud.get_occurrence(db, occ_id):
        raise HTTPException(status_code=404, detail="Occurrence not found or access denied")

    object_path = f"{occ_id}/{storage_file_name(file.filename, int(time.time() * 1000))}"
    try:
        stored_path = storage.upload(object_path, data, upsert=False)
    except StorageError:
        log.exception("upload to storage failed path=%s", object_path)
        raise HTTPException(status_code=500, detail="Failed to upload file")

    try:
        att = attachment_crud.create_attachment(
            db,
            {
                "occurrence_id": occ_id,
                "file_name": file.filename,
                "file_path": stored_path,
                "file_type": file.content_type,
                "file_size": size,
                "public_url": storage.public_url(stored_path),
                "uploaded_by": current_user.id,
            },
        )
    except SQLAlchemyError:
        log.exception("storing attachment metadata failed path=%s", stored_path)
        db.rollback()
        # compensating action: no orphaned objects
        try:
            storage.remove([stored_path])
        except StorageError:
            log.exception("orphaned object left in storage path=%s", stored_path)
        raise HTTPException(status_code=500, detail="Failed to store attachment metadata")

    audit_log(
        db,
        user_id=current_user.id,
        action="ATTACHMENT_UPLOADED",
        entity_type="occurrence",
        entity_id=occ_id,
        meta={"attachment_id": att.id, "file_name": att.file_name, "size": size},
        ip=ip_from_request(request),
    )
    return AttachmentUploadOut(
        message="File uploaded successfully", attachment=_to_out(att, current_user)
    )


# ---------------------------
# DOWNLOAD
# ---------------------------
@router.get("/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Profile = Depends(get_current_user),
):
    att = attachment_crud.get_attachment(db, attachment_id)
    if not att:
        raise HTTPException(status_code=404, detail="Attachment not found")
    if not storage.exists(att.file_path):
        raise HTTPException(status_code=404, detail="Attachment file is missing")
    return FileResponse(
        storage.local_path(att.file_path),
        media_type=att.file_type,
        filename=att.file_name,
    )


# ---------------------------
# DELETE
# ---------------------------
@router.delete("/{attachment_id}/delete", response_model=MessageOut)
def delete_attachment(
    attachment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Profile = Depends(get_current_user),
):
    att = attachment_crud.get_attachment(db, attachment_id)
    if not att:
        raise HTTPException(status_code=404, detail="Attachment not found")

    if not occurrence_crud.get_occurrence(db, att.occurrence_id):
        raise HTTPException(status_code=403, detail="Access denied to the associated occurrence")

    # storage removal is best-effort; the record goes regardless
    try:
        storage.remove([att.file_path])
    except StorageError:
        log.exception("removing attachment object failed path=%s", att.file_path)

    snapshot = {"occurrence_id": att.occurrence_id, "file_name": att.file_name}
    attachment_crud.delete_attachment(db, att)

    audit_log(
        db,
        user_id=current_user.id,
        action="ATTACHMENT_DELETED",
        entity_type="occurrence",
        entity_id=snapshot["occurrence_id"],
        meta={"attachment_id": attachment_id, "file_name": snapshot["file_name"]},
        ip=ip_from_request(request),
    )
    return MessageOut(message="Attachment deleted successfully")
