# aviasafe/schemas/attachment.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from aviasafe.schemas.common import ProfileBrief


class AttachmentOut(BaseModel):
    id: int
    occurrence_id: int
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    size_label: Optional[str] = None
    icon: Optional[str] = None
    public_url: Optional[str] = None
    uploaded_by: Optional[int] = None
    uploader: Optional[ProfileBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AttachmentListOut(BaseModel):
    attachments: List[AttachmentOut]


class AttachmentUploadOut(BaseModel):
    message: str
    attachment: AttachmentOut
