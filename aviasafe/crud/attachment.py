# aviasafe/crud/attachment.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from aviasafe.models.attachment import Attachment


def list_for_occurrence(db: Session, occurrence_id: int) -> List[Attachment]:
    return (
        db.query(Attachment)
        .filter(Attachment.occurrence_id == occurrence_id)
        .order_by(Attachment.created_at.desc(), Attachment.id.desc())
        .all()
    )


def get_attachment(db: Session, attachment_id: int) -> Optional[Attachment]:
    return db.query(Attachment).filter(Attachment.id == attachment_id).first()


def create_attachment(db: Session, data: Dict[str, Any]) -> Attachment:
    obj = Attachment(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_attachment(db: Session, obj: Attachment) -> None:
    db.delete(obj)
    db.commit()
