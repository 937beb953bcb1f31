# aviasafe/services/audit.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aviasafe.models.audit_event import AuditEvent

log = logging.getLogger("aviasafe.audit")


# -----------------------------
# Helpers
# -----------------------------
def ip_from_request(request: Optional[Request]) -> Optional[str]:
    """
    Best-effort client IP extraction compatible with proxies.
    Order:
      - X-Forwarded-For (first in the list)
      - X-Real-IP
      - request.client.host
    """
    if request is None:
        return None

    xff = request.headers.get("x-forwarded-for")
    if xff:
        first = xff.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    client = getattr(request, "client", None)
    return getattr(client, "host", None)


# -----------------------------
# Core API
# -----------------------------
def audit_log(
    db: Session,
    *,
    user_id: Optional[int],
    action: str,
    entity_type: Optional[str],
    entity_id: Optional[int],
    meta: Optional[Dict[str, Any]] = None,
    ip: Optional[str] = None,
) -> None:
    """
    Inserts an audit record in its own commit.
    Failures are logged and rolled back so the main flow is never broken.
    """
    try:
        db.add(
            AuditEvent(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                meta=meta or {},
                ip_address=ip,
            )
        )
        db.commit()
    except SQLAlchemyError:
        log.warning("audit write failed action=%s entity=%s:%s", action, entity_type, entity_id, exc_info=True)
        db.rollback()


def events_for(db: Session, entity_type: str, entity_id: int, limit: int = 200) -> List[AuditEvent]:
    return (
        db.query(AuditEvent)
        .filter(AuditEvent.entity_type == entity_type, AuditEvent.entity_id == entity_id)
        .order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc())
        .limit(limit)
        .all()
    )


def has_event(db: Session, action: str, entity_type: str, entity_id: int) -> bool:
    return (
        db.query(AuditEvent.id)
        .filter(
            AuditEvent.action == action,
            AuditEvent.entity_type == entity_type,
            AuditEvent.entity_id == entity_id,
        )
        .first()
        is not None
    )
