import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

# Every audited event belongs to one of these
RESOURCES = ("auth", "users", "materials", "votes")


def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, material_id=None, meta=None):
    entry = Log(
        user_id=user_id, action=action, resource=resource, status=status, ip=ip,
        material_id=material_id, meta=meta or {},
    )
    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        # Audit failures are logged, the request still succeeds
        db.rollback()
        logger.exception("Failed to write audit log %s/%s", resource, action)


def client_ip(request) -> str:
    if request is None or request.client is None:
        return None
    return request.client.host


@dataclass
class AuditFilter:
    resource: Optional[str] = None
    action: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[int] = None
    material_id: Optional[int] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None


def audit_trail(db: Session, filters: AuditFilter, page: int, page_size: int):
    """Newest-first page of audit entries plus the total number of matches."""
    query = db.query(Log)

    if filters.resource:
        query = query.filter(Log.resource == filters.resource)
    if filters.action:
        query = query.filter(Log.action == filters.action.strip().upper())
    if filters.status:
        query = query.filter(Log.status == filters.status)
    if filters.user_id is not None:
        query = query.filter(Log.user_id == filters.user_id)
    # History of one material: uploads, approvals, edits, votes and its deletion
    if filters.material_id is not None:
        query = query.filter(Log.material_id == filters.material_id)
    if filters.since is not None:
        query = query.filter(Log.ts >= filters.since)
    if filters.until is not None:
        query = query.filter(Log.ts <= filters.until)

    total = query.count()
    entries: List[Log] = (
        query.order_by(Log.ts.desc(), Log.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return entries, total
