# backend/routes/logs.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.log import AuditPage
from utils.audit import AuditFilter, audit_trail
from utils.tokenJWT import role_required

router = APIRouter(prefix="/logs", tags=["Logs"])

admin_required = role_required("admin")


# Audit trail for moderators (Admin only)
@router.get("", response_model=AuditPage)
def get_logs(
    resource: Optional[Literal["auth", "users", "materials", "votes"]] = Query(None),
    action: Optional[str] = Query(None, description="Exact action, e.g. VOTE or MATERIAL_APPROVE"),
    status: Optional[Literal["SUCCESS", "FAIL"]] = Query(None),
    user_id: Optional[int] = Query(None, description="Acting user"),
    material_id: Optional[int] = Query(None, description="Everything that happened to one material"),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1, le=100_000),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    filters = AuditFilter(
        resource=resource, action=action, status=status, user_id=user_id,
        material_id=material_id, since=since, until=until,
    )
    entries, total = audit_trail(db, filters, page, page_size)
    return {"items": entries, "total": total, "page": page, "page_size": page_size}
