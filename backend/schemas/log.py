from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


# One audit entry, with the acting user's name for the admin panel
class AuditEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ts: datetime
    action: str
    resource: str
    status: str
    user_id: Optional[int] = None
    username: Optional[str] = None
    material_id: Optional[int] = None
    ip: Optional[str] = None
    meta: Optional[Any] = None


class AuditPage(BaseModel):
    items: List[AuditEntry]
    total: int
    page: int
    page_size: int
