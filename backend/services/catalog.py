# backend/services/catalog.py
"""Material catalog queries.

A catalog page is built with a fixed number of statements no matter how many
materials match: one COUNT for the total, one SELECT that joins the owner and
a grouped vote-count subquery, and one lookup of the caller's votes restricted
to the ids on the page.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from config import settings
from models.material import MaterialKeyword, ReadingMaterial
from models.users import User
from models.vote import Vote
from services import vote_ledger
from services.errors import NotFoundError

logger = logging.getLogger(__name__)

SORT_NEWEST = "newest"
SORT_POPULAR = "popular"
SORT_KEYWORDS = "keywords"
SORT_OPTIONS = (SORT_NEWEST, SORT_POPULAR, SORT_KEYWORDS)

DEFAULT_PAGE = 1

# OFFSET has to fit a signed 64-bit integer column
MAX_OFFSET = 2 ** 63 - 1


def _default_limit() -> int:
    return settings.CATALOG_DEFAULT_LIMIT


@dataclass
class CatalogQuery:
    page: int = DEFAULT_PAGE
    limit: int = field(default_factory=_default_limit)
    search: str = ""
    keyword: str = ""
    sort: str = SORT_NEWEST
    approved: Optional[bool] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class CatalogItem:
    material: ReadingMaterial
    votes_count: int
    has_voted: bool
    owner_username: Optional[str] = None
    owner_profile_image: Optional[str] = None


@dataclass
class CatalogPage:
    items: List[CatalogItem] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = 0

    @property
    def total_pages(self) -> int:
        if self.total == 0 or self.limit == 0:
            return 0
        return math.ceil(self.total / self.limit)


def _coerce_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def normalize_query(
    page: Any = None,
    limit: Any = None,
    search: Optional[str] = None,
    keyword: Optional[str] = None,
    sort: Optional[str] = None,
    approved: Optional[bool] = None,
    default_limit: Optional[int] = None,
) -> CatalogQuery:
    """Build a CatalogQuery from raw request values.

    Malformed numbers fall back to the defaults, values below 1 are clamped to
    1, ``limit`` is capped at ``CATALOG_MAX_LIMIT`` and an unknown sort means
    newest first. ``page`` is capped so its offset stays a valid 64-bit
    integer; such a page is simply past the end of the catalog.
    """
    default_limit = default_limit or settings.CATALOG_DEFAULT_LIMIT

    limit_value = max(1, _coerce_int(limit, default_limit))
    limit_value = min(limit_value, settings.CATALOG_MAX_LIMIT)
    page_value = max(1, _coerce_int(page, DEFAULT_PAGE))
    page_value = min(page_value, MAX_OFFSET // limit_value)

    sort_value = (sort or "").strip().lower()
    if sort_value not in SORT_OPTIONS:
        sort_value = SORT_NEWEST

    return CatalogQuery(
        page=page_value,
        limit=limit_value,
        search=(search or "").strip(),
        keyword=(keyword or "").strip(),
        sort=sort_value,
        approved=approved,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filters(query: CatalogQuery, viewer: User) -> list:
    conditions = []

    if query.search:
        conditions.append(ReadingMaterial.title.ilike(f"%{_escape_like(query.search)}%", escape="\\"))

    if query.keyword:
        conditions.append(
            ReadingMaterial.keywords.any(
                MaterialKeyword.word.ilike(f"%{_escape_like(query.keyword)}%", escape="\\")
            )
        )

    visibility = visible_to(viewer)
    if visibility is not None:
        conditions.append(visibility)
    elif query.approved is not None:
        conditions.append(ReadingMaterial.is_approved.is_(query.approved))

    return conditions


def visible_to(viewer: User):
    """Condition limiting materials to what ``viewer`` may see, None for admins.

    Regular users see approved materials and their own uploads.
    """
    if (viewer.role or "").lower() == "admin":
        return None
    return or_(ReadingMaterial.is_approved.is_(True), ReadingMaterial.user_id == viewer.id)


def _vote_counts_subquery():
    return (
        select(Vote.material_id.label("material_id"), func.count(Vote.id).label("votes_count"))
        .group_by(Vote.material_id)
        .subquery("vote_counts")
    )


def _order_by(sort: str, votes_count):
    if sort == SORT_POPULAR:
        return [votes_count.desc(), ReadingMaterial.created_at.desc(), ReadingMaterial.id.desc()]
    if sort == SORT_KEYWORDS:
        # Match order, i.e. the order materials were inserted in
        return [ReadingMaterial.id.asc()]
    return [ReadingMaterial.created_at.desc(), ReadingMaterial.id.desc()]


def list_catalog(db: Session, viewer: User, query: CatalogQuery) -> CatalogPage:
    conditions = _filters(query, viewer)

    total = db.scalar(
        select(func.count(ReadingMaterial.id)).where(*conditions)
    ) or 0
    if query.offset >= total:
        return CatalogPage(items=[], total=total, page=query.page, limit=query.limit)

    counts = _vote_counts_subquery()
    votes_count = func.coalesce(counts.c.votes_count, 0).label("votes_count")

    stmt = (
        select(ReadingMaterial, votes_count, User.username, User.profile_image)
        .outerjoin(counts, counts.c.material_id == ReadingMaterial.id)
        .outerjoin(User, User.id == ReadingMaterial.user_id)
        .where(*conditions)
        .order_by(*_order_by(query.sort, votes_count))
        .offset(query.offset)
        .limit(query.limit)
        .options(selectinload(ReadingMaterial.keywords))
    )
    rows = db.execute(stmt).all()

    page_ids = [row[0].id for row in rows]
    voted_ids = vote_ledger.voted_material_ids(db, viewer.id, page_ids)

    items = [
        CatalogItem(
            material=material,
            votes_count=int(count or 0),
            has_voted=material.id in voted_ids,
            owner_username=username,
            owner_profile_image=profile_image,
        )
        for material, count, username, profile_image in rows
    ]

    logger.debug(
        "Catalog page=%s limit=%s sort=%s returned=%s total=%s",
        query.page, query.limit, query.sort, len(items), total,
    )
    return CatalogPage(items=items, total=total, page=query.page, limit=query.limit)


def can_view(material: ReadingMaterial, viewer: User) -> bool:
    if material.is_approved or material.user_id == viewer.id:
        return True
    return (viewer.role or "").lower() == "admin"


def get_material(db: Session, material_id: int) -> ReadingMaterial:
    material = db.get(ReadingMaterial, material_id)
    if material is None:
        raise NotFoundError("Reading material not found")
    return material


def get_material_view(db: Session, material_id: int, viewer: User) -> CatalogItem:
    """A single material with the same annotations as a catalog page item."""
    material = get_material(db, material_id)
    if not can_view(material, viewer):
        # Unapproved materials of other users are reported as missing
        raise NotFoundError("Reading material not found")

    owner = material.user
    return CatalogItem(
        material=material,
        votes_count=vote_ledger.count_votes(db, material.id),
        has_voted=vote_ledger.has_voted(db, viewer.id, material.id),
        owner_username=owner.username if owner else None,
        owner_profile_image=owner.profile_image if owner else None,
    )


def list_user_materials(db: Session, user: User) -> List[CatalogItem]:
    materials = db.scalars(
        select(ReadingMaterial)
        .where(ReadingMaterial.user_id == user.id)
        .order_by(ReadingMaterial.created_at.desc(), ReadingMaterial.id.desc())
        .options(selectinload(ReadingMaterial.keywords))
    ).all()

    ids = [m.id for m in materials]
    counts = vote_ledger.vote_counts(db, ids)
    voted_ids = vote_ledger.voted_material_ids(db, user.id, ids)

    return [
        CatalogItem(
            material=m,
            votes_count=counts.get(m.id, 0),
            has_voted=m.id in voted_ids,
            owner_username=user.username,
            owner_profile_image=user.profile_image,
        )
        for m in materials
    ]
