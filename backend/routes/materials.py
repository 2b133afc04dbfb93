# backend/routes/materials.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request, UploadFile, File, Form, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_active_user, role_required
from utils.audit import write_log, client_ip
from utils import storage
from services import approval, catalog, keywords as keyword_index, materials as material_service
from services.catalog import CatalogItem
import schemas.material as material_schemas

router = APIRouter(prefix="/materials", tags=["Reading materials"])

admin_required = role_required("admin")


# ---- HELPERS ----
def _material_out(item: CatalogItem) -> material_schemas.MaterialWithVotes:
    m = item.material
    return material_schemas.MaterialWithVotes(
        id=m.id,
        title=m.title,
        type=m.type,
        caption=m.caption,
        author=m.author,
        college=m.college,
        keywords=m.keyword_list,
        subject_titles=m.subject_titles or [],
        version=m.version,
        edition=m.edition,
        is_approved=m.is_approved,
        image_url=m.image_url,
        created_at=m.created_at,
        updated_at=m.updated_at,
        user=material_schemas.MaterialOwner(
            id=m.user_id,
            username=item.owner_username,
            profile_image=item.owner_profile_image,
        ),
        votesCount=item.votes_count,
        hasVoted=item.has_voted,
    )


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part for part in value.split(",") if part.strip()]


# =========================
# MATERIAL CATALOG
# =========================
@router.get("", response_model=material_schemas.CatalogPageOut)
def list_materials(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on the title"),
    keyword: Optional[str] = Query(None, description="Case-insensitive match on the keywords"),
    sort: Optional[str] = Query(None, description="newest, popular or keywords"),
    approved: Optional[bool] = Query(None, description="Admins only: filter by approval state"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    query = catalog.normalize_query(
        page=page, limit=limit, search=search, keyword=keyword, sort=sort, approved=approved,
    )
    result = catalog.list_catalog(db, current_user, query)

    return material_schemas.CatalogPageOut(
        readingMaterials=[_material_out(item) for item in result.items],
        currentPage=result.page,
        totalReadingMaterials=result.total,
        totalPages=result.total_pages,
    )


@router.get("/keywords", response_model=List[material_schemas.KeywordCountOut])
def list_keywords(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    return keyword_index.keyword_frequencies(db, current_user)


@router.get("/user", response_model=List[material_schemas.MaterialWithVotes])
def list_my_materials(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    return [_material_out(item) for item in catalog.list_user_materials(db, current_user)]


@router.get("/{material_id}", response_model=material_schemas.MaterialWithVotes)
def get_material(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    return _material_out(catalog.get_material_view(db, material_id, current_user))


# =========================
# UPLOAD
# =========================
@router.post("", response_model=material_schemas.MaterialWithVotes, status_code=status.HTTP_201_CREATED)
def add_material(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
    image: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    college: Optional[str] = Form(None),
    keywords: Optional[str] = Form(None, description="Comma separated"),
    subject_titles: Optional[str] = Form(None, description="Comma separated"),
    version: Optional[int] = Form(None),
    edition: Optional[int] = Form(None),
):
    draft = material_service.MaterialDraft(
        title=title, type=type, caption=caption, author=author, college=college,
        keywords=keyword_index.split_keywords(keywords), subject_titles=_split_csv(subject_titles),
        version=version, edition=edition,
    )
    # Field checks run before anything is written
    material_service.validate_draft(draft)

    if image is not None and image.filename:
        draft.image_url = storage.save_image(image)

    try:
        material = material_service.create_material(db, current_user, draft)
    except Exception:
        # Do not keep an image for a material that was never stored
        storage.delete_image(draft.image_url)
        raise

    write_log(
        db, user_id=current_user.id, action="MATERIAL_CREATE", resource="materials",
        status="SUCCESS", ip=client_ip(request), material_id=material.id, meta={"title": material.title},
    )

    return _material_out(CatalogItem(
        material=material,
        votes_count=0,
        has_voted=False,
        owner_username=current_user.username,
        owner_profile_image=current_user.profile_image,
    ))


# =========================
# ADMIN EDITS
# =========================
@router.patch("/{material_id}/approve", response_model=material_schemas.MaterialWithVotes)
def approve_material(
    material_id: int,
    request: Request,
    approved: bool = Query(True, description="Pass false to withdraw the approval"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    approval.set_material_approved(db, material_id, approved)

    write_log(
        db, user_id=current_user.id, action="MATERIAL_APPROVE" if approved else "MATERIAL_UNAPPROVE",
        resource="materials", status="SUCCESS", ip=client_ip(request), material_id=material_id,
    )
    return _material_out(catalog.get_material_view(db, material_id, current_user))


@router.patch("/{material_id}/subject-titles", response_model=material_schemas.MaterialWithVotes)
def edit_subject_titles(
    material_id: int,
    payload: material_schemas.SubjectTitlesUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    material = material_service.update_subject_titles(db, material_id, payload.subject_titles)

    write_log(
        db, user_id=current_user.id, action="MATERIAL_EDIT", resource="materials",
        status="SUCCESS", ip=client_ip(request),
        material_id=material_id, meta={"subject_titles": material.subject_titles},
    )
    return _material_out(catalog.get_material_view(db, material_id, current_user))


# =========================
# DELETE
# =========================
@router.delete("/{material_id}")
def delete_material(
    material_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    title = material_service.delete_material(db, material_id, current_user)

    write_log(
        db, user_id=current_user.id, action="MATERIAL_DELETE", resource="materials",
        status="SUCCESS", ip=client_ip(request), material_id=material_id, meta={"title": title},
    )
    return {"message": f"Reading material '{title}' deleted successfully"}

