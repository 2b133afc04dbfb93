# backend/routes/admin.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from typing import Optional, Literal
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import role_required
from utils.audit import write_log, client_ip
from schemas.user import UserResponse, UsersPage
from services import approval
from utils import storage

router = APIRouter(tags=["Admin"])

admin_required = role_required("admin")


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("/users", response_model=UsersPage)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by email or username"),
    role: Optional[str] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by activation state"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "username", "role", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(User)

    # Filter by email or username
    if q:
        like = f"%{q.strip().lower()}%"
        query = query.filter(User.email.ilike(like) | User.username.ilike(like))

    # Filter by role
    if role:
        query = query.filter(User.role.ilike(role))

    # Pending accounts are listed with is_active=false
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))

    sort_map = {
        "id": User.id,
        "email": User.email,
        "username": User.username,
        "role": User.role,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), User.id.asc())

    # Apply pagination
    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


# Activate a user account (Admin only)
@router.patch("/users/{user_id}/approve", response_model=UserResponse)
def approve_user(
    user_id: int,
    request: Request,
    active: bool = Query(True, description="Pass false to deactivate the account"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    if user_id == current_user.id and not active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")

    user = approval.set_user_active(db, user_id, active)

    write_log(
        db, user_id=current_user.id, action="USER_APPROVE" if active else "USER_DEACTIVATE",
        resource="users", status="SUCCESS", ip=client_ip(request), meta={"target_user_id": user.id},
    )
    return user


# Delete a user account (Admin only)
@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    email = user.email
    image_urls = [m.image_url for m in user.materials if m.image_url]
    db.delete(user)
    db.commit()

    # Materials go with the account, so do their stored images
    for image_url in image_urls:
        storage.delete_image(image_url)

    write_log(
        db, user_id=current_user.id, action="USER_DELETE", resource="users",
        status="SUCCESS", ip=client_ip(request), meta={"target_user_id": user_id, "email": email},
    )
    return {"message": f"User {email} has been deleted"}
