# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import write_log, client_ip
from services.errors import ConflictError
from models import users as models
from schemas import user as schemas
from database import get_db

router = APIRouter(tags=["Auth"])

# Register a new user; the account stays inactive until an admin approves it
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    # Normalize input
    normalized_email = user.email.strip().lower()
    username = user.username

    # Check for existing email or username
    existing = db.query(models.User).filter(
        or_(
            func.lower(models.User.email) == normalized_email,
            func.lower(models.User.username) == username.lower(),
        )
    ).first()
    if existing:
        reason = "Email already exists" if existing.email.lower() == normalized_email else "Username already exists"
        write_log(
            db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
            ip=client_ip(request), meta={"email": normalized_email, "reason": reason},
        )
        raise ConflictError(reason)

    new_user = models.User(
        username=username,
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        role="user",
        is_active=False,
        first_name=user.first_name,
        last_name=user.last_name,
        postnomials=user.postnomials,
        college=user.college,
        profile_image=settings.AVATAR_URL_TEMPLATE.format(username=username),
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration with the same email/username
        db.rollback()
        raise ConflictError("Email or username already exists")
    db.refresh(new_user)

    write_log(
        db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
        ip=client_ip(request), meta={"email": new_user.email},
    )
    return new_user


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(models.User).filter(models.User.email == email).first()

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not db_user.is_active:
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": email, "reason": "inactive"})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is awaiting admin approval")

    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"access_token": access_token, "token_type": "bearer", "user": db_user}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
