# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Represents a user account with authentication details, profile and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # user/admin

    # Profile details shown next to uploaded materials
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    postnomials = Column(String, nullable=True)
    college = Column(String, nullable=True)
    profile_image = Column(String, nullable=True)

    # Accounts stay locked until an admin activates them
    is_active = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    materials = relationship("ReadingMaterial", back_populates="user", cascade="all, delete-orphan")
    votes = relationship("Vote", back_populates="user", cascade="all, delete-orphan")
