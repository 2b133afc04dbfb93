# backend/models/material.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base

# Model ReadingMaterial
# A catalogued reading resource uploaded by a user. It only becomes visible
# to other users once an admin approves it.
class ReadingMaterial(Base):
    __tablename__ = "reading_materials"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    caption = Column(String, nullable=False)
    author = Column(String, nullable=False)
    college = Column(String, nullable=False, default="College of Industrial Technology")

    # Optional bibliographic details
    version = Column(Integer, nullable=True)
    edition = Column(Integer, nullable=True)
    subject_titles = Column(JSON, nullable=False, default=list)

    is_approved = Column(Boolean, nullable=False, default=False, index=True)
    image_url = Column(String, nullable=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="materials")
    keywords = relationship(
        "MaterialKeyword",
        back_populates="material",
        cascade="all, delete-orphan",
        order_by="MaterialKeyword.id",
    )
    votes = relationship("Vote", back_populates="material", cascade="all, delete-orphan")

    @property
    def keyword_list(self):
        return [k.word for k in self.keywords]


# A single keyword attached to a material; the set is unique per material
class MaterialKeyword(Base):
    __tablename__ = "material_keywords"

    id = Column(Integer, primary_key=True, index=True)
    material_id = Column(Integer, ForeignKey("reading_materials.id", ondelete="CASCADE"), nullable=False, index=True)
    word = Column(String(100), nullable=False, index=True)

    material = relationship("ReadingMaterial", back_populates="keywords")

    __table_args__ = (
        UniqueConstraint("material_id", "word", name="uq_material_keyword"),
    )
