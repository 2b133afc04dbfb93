# backend/models/vote.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# One endorsement of a material by a user
class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("reading_materials.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="votes")
    material = relationship("ReadingMaterial", back_populates="votes")

    __table_args__ = (
        # A user can vote on a material at most once, enforced by the database
        UniqueConstraint("user_id", "material_id", name="uq_vote_user_material"),
    )
