# backend/schemas/material.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Display fields of the user who uploaded a material
class MaterialOwner(ORMBase):
    id: int
    username: Optional[str] = None
    profile_image: Optional[str] = None


# Stored material fields
class MaterialOut(ORMBase):
    id: int
    title: str
    type: str
    caption: str
    author: str
    college: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    subject_titles: List[str] = Field(default_factory=list)
    version: Optional[int] = None
    edition: Optional[int] = None
    is_approved: bool
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Material as shown in the catalog, with vote information for the caller
class MaterialWithVotes(MaterialOut):
    user: MaterialOwner
    votesCount: int
    hasVoted: bool


# One page of the catalog
class CatalogPageOut(BaseModel):
    readingMaterials: List[MaterialWithVotes]
    currentPage: int
    totalReadingMaterials: int
    totalPages: int


class KeywordCountOut(ORMBase):
    word: str
    count: int


# Admin edit of the subject titles
class SubjectTitlesUpdate(BaseModel):
    subject_titles: List[str]
