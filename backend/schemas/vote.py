# backend/schemas/vote.py
from pydantic import BaseModel


class VoteToggleResponse(BaseModel):
    voted: bool
    votesCount: int


class VoteCountResponse(BaseModel):
    materialId: int
    totalVotes: int


class MessageResponse(BaseModel):
    message: str
