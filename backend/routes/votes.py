# backend/routes/votes.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from utils.tokenJWT import get_active_user
from utils.audit import write_log, client_ip
from services import catalog, vote_ledger
from services.errors import NotFoundError
from schemas.vote import VoteToggleResponse, VoteCountResponse, MessageResponse

router = APIRouter(prefix="/vote", tags=["Votes"])


# Cast the caller's vote, or take it back if it was already cast
@router.post("/{material_id}", response_model=VoteToggleResponse)
def toggle_vote(
    material_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    material = catalog.get_material(db, material_id)
    if not catalog.can_view(material, current_user):
        raise NotFoundError("Reading material not found")

    result = vote_ledger.toggle_vote(db, current_user.id, material_id)

    write_log(
        db, user_id=current_user.id, action="VOTE" if result.voted else "UNVOTE",
        resource="votes", status="SUCCESS", ip=client_ip(request),
        material_id=material_id, meta={"votes_count": result.votes_count},
    )
    return VoteToggleResponse(voted=result.voted, votesCount=result.votes_count)


# Remove the caller's vote; succeeds even if there was none
@router.delete("/{material_id}", response_model=MessageResponse)
def remove_vote(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    vote_ledger.remove_vote(db, current_user.id, material_id)
    return MessageResponse(message="Vote removed successfully")


@router.get("/{material_id}", response_model=VoteCountResponse)
def get_vote_count(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_active_user),
):
    return VoteCountResponse(materialId=material_id, totalVotes=vote_ledger.count_votes(db, material_id))
