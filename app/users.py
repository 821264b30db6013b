"""
User router: read and update the caller's own profile.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth import get_current_user_id
from database import get_db
from services import identity_service

router = APIRouter(prefix="/user")


class UpdateProfileBody(BaseModel):
    """All fields optional; missing or blank ones keep their stored value."""
    username: str | None = None
    email: str | None = None
    password: str | None = None


@router.get("/profile")
def get_profile(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = identity_service.get_profile(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"id": user.id, "username": user.username, "email": user.email}


@router.put("/profile")
def update_profile(
    body: UpdateProfileBody,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = identity_service.update_profile(
        db,
        user_id,
        username=body.username,
        email=body.email,
        raw_password=body.password,
    )
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {
        "Message": "Profile updated successfully",
        "id": user.id,
        "username": user.username,
        "email": user.email,
    }
