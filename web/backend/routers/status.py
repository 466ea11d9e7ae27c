#!/usr/bin/env python3
"""
Status endpoints - organization lifecycle status.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db, get_current_subject
from ..services.profile_service import ProfileService
from ..models.responses import StatusResponse

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("", response_model=StatusResponse)
def get_my_status(
    subject_id: int = Depends(get_current_subject),
    db: Session = Depends(get_db)
):
    return ProfileService(db).get_status(subject_id)


@router.get("/{user_id}", response_model=StatusResponse)
def get_user_status(
    user_id: int,
    subject_id: int = Depends(get_current_subject),
    db: Session = Depends(get_db)
):
    return ProfileService(db).get_status(user_id)
