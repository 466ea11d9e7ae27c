#!/usr/bin/env python3
"""
Profile endpoints - read and update organization profiles.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.config_loader import MatchingConfig
from core.matcher import CandidateSetManager
from ..dependencies import get_db, get_candidate_manager, get_current_subject, get_matching_config
from ..services.profile_service import ProfileService
from ..models.requests import ProfileUpdate
from ..models.responses import ProfileResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profiles"])


def get_profile_service(
    db: Session = Depends(get_db),
    manager: CandidateSetManager = Depends(get_candidate_manager),
    config: MatchingConfig = Depends(get_matching_config)
) -> ProfileService:
    return ProfileService(db, manager, config)


@router.get("/me/profile", response_model=ProfileResponse)
def get_my_profile(
    subject_id: int = Depends(get_current_subject),
    service: ProfileService = Depends(get_profile_service)
):
    return ProfileResponse(success=True, profile=service.get_profile(subject_id))


@router.put("/me/profile", response_model=ProfileResponse)
def update_my_profile(
    update: ProfileUpdate,
    subject_id: int = Depends(get_current_subject),
    service: ProfileService = Depends(get_profile_service)
):
    """
    Partially update the caller's profile.

    Status is re-derived from the merged profile, and the caller's candidate
    set is recomputed when `matching.recompute_on_profile_change` is set.
    """
    return ProfileResponse(success=True, profile=service.update_profile(subject_id, update))


@router.get("/users/{user_id}/profile", response_model=ProfileResponse)
def get_user_profile(
    user_id: int,
    subject_id: int = Depends(get_current_subject),
    service: ProfileService = Depends(get_profile_service)
):
    return ProfileResponse(success=True, profile=service.get_profile(user_id))
