#!/usr/bin/env python3
"""
Match endpoints - view, recalculate and dismiss potential matches.
"""

import logging
from fastapi import APIRouter, Depends, Response, status

from core.config_loader import MatchingConfig
from core.matcher import CandidateSetManager
from ..dependencies import get_candidate_manager, get_current_subject, get_matching_config
from ..services.match_service import MatchService
from ..models.responses import PotentialMatchesResponse, RecalculateResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["matches"])


def get_match_service(
    manager: CandidateSetManager = Depends(get_candidate_manager),
    config: MatchingConfig = Depends(get_matching_config)
) -> MatchService:
    return MatchService(manager, config)


@router.get("/potential-matches", response_model=PotentialMatchesResponse)
def get_potential_matches(
    subject_id: int = Depends(get_current_subject),
    service: MatchService = Depends(get_match_service)
):
    """
    Get the caller's potential matches.

    Returns candidates sorted by score (highest first), ties by candidate id.
    """
    matches = service.get_potential_matches(subject_id)
    return PotentialMatchesResponse(
        success=True,
        count=len(matches),
        matches=matches
    )


@router.post("/potential-matches/recalculate", response_model=RecalculateResponse)
def recalculate_potential_matches(
    subject_id: int = Depends(get_current_subject),
    service: MatchService = Depends(get_match_service)
):
    """Recompute the caller's candidate set now."""
    count = service.recalculate(subject_id)
    return RecalculateResponse(
        success=True,
        message=f"Found {count} potential matches",
        count=count
    )


@router.delete("/matches/dismiss/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_match(
    candidate_id: int,
    subject_id: int = Depends(get_current_subject),
    service: MatchService = Depends(get_match_service)
):
    """
    Permanently dismiss a potential match.

    Dismissing an already-dismissed candidate succeeds without changes.
    """
    service.dismiss(subject_id, candidate_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
