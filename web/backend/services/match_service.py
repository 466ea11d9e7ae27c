#!/usr/bin/env python3
"""
Match service - business logic for potential match operations.
"""

import logging
from typing import List

from core.config_loader import MatchingConfig
from core.matcher import CandidateSetManager, CandidateSummaryDTO
from ..models.responses import PotentialMatch
from ..utils import safe_float, safe_str

logger = logging.getLogger(__name__)


class MatchService:
    """Service for reading and curating an organization's potential matches."""

    def __init__(self, manager: CandidateSetManager, config: MatchingConfig):
        self.manager = manager
        self.config = config

    def get_potential_matches(self, subject_id: int) -> List[PotentialMatch]:
        """
        Get the subject's candidate set, best first.

        Recomputes before reading when `matching.recompute_on_read` is set,
        so the listing reflects the latest profiles and deadlines.
        """
        if self.config.recompute_on_read:
            self.manager.recompute(subject_id)
        return [self._to_potential_match(c) for c in self.manager.list_candidates(subject_id)]

    def recalculate(self, subject_id: int) -> int:
        """Recompute the subject's candidate set. Returns the new set size."""
        return len(self.manager.recompute(subject_id))

    def dismiss(self, subject_id: int, candidate_id: int) -> bool:
        return self.manager.dismiss(subject_id, candidate_id)

    def _to_potential_match(self, candidate: CandidateSummaryDTO) -> PotentialMatch:
        return PotentialMatch(
            candidate_id=candidate.candidate_id,
            score=safe_float(candidate.score),
            organization_name=safe_str(candidate.organization_name),
            email=safe_str(candidate.email),
            profile_picture_url=candidate.profile_picture_url,
            components={k: safe_float(v) for k, v in candidate.components.items()},
        )
