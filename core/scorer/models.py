#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-factor scores (each 0-100) and the weighted composite."""
    sector_score: float = 0.0
    target_group_score: float = 0.0
    budget_score: float = 0.0
    timeline_score: float = 0.0
    stage_score: float = 0.0
    overall_score: float = 0.0

    @property
    def has_overlap(self) -> bool:
        return self.sector_score > 0 or self.target_group_score > 0

    def components(self) -> Dict[str, Any]:
        return {
            'sector': self.sector_score,
            'target_group': self.target_group_score,
            'budget': self.budget_score,
            'timeline': self.timeline_score,
            'stage': self.stage_score,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate that passed the eligibility gate and the score threshold."""
    subject_id: int
    candidate_id: int
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.overall_score


def sort_key(candidate_id: int, score: float):
    """Descending score, ties broken by ascending candidate id."""
    return (-score, candidate_id)
