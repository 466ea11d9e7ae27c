#!/usr/bin/env python3
"""
Scoring Module - Pairwise compatibility between providers and recipients.

Public API:
- ScoringService: Gate, score, threshold and order a candidate population
- calculate_score: Pure pairwise breakdown
- ScoreBreakdown / ScoredCandidate: Result data structures

Modules:
- models.py: Result data structures
- factors.py: Per-factor calculations and lookup tables
- service.py: Composite score, eligibility gate and ranking
"""

from core.models import OrganizationSnapshot
from core.scorer.models import ScoreBreakdown, ScoredCandidate
from core.scorer.service import ScoringService, calculate_score

__all__ = [
    'ScoringService',
    'calculate_score',
    'OrganizationSnapshot',
    'ScoreBreakdown',
    'ScoredCandidate',
]
