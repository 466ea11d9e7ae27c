#!/usr/bin/env python3
"""
Scoring Service - Weighted multi-factor compatibility between two organizations.

Composite score (0-100):
- Sector overlap        30%
- Target-group overlap  30%
- Budget fit            20%
- Timeline fit          10%
- Stage fit             10%

Scoring is a pure function of the two snapshots and `now`. The provider and
recipient sides are resolved from the roles before any factor is computed,
so score(a, b) == score(b, a).

The eligibility gate (opposite roles, both active, not connected, not
dismissed, some tag overlap) is applied separately from the threshold: a pair
that fails the gate is never a candidate, whatever its composite.
"""

from datetime import datetime
from typing import AbstractSet, Iterable, List, Optional, Tuple
import logging

from core.config_loader import ScorerConfig
from core.scorer import factors
from core.models import OrganizationSnapshot, STATUS_ACTIVE
from core.scorer.models import ScoreBreakdown, ScoredCandidate, sort_key
from core.status import derive_status
from core.utils import utcnow

logger = logging.getLogger(__name__)


def resolve_sides(
    a: OrganizationSnapshot,
    b: OrganizationSnapshot
) -> Tuple[OrganizationSnapshot, OrganizationSnapshot]:
    """Return (provider, recipient). Raises ValueError unless roles are opposite."""
    if a.role == b.role:
        raise ValueError(
            f"Cannot score organizations {a.id} and {b.id}: both have role {a.role!r}"
        )
    return (a, b) if a.is_provider else (b, a)


def calculate_score(
    a: OrganizationSnapshot,
    b: OrganizationSnapshot,
    config: ScorerConfig,
    now: Optional[datetime] = None
) -> ScoreBreakdown:
    """Compute the per-factor breakdown and the rounded composite for a pair."""
    provider, recipient = resolve_sides(a, b)
    now = now or utcnow()
    weights = config.weights

    sector = factors.overlap_score(provider.sectors, recipient.sectors, config.overlap_basis)
    target_group = factors.overlap_score(
        provider.target_groups, recipient.target_groups, config.overlap_basis
    )
    budget = factors.budget_score(provider.amount_offered, recipient.budget_requested)
    timeline = factors.timeline_score(provider.deadline, recipient.timeline, now)
    stage = factors.stage_score(
        recipient.project_stage, provider.funding_type, config.stage_baseline
    )

    overall = (
        weights.sector * sector +
        weights.target_group * target_group +
        weights.budget * budget +
        weights.timeline * timeline +
        weights.stage * stage
    )
    overall = round(max(0.0, min(100.0, overall)), 2)

    return ScoreBreakdown(
        sector_score=round(sector, 2),
        target_group_score=round(target_group, 2),
        budget_score=round(budget, 2),
        timeline_score=timeline,
        stage_score=stage,
        overall_score=overall,
    )


class ScoringService:
    """
    Scores a subject against a population of opposite-role organizations.

    Applies the eligibility gate and the score threshold, and returns the
    qualifying candidates in display order.
    """

    def __init__(self, config: ScorerConfig):
        self.config = config

    def score(
        self,
        subject: OrganizationSnapshot,
        candidate: OrganizationSnapshot,
        now: Optional[datetime] = None
    ) -> ScoreBreakdown:
        return calculate_score(subject, candidate, self.config, now)

    def passes_threshold(self, breakdown: ScoreBreakdown) -> bool:
        return breakdown.overall_score >= self.config.score_threshold

    def gate_rejection(
        self,
        subject: OrganizationSnapshot,
        candidate: OrganizationSnapshot,
        now: datetime,
        excluded_ids: AbstractSet[int] = frozenset()
    ) -> Optional[str]:
        """Reason the pair fails the pre-score part of the gate, or None."""
        if candidate.id == subject.id:
            return "self"
        if candidate.role == subject.role:
            return "same_role"
        if candidate.id in excluded_ids:
            return "excluded"
        if derive_status(subject, now) != STATUS_ACTIVE:
            return "subject_inactive"
        if derive_status(candidate, now) != STATUS_ACTIVE:
            return "candidate_inactive"
        return None

    def score_candidates(
        self,
        subject: OrganizationSnapshot,
        population: Iterable[OrganizationSnapshot],
        excluded_ids: AbstractSet[int] = frozenset(),
        now: Optional[datetime] = None
    ) -> List[ScoredCandidate]:
        """
        Score every eligible member of `population` against `subject`.

        Args:
            subject: The organization the candidate set belongs to
            population: Opposite-role organizations to consider
            excluded_ids: Connected or dismissed organization ids
            now: Evaluation time for deadline and status checks

        Returns:
            Candidates passing the gate and threshold, ordered by score desc,
            then candidate id asc
        """
        now = now or utcnow()
        results: List[ScoredCandidate] = []
        rejected = 0

        for candidate in population:
            if self.gate_rejection(subject, candidate, now, excluded_ids):
                rejected += 1
                continue

            breakdown = self.score(subject, candidate, now)
            if not breakdown.has_overlap or not self.passes_threshold(breakdown):
                rejected += 1
                continue

            results.append(ScoredCandidate(
                subject_id=subject.id,
                candidate_id=candidate.id,
                breakdown=breakdown,
            ))

        results.sort(key=lambda c: sort_key(c.candidate_id, c.score))
        logger.debug(
            f"Scored subject {subject.id}: {len(results)} candidates, {rejected} rejected"
        )
        return results
