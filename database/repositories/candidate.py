import logging
from decimal import Decimal
from typing import Any, Iterable, List

from sqlalchemy import select, delete, or_, and_

from core.scorer.models import ScoredCandidate
from database.models import CandidateScore
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _dec(value: float) -> Decimal:
    return Decimal(str(round(value, 2)))


class CandidateRepository(BaseRepository):
    """Storage for each subject's current candidate set."""

    def list_for_subject(self, subject_id: Any) -> List[CandidateScore]:
        stmt = select(CandidateScore).where(
            CandidateScore.subject_id == subject_id
        ).order_by(CandidateScore.score.desc(), CandidateScore.candidate_id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def contains(self, subject_id: Any, candidate_id: Any) -> bool:
        return self.db.get(CandidateScore, (subject_id, candidate_id)) is not None

    def replace_for_subject(self, subject_id: Any, candidates: Iterable[ScoredCandidate]) -> int:
        """Discard the subject's whole set and insert `candidates` in its place.

        Runs inside the caller's transaction; nothing is visible to other
        sessions until commit.
        """
        self.db.execute(delete(CandidateScore).where(CandidateScore.subject_id == subject_id))

        count = 0
        for candidate in candidates:
            b = candidate.breakdown
            self.db.add(CandidateScore(
                subject_id=subject_id,
                candidate_id=candidate.candidate_id,
                score=_dec(b.overall_score),
                sector_score=_dec(b.sector_score),
                target_group_score=_dec(b.target_group_score),
                budget_score=_dec(b.budget_score),
                timeline_score=_dec(b.timeline_score),
                stage_score=_dec(b.stage_score),
            ))
            count += 1

        self.db.flush()
        return count

    def remove(self, subject_id: Any, candidate_id: Any) -> int:
        result = self.db.execute(delete(CandidateScore).where(
            CandidateScore.subject_id == subject_id,
            CandidateScore.candidate_id == candidate_id
        ))
        return result.rowcount or 0

    def remove_pair(self, a: Any, b: Any) -> int:
        """Remove the pair from both organizations' candidate sets."""
        result = self.db.execute(delete(CandidateScore).where(or_(
            and_(CandidateScore.subject_id == a, CandidateScore.candidate_id == b),
            and_(CandidateScore.subject_id == b, CandidateScore.candidate_id == a),
        )))
        return result.rowcount or 0
