"""Matcher Module - Candidate set maintenance on top of the scoring engine."""
from core.matcher.dto import CandidateSummaryDTO, ConnectionDTO, RecomputeSummary
from core.matcher.locks import SubjectLockRegistry, subject_locks
from core.matcher.service import CandidateSetManager

__all__ = [
    'CandidateSetManager', 'SubjectLockRegistry', 'subject_locks',
    'CandidateSummaryDTO', 'ConnectionDTO', 'RecomputeSummary',
]
