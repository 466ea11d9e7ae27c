#!/usr/bin/env python3
"""
Candidate Set Manager - Maintains each subject's persisted candidate set.

Operations:
- recompute: score all active opposite-role organizations and replace the set
- list_candidates: read the stored set in display order
- dismiss: permanently exclude a candidate
- promote: drop a pair from both sets once they connect
- connect / disconnect: connection ledger writes with their set side effects
- recompute_all: bulk refresh used by the scheduled job

Writers for a subject serialize on an in-process keyed lock plus a row lock
on the subject's organization row. Every write is a single transaction, so
readers see either the previous set or the new one.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception_type,
    before_sleep_log
)

from core.config_loader import MatchingConfig
from core.exceptions import (
    CandidateNotFound,
    ConnectionExists,
    ConnectionNotFound,
    InvalidConnection,
    OrganizationNotFound,
    StoreUnavailable,
)
from core.matcher.dto import CandidateSummaryDTO, ConnectionDTO, RecomputeSummary
from core.matcher.locks import SubjectLockRegistry, subject_locks
from core.models import STATUS_ACTIVE, opposite_role
from core.scorer import ScoringService, ScoredCandidate
from core.status import derive_status
from core.utils import utcnow
from database.uow import match_uow

logger = logging.getLogger(__name__)


def _float(value) -> float:
    return float(value) if value is not None else 0.0


class CandidateSetManager:
    """
    Recompute, read and mutate per-subject candidate sets.

    Designed to be constructed per request; the lock registry is process-wide
    unless one is injected.
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        config: Optional[MatchingConfig] = None,
        locks: Optional[SubjectLockRegistry] = None
    ):
        """
        Args:
            session_factory: Session constructor; defaults to database.database.SessionLocal
            config: Matching configuration (scorer weights, threshold, retries)
            locks: Keyed lock registry; defaults to the process-wide registry
        """
        self.session_factory = session_factory
        self.config = config or MatchingConfig()
        self.scorer = ScoringService(self.config.scorer)
        self.locks = locks or subject_locks

    def recompute(self, subject_id: int, now: Optional[datetime] = None) -> List[ScoredCandidate]:
        """
        Rebuild the subject's candidate set from scratch.

        An unknown or inactive subject ends with an empty set. On any failure
        the transaction rolls back and the previous set stays in place.

        Returns:
            The stored candidates in display order

        Raises:
            StoreUnavailable: database error; nothing was written
        """
        now = now or utcnow()
        start = time.monotonic()

        with self.locks.hold(subject_id):
            try:
                with match_uow(self.session_factory) as repos:
                    if repos.organizations.lock_for_update(subject_id) is None:
                        logger.warning(f"Recompute skipped: organization {subject_id} not found")
                        return []

                    subject = repos.organizations.get_snapshot(subject_id)
                    if derive_status(subject, now) != STATUS_ACTIVE:
                        repos.candidates.replace_for_subject(subject_id, [])
                        logger.info(f"Subject {subject_id} is inactive; candidate set cleared")
                        return []

                    excluded = (
                        repos.connections.connected_ids(subject_id)
                        | repos.dismissals.dismissed_ids(subject_id)
                    )
                    population = repos.organizations.list_active_by_role(opposite_role(subject.role))

                    staged = self.scorer.score_candidates(subject, population, excluded, now)
                    repos.candidates.replace_for_subject(subject_id, staged)
            except DBAPIError as e:
                logger.error(f"Recompute failed for subject {subject_id}: {e}", exc_info=True)
                raise StoreUnavailable(f"Could not recompute matches for {subject_id}") from e

        logger.info(
            f"Recomputed subject {subject_id}: {len(staged)} candidates "
            f"from {len(population)} organizations in {time.monotonic() - start:.3f}s"
        )
        return staged

    def list_candidates(self, subject_id: int) -> List[CandidateSummaryDTO]:
        """Stored candidates by score desc, then candidate id asc. Never recomputes."""
        try:
            with match_uow(self.session_factory) as repos:
                rows = repos.candidates.list_for_subject(subject_id)
                summaries = repos.organizations.get_summaries(row.candidate_id for row in rows)

                results = []
                for row in rows:
                    info = summaries.get(row.candidate_id, {})
                    results.append(CandidateSummaryDTO(
                        candidate_id=row.candidate_id,
                        score=_float(row.score),
                        organization_name=info.get('organization_name', ''),
                        email=info.get('email', ''),
                        profile_picture_url=info.get('profile_picture_url'),
                        components={
                            'sector': _float(row.sector_score),
                            'target_group': _float(row.target_group_score),
                            'budget': _float(row.budget_score),
                            'timeline': _float(row.timeline_score),
                            'stage': _float(row.stage_score),
                        },
                        computed_at=row.computed_at,
                    ))
                return results
        except DBAPIError as e:
            logger.error(f"Listing candidates failed for subject {subject_id}: {e}", exc_info=True)
            raise StoreUnavailable(f"Could not read matches for {subject_id}") from e

    def dismiss(self, subject_id: int, candidate_id: int) -> bool:
        """
        Permanently exclude `candidate_id` from the subject's set.

        Returns:
            True if a dismissal was recorded, False if it already existed

        Raises:
            OrganizationNotFound: unknown subject
            CandidateNotFound: candidate neither in the set nor already dismissed
        """
        with self.locks.hold(subject_id):
            try:
                with match_uow(self.session_factory) as repos:
                    if repos.organizations.lock_for_update(subject_id) is None:
                        raise OrganizationNotFound(f"Organization {subject_id} not found")

                    if repos.dismissals.is_dismissed(subject_id, candidate_id):
                        logger.info(f"Candidate {candidate_id} already dismissed by {subject_id}")
                        return False

                    if not repos.candidates.contains(subject_id, candidate_id):
                        raise CandidateNotFound(
                            f"Organization {candidate_id} is not a potential match for {subject_id}"
                        )

                    repos.dismissals.add(subject_id, candidate_id)
                    repos.candidates.remove(subject_id, candidate_id)
            except DBAPIError as e:
                logger.error(f"Dismiss {subject_id} -> {candidate_id} failed: {e}", exc_info=True)
                raise StoreUnavailable("Could not record dismissal") from e

        logger.info(f"Subject {subject_id} dismissed candidate {candidate_id}")
        return True

    def promote(self, subject_id: int, candidate_id: int) -> int:
        """Remove the pair from both candidate sets. Dismissals are untouched."""
        with self.locks.hold(subject_id, candidate_id):
            try:
                with match_uow(self.session_factory) as repos:
                    for org_id in sorted({subject_id, candidate_id}):
                        repos.organizations.lock_for_update(org_id)
                    removed = repos.candidates.remove_pair(subject_id, candidate_id)
            except DBAPIError as e:
                logger.error(f"Promote ({subject_id}, {candidate_id}) failed: {e}", exc_info=True)
                raise StoreUnavailable("Could not promote pair") from e

        logger.info(f"Promoted pair ({subject_id}, {candidate_id}): {removed} candidate rows removed")
        return removed

    def connect(self, initiator_id: int, target_id: int) -> ConnectionDTO:
        """
        Create a connection and drop the pair from both candidate sets atomically.

        Raises:
            InvalidConnection: self or same-role connection
            OrganizationNotFound: either party is unknown
            ConnectionExists: the pair is already connected in either direction
        """
        if initiator_id == target_id:
            raise InvalidConnection("Cannot connect an organization to itself")

        with self.locks.hold(initiator_id, target_id):
            try:
                with match_uow(self.session_factory) as repos:
                    locked = {
                        org_id: repos.organizations.lock_for_update(org_id)
                        for org_id in sorted((initiator_id, target_id))
                    }
                    initiator, target = locked[initiator_id], locked[target_id]
                    if initiator is None:
                        raise OrganizationNotFound(f"Organization {initiator_id} not found")
                    if target is None:
                        raise OrganizationNotFound(f"Organization {target_id} not found")
                    if initiator.role == target.role:
                        raise InvalidConnection(
                            f"Cannot connect two organizations with role {initiator.role!r}"
                        )
                    if repos.connections.is_connected(initiator_id, target_id):
                        raise ConnectionExists(
                            f"Organizations {initiator_id} and {target_id} are already connected"
                        )

                    connection = repos.connections.create(initiator_id, target_id)
                    repos.candidates.remove_pair(initiator_id, target_id)

                    summary = repos.organizations.get_summaries([target_id]).get(target_id, {})
                    result = ConnectionDTO(
                        id=connection.id,
                        initiator_id=initiator_id,
                        target_id=target_id,
                        other_id=target_id,
                        direction='following',
                        organization_name=summary.get('organization_name', ''),
                        profile_picture_url=summary.get('profile_picture_url'),
                        created_at=connection.created_at,
                    )
            except IntegrityError as e:
                raise ConnectionExists(
                    f"Organizations {initiator_id} and {target_id} are already connected"
                ) from e
            except DBAPIError as e:
                logger.error(f"Connection {initiator_id} -> {target_id} failed: {e}", exc_info=True)
                raise StoreUnavailable("Could not create connection") from e

        return result

    def list_connections(self, org_id: int) -> List[ConnectionDTO]:
        """Connections the organization is a party to, newest first."""
        try:
            with match_uow(self.session_factory) as repos:
                connections = repos.connections.list_for(org_id)
                others = {
                    c.target_id if c.initiator_id == org_id else c.initiator_id
                    for c in connections
                }
                summaries = repos.organizations.get_summaries(others)

                results = []
                for c in connections:
                    is_initiator = c.initiator_id == org_id
                    other_id = c.target_id if is_initiator else c.initiator_id
                    info = summaries.get(other_id, {})
                    results.append(ConnectionDTO(
                        id=c.id,
                        initiator_id=c.initiator_id,
                        target_id=c.target_id,
                        other_id=other_id,
                        direction='following' if is_initiator else 'follower',
                        organization_name=info.get('organization_name', ''),
                        profile_picture_url=info.get('profile_picture_url'),
                        created_at=c.created_at,
                    ))
                return results
        except DBAPIError as e:
            logger.error(f"Listing connections failed for {org_id}: {e}", exc_info=True)
            raise StoreUnavailable(f"Could not read connections for {org_id}") from e

    def disconnect(self, org_id: int, connection_id: int, now: Optional[datetime] = None) -> None:
        """
        Delete a connection the caller is a party to, then recompute both parties.

        Raises:
            ConnectionNotFound: no such connection for this organization
            StoreUnavailable: database error during the delete or the recomputes
        """
        try:
            with match_uow(self.session_factory) as repos:
                connection = repos.connections.get_for_party(connection_id, org_id)
                if connection is None:
                    raise ConnectionNotFound(f"Connection {connection_id} not found")
                parties = (connection.initiator_id, connection.target_id)
                repos.connections.delete(connection)
        except DBAPIError as e:
            logger.error(f"Disconnect of connection {connection_id} failed: {e}", exc_info=True)
            raise StoreUnavailable("Could not delete connection") from e

        # recompute wraps its own store errors
        for party_id in parties:
            self.recompute(party_id, now)

    def recompute_all(self, now: Optional[datetime] = None) -> RecomputeSummary:
        """
        Refresh stored statuses, then recompute every affected subject.

        Subjects are active organizations plus any that just became inactive,
        so their stale sets are cleared. A failing subject is logged and
        counted; it never aborts the batch.
        """
        now = now or utcnow()
        start = time.monotonic()
        summary = RecomputeSummary()

        with match_uow(self.session_factory) as repos:
            changed = repos.organizations.refresh_statuses(now)
        with match_uow(self.session_factory) as repos:
            subject_ids = sorted(set(repos.organizations.list_active_ids()) | set(changed))

        summary.statuses_changed = len(changed)
        logger.info(
            f"Bulk recompute: {len(subject_ids)} subjects, {len(changed)} status changes"
        )

        for subject_id in subject_ids:
            summary.attempted += 1
            try:
                staged = self._recompute_with_retry(subject_id, now)
                summary.succeeded += 1
                summary.candidates += len(staged)
            except Exception as e:
                summary.failed += 1
                summary.failed_ids.append(subject_id)
                logger.error(f"Bulk recompute failed for subject {subject_id}: {e}", exc_info=True)

        summary.duration_seconds = time.monotonic() - start
        logger.info(
            f"Bulk recompute finished: {summary.succeeded}/{summary.attempted} succeeded, "
            f"{summary.failed} failed, {summary.candidates} candidates in "
            f"{summary.duration_seconds:.2f}s"
        )
        return summary

    def _recompute_with_retry(self, subject_id: int, now: datetime) -> List[ScoredCandidate]:
        retrying = Retrying(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=wait_fixed(self.config.retry_wait_seconds),
            retry=retry_if_exception_type(StoreUnavailable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )
        for attempt in retrying:
            with attempt:
                return self.recompute(subject_id, now)
        return []
