#!/usr/bin/env python3
"""
Test suite for CandidateSetManager against an in-memory database.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from dateutil.relativedelta import relativedelta
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from core.config_loader import MatchingConfig
from core.exceptions import (
    CandidateNotFound,
    ConnectionExists,
    ConnectionNotFound,
    InvalidConnection,
    OrganizationNotFound,
    StoreUnavailable,
)
from core.matcher import CandidateSetManager, SubjectLockRegistry
from core.utils import utcnow
from database.models import Dismissal, Organization
from database.repositories import CandidateRepository, OrganizationRepository
from tests import create_provider, create_recipient

pytestmark = pytest.mark.db


@pytest.fixture
def manager(session_factory):
    config = MatchingConfig(retry_wait_seconds=0)
    return CandidateSetManager(session_factory, config, SubjectLockRegistry())


@pytest.fixture
def pair(session_factory):
    provider_id = create_provider(
        session_factory, "fund@example.org", sectors=["Education", "Health"], target_groups=["Youth"]
    )
    recipient_id = create_recipient(
        session_factory, "school@example.org", sectors=["education"], target_groups=["youth"]
    )
    return provider_id, recipient_id


def _ids(manager, subject_id):
    return [c.candidate_id for c in manager.list_candidates(subject_id)]


def _dismissal_count(session_factory):
    session = session_factory()
    try:
        return session.execute(select(func.count()).select_from(Dismissal)).scalar_one()
    finally:
        session.close()


class TestRecompute:

    def test_scenario_pair_is_stored_with_breakdown(self, manager, pair):
        provider_id, recipient_id = pair

        staged = manager.recompute(recipient_id)

        assert [c.candidate_id for c in staged] == [provider_id]
        assert staged[0].score == 85.0

        listed = manager.list_candidates(recipient_id)
        assert len(listed) == 1
        assert listed[0].candidate_id == provider_id
        assert listed[0].score == 85.0
        assert listed[0].organization_name == "fund"
        assert listed[0].email == "fund@example.org"
        assert listed[0].components == {
            'sector': 50.0, 'target_group': 100.0, 'budget': 100.0, 'timeline': 100.0, 'stage': 100.0
        }

    def test_score_matches_from_both_sides(self, manager, pair):
        provider_id, recipient_id = pair

        from_recipient = manager.recompute(recipient_id)
        from_provider = manager.recompute(provider_id)

        assert [c.candidate_id for c in from_provider] == [recipient_id]
        assert from_provider[0].score == from_recipient[0].score

    def test_unknown_subject_returns_empty(self, manager):
        assert manager.recompute(999) == []
        assert manager.list_candidates(999) == []

    def test_list_is_ordered_by_score_then_id(self, manager, session_factory):
        weaker_a = create_provider(session_factory, "a@example.org", sectors=["education", "arts"])
        weaker_b = create_provider(session_factory, "b@example.org", sectors=["education", "arts"])
        stronger = create_provider(session_factory, "c@example.org", sectors=["education"])
        recipient_id = create_recipient(session_factory, "r@example.org")

        manager.recompute(recipient_id)

        assert _ids(manager, recipient_id) == [stronger, weaker_a, weaker_b]

    def test_replace_drops_stale_candidates(self, manager, session_factory, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)

        session = session_factory()
        try:
            repo = OrganizationRepository(session)
            repo.update_profile(repo.get_by_id(provider_id), {'sectors': ['arts'], 'target_groups': ['seniors']})
            session.commit()
        finally:
            session.close()

        assert manager.recompute(recipient_id) == []
        assert _ids(manager, recipient_id) == []

    def test_inactive_subject_set_is_cleared(self, manager, session_factory, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)
        assert _ids(manager, recipient_id) == [provider_id]

        session = session_factory()
        try:
            repo = OrganizationRepository(session)
            org = repo.get_by_id(recipient_id)
            repo.update_profile(org, {'zip_code': None})
            session.commit()
            assert org.status == "inactive"
        finally:
            session.close()

        assert manager.recompute(recipient_id) == []
        assert _ids(manager, recipient_id) == []

    def test_incomplete_recipient_never_appears(self, manager, session_factory):
        provider_id = create_provider(session_factory, "fund@example.org")
        create_recipient(session_factory, "draft@example.org", complete=False)

        assert manager.recompute(provider_id) == []

    def test_elapsed_deadline_excluded_before_status_refresh(self, manager, session_factory):
        provider_id = create_provider(
            session_factory, "closing@example.org", deadline=utcnow() + timedelta(days=1)
        )
        recipient_id = create_recipient(session_factory, "r@example.org", timeline="1-3 months")
        assert [c.candidate_id for c in manager.recompute(recipient_id)] == [provider_id]

        later = utcnow() + timedelta(days=2)
        assert manager.recompute(recipient_id, now=later) == []

    def test_failed_recompute_keeps_previous_set(self, manager, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)

        original = CandidateRepository.replace_for_subject

        def failing(self, subject_id, candidates):
            original(self, subject_id, [])
            raise OperationalError("INSERT INTO candidate_scores", {}, Exception("disk I/O error"))

        with patch.object(CandidateRepository, 'replace_for_subject', failing):
            with pytest.raises(StoreUnavailable):
                manager.recompute(recipient_id)

        assert _ids(manager, recipient_id) == [provider_id]

    def test_scoring_error_keeps_previous_set(self, manager, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)

        with patch.object(manager.scorer, 'score_candidates', side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                manager.recompute(recipient_id)

        assert _ids(manager, recipient_id) == [provider_id]


class TestDismiss:

    def test_dismissed_candidate_never_returns(self, manager, pair, session_factory):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)

        assert manager.dismiss(recipient_id, provider_id) is True
        assert _ids(manager, recipient_id) == []

        manager.recompute(recipient_id)
        assert _ids(manager, recipient_id) == []
        assert _dismissal_count(session_factory) == 1

    def test_dismiss_is_idempotent(self, manager, pair, session_factory):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)

        assert manager.dismiss(recipient_id, provider_id) is True
        assert manager.dismiss(recipient_id, provider_id) is False
        assert _dismissal_count(session_factory) == 1

    def test_dismiss_only_affects_subject(self, manager, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)
        manager.recompute(provider_id)

        manager.dismiss(recipient_id, provider_id)

        assert _ids(manager, provider_id) == [recipient_id]

    def test_dismiss_absent_candidate_raises_without_writing(self, manager, pair, session_factory):
        provider_id, recipient_id = pair

        with pytest.raises(CandidateNotFound):
            manager.dismiss(recipient_id, provider_id)
        assert _dismissal_count(session_factory) == 0

    def test_dismiss_unknown_subject(self, manager):
        with pytest.raises(OrganizationNotFound):
            manager.dismiss(999, 1)


class TestConnections:

    def test_connect_removes_pair_from_both_sets(self, manager, pair):
        provider_id, recipient_id = pair
        manager.recompute(recipient_id)
        manager.recompute(provider_id)

        connection = manager.connect(recipient_id, provider_id)

        assert connection.direction == "following"
        assert connection.other_id == provider_id
        assert connection.organization_name == "fund"
        assert _ids(manager, recipient_id) == []
        assert _ids(manager, provider_id) == []

        manager.recompute(recipient_id)
        manager.recompute(provider_id)
        assert _ids(manager, recipient_id) == []
        assert _ids(manager, provider_id) == []

    def test_connect_rejects_self_and_same_role(self, manager, session_factory, pair):
        provider_id, recipient_id = pair
        other_recipient = create_recipient(session_factory, "other@example.org")

        with pytest.raises(InvalidConnection):
            manager.connect(recipient_id, recipient_id)
        with pytest.raises(InvalidConnection):
            manager.connect(recipient_id, other_recipient)

    def test_connect_unknown_target(self, manager, pair):
        _, recipient_id = pair
        with pytest.raises(OrganizationNotFound):
            manager.connect(recipient_id, 999)

    def test_duplicate_connection_in_either_direction(self, manager, pair):
        provider_id, recipient_id = pair
        manager.connect(recipient_id, provider_id)

        with pytest.raises(ConnectionExists):
            manager.connect(recipient_id, provider_id)
        with pytest.raises(ConnectionExists):
            manager.connect(provider_id, recipient_id)

    def test_list_connections_labels_direction(self, manager, pair):
        provider_id, recipient_id = pair
        manager.connect(recipient_id, provider_id)

        [as_initiator] = manager.list_connections(recipient_id)
        [as_target] = manager.list_connections(provider_id)

        assert as_initiator.direction == "following"
        assert as_initiator.other_id == provider_id
        assert as_target.direction == "follower"
        assert as_target.other_id == recipient_id
        assert as_target.organization_name == "school"

    def test_disconnect_restores_candidates(self, manager, pair):
        provider_id, recipient_id = pair
        connection = manager.connect(recipient_id, provider_id)

        manager.disconnect(provider_id, connection.id)

        assert manager.list_connections(recipient_id) == []
        assert _ids(manager, recipient_id) == [provider_id]
        assert _ids(manager, provider_id) == [recipient_id]

    def test_disconnect_requires_party(self, manager, session_factory, pair):
        provider_id, recipient_id = pair
        connection = manager.connect(recipient_id, provider_id)
        outsider = create_recipient(session_factory, "outsider@example.org")

        with pytest.raises(ConnectionNotFound):
            manager.disconnect(outsider, connection.id)
        with pytest.raises(ConnectionNotFound):
            manager.disconnect(recipient_id, connection.id + 100)

    def test_promote_leaves_dismissals(self, manager, session_factory, pair):
        provider_id, recipient_id = pair
        second = create_provider(session_factory, "second@example.org", sectors=["education"])
        manager.recompute(recipient_id)
        manager.recompute(provider_id)
        manager.dismiss(recipient_id, second)

        removed = manager.promote(recipient_id, provider_id)

        assert removed == 2
        assert _ids(manager, recipient_id) == []
        assert _ids(manager, provider_id) == []
        assert _dismissal_count(session_factory) == 1
        assert manager.promote(recipient_id, provider_id) == 0


class TestRecomputeAll:

    def test_refreshes_statuses_and_recomputes(self, manager, session_factory):
        open_fund = create_provider(session_factory, "open@example.org")
        closing_fund = create_provider(
            session_factory, "closing@example.org", deadline=utcnow() + timedelta(days=1)
        )
        recipient_id = create_recipient(session_factory, "r@example.org", timeline="1-3 months")
        manager.recompute(closing_fund)
        assert _ids(manager, closing_fund) == [recipient_id]

        summary = manager.recompute_all(now=utcnow() + timedelta(days=2))

        assert summary.statuses_changed == 1
        assert summary.attempted == 3
        assert summary.succeeded == 3
        assert summary.failed == 0
        assert _ids(manager, recipient_id) == [open_fund]
        assert _ids(manager, closing_fund) == []

        session = session_factory()
        try:
            assert session.get(Organization, closing_fund).status == "inactive"
        finally:
            session.close()

    def test_failure_for_one_subject_does_not_abort(self, manager, pair):
        provider_id, recipient_id = pair
        original = manager.recompute

        def flaky(subject_id, now=None):
            if subject_id == provider_id:
                raise RuntimeError("scoring failed")
            return original(subject_id, now)

        with patch.object(manager, 'recompute', side_effect=flaky):
            summary = manager.recompute_all()

        assert summary.failed == 1
        assert summary.failed_ids == [provider_id]
        assert summary.succeeded == 1
        assert _ids(manager, recipient_id) == [provider_id]

    def test_transient_store_errors_are_retried(self, manager, pair):
        provider_id, recipient_id = pair
        original = manager.recompute
        calls = []

        def transient(subject_id, now=None):
            calls.append(subject_id)
            if calls.count(subject_id) == 1:
                raise StoreUnavailable("connection reset")
            return original(subject_id, now)

        with patch.object(manager, 'recompute', side_effect=transient):
            summary = manager.recompute_all()

        assert summary.failed == 0
        assert summary.succeeded == 2
        assert calls.count(recipient_id) == 2


class TestFundingScenario:
    """Seed fund with a two-month deadline against a short-term education project."""

    @pytest.fixture
    def scenario(self, session_factory):
        provider_id = create_provider(
            session_factory,
            "fund@example.org",
            sectors=["Education"],
            target_groups=["Youth"],
            amount_offered=Decimal("50000"),
            deadline=utcnow() + relativedelta(months=2),
        )
        recipient_id = create_recipient(
            session_factory,
            "school@example.org",
            sectors=["Education", "Health"],
            target_groups=["Youth"],
            budget_requested=Decimal("40000"),
            timeline="short_term",
            project_stage="Early Stage",
        )
        return provider_id, recipient_id

    def test_pair_is_included_both_ways(self, manager, scenario):
        provider_id, recipient_id = scenario

        [candidate] = manager.recompute(provider_id)
        assert candidate.candidate_id == recipient_id
        assert candidate.score == 85.0
        assert candidate.breakdown.budget_score == 100.0
        assert candidate.breakdown.timeline_score == 100.0

        assert [c.candidate_id for c in manager.recompute(recipient_id)] == [provider_id]

    def test_dismissed_candidate_stays_out_of_listing(self, manager, scenario):
        provider_id, recipient_id = scenario
        manager.recompute(provider_id)

        assert manager.dismiss(provider_id, recipient_id) is True

        assert manager.recompute(provider_id) == []
        assert _ids(manager, provider_id) == []
        assert [c.candidate_id for c in manager.recompute(recipient_id)] == [provider_id]
