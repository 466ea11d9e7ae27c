#!/usr/bin/env python3
"""
Tests for the bulk recompute driver.
"""

from unittest.mock import patch

import pytest

import main as driver
from core.config_loader import AppConfig
from core.matcher import CandidateSetManager
from tests import create_provider, create_recipient

pytestmark = pytest.mark.db


def test_once_runs_a_single_cycle(session_factory):
    provider_id = create_provider(session_factory, "fund@example.org")
    recipient_id = create_recipient(session_factory, "school@example.org")

    with patch.object(driver, 'load_config', return_value=AppConfig()), \
            patch.object(driver, 'create_session_factory', return_value=session_factory), \
            patch.object(driver, 'init_db') as init_db, \
            patch.object(driver.signal, 'signal'), \
            patch.object(driver.time, 'sleep') as sleep:
        driver.main(["--once"])

    init_db.assert_called_once()
    sleep.assert_not_called()

    manager = CandidateSetManager(session_factory)
    assert [c.candidate_id for c in manager.list_candidates(recipient_id)] == [provider_id]
    assert [c.candidate_id for c in manager.list_candidates(provider_id)] == [recipient_id]


def test_disabled_matching_does_nothing():
    config = AppConfig()
    config.matching.enabled = False

    with patch.object(driver, 'load_config', return_value=config), \
            patch.object(driver, 'create_session_factory') as create_factory, \
            patch.object(driver.signal, 'signal'):
        driver.main(["--once"])

    create_factory.assert_not_called()
