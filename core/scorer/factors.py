#!/usr/bin/env python3
"""
Factor Calculations - The five per-factor scores behind the composite.

Every factor returns a float in [0, 100]. Factors take provider-side and
recipient-side inputs explicitly, so the composite is the same whichever
organization is the subject.

Missing inputs never raise: absent numbers score no credit, absent tag sets
are empty.
"""

from datetime import datetime
from decimal import Decimal
from typing import AbstractSet, Optional

from dateutil.relativedelta import relativedelta

from core.utils import ensure_utc, normalize_tag, to_decimal

# Recipient timeline bucket -> months from now the provider deadline may fall within
TIMELINE_HORIZON_MONTHS = {
    '1-3 months': 3,
    '3-6 months': 6,
    '6-12 months': 12,
    'short_term': 6,
    'medium_term': 12,
    'long_term': 24,
}

# (recipient project_stage, provider funding_type) -> stage fit
STAGE_FIT = {
    ('early stage', 'seed'): 100.0,
    ('growth stage', 'series a'): 100.0,
    ('mature stage', 'series b'): 100.0,
    ('early stage', 'pitch comp'): 80.0,
    ('growth stage', 'pitch comp'): 60.0,
    ('mature stage', 'pitch comp'): 40.0,
    # Adjacent stages
    ('early stage', 'series a'): 60.0,
    ('growth stage', 'seed'): 60.0,
    ('growth stage', 'series b'): 60.0,
    ('mature stage', 'series a'): 60.0,
}

_HUNDRED = Decimal(100)


def overlap_score(
    provider_tags: AbstractSet[str],
    recipient_tags: AbstractSet[str],
    basis: str = "max"
) -> float:
    """
    Set overlap scaled to 0-100.

    basis="max":      |P ∩ R| / max(|P|, |R|)
    basis="provider": |P ∩ R| / |P|

    0 if either set is empty.
    """
    if not provider_tags or not recipient_tags:
        return 0.0

    shared = len(provider_tags & recipient_tags)
    if basis == "provider":
        denominator = len(provider_tags)
    else:
        denominator = max(len(provider_tags), len(recipient_tags))

    return 100.0 * shared / denominator


def budget_score(amount_offered, budget_requested) -> float:
    """
    Funding fit: 100 when the offer covers the request, otherwise the covered share.

    A zero or missing request carries no information and earns no credit.
    """
    budget = to_decimal(budget_requested)
    if budget is None or budget <= 0:
        return 0.0

    amount = to_decimal(amount_offered) or Decimal(0)
    if amount < 0:
        amount = Decimal(0)
    if amount >= budget:
        return 100.0

    return float(amount / budget * _HUNDRED)


def timeline_score(
    deadline: Optional[datetime],
    timeline: Optional[str],
    now: datetime
) -> float:
    """
    100 if the provider deadline is open or falls within the recipient's horizon.

    The window is [now, now + horizon]. An elapsed deadline or an unknown
    timeline bucket scores 0.
    """
    months = TIMELINE_HORIZON_MONTHS.get(normalize_tag(timeline))
    if months is None:
        return 0.0

    if deadline is None:
        return 100.0

    now = ensure_utc(now)
    deadline = ensure_utc(deadline)
    if now <= deadline <= now + relativedelta(months=months):
        return 100.0
    return 0.0


def stage_score(
    project_stage: Optional[str],
    funding_type: Optional[str],
    baseline: float = 20.0
) -> float:
    """Lookup-table stage fit; unlisted pairings fall back to a non-zero baseline."""
    key = (normalize_tag(project_stage), normalize_tag(funding_type))
    return STAGE_FIT.get(key, baseline)
