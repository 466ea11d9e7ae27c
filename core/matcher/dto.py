"""Data Transfer Objects for the candidate set manager.

DTOs carry data out of the Unit of Work, so callers never hold ORM objects
after the session is closed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class CandidateSummaryDTO:
    """A stored candidate with the display fields the listing needs."""
    candidate_id: int
    score: float
    organization_name: str = ""
    email: str = ""
    profile_picture_url: Optional[str] = None
    components: Dict[str, float] = field(default_factory=dict)
    computed_at: Optional[datetime] = None


@dataclass
class ConnectionDTO:
    """A connection as seen by one of its parties."""
    id: int
    initiator_id: int
    target_id: int
    other_id: int
    direction: str
    organization_name: str = ""
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class RecomputeSummary:
    """Outcome of a bulk recompute run."""
    statuses_changed: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    candidates: int = 0
    failed_ids: List[int] = field(default_factory=list)
    duration_seconds: float = 0.0
