import contextlib
import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from database.repositories import (
    CandidateRepository,
    ConnectionRepository,
    DismissalRepository,
    OrganizationRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class MatchRepositories:
    """Repositories sharing one Session, hence one transaction."""
    session: Session
    organizations: OrganizationRepository
    connections: ConnectionRepository
    dismissals: DismissalRepository
    candidates: CandidateRepository

    @classmethod
    def from_session(cls, session: Session) -> "MatchRepositories":
        return cls(
            session=session,
            organizations=OrganizationRepository(session),
            connections=ConnectionRepository(session),
            dismissals=DismissalRepository(session),
            candidates=CandidateRepository(session),
        )


@contextlib.contextmanager
def match_uow(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[MatchRepositories]:
    """Per-unit-of-work transaction scope.

    Yields MatchRepositories bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with match_uow() as repos:
            repos.organizations.lock_for_update(org_id)
            repos.candidates.replace_for_subject(org_id, candidates)
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    try:
        yield MatchRepositories.from_session(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
