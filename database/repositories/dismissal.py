from typing import Any, Set

from sqlalchemy import select

from database.models import Dismissal
from database.repositories.base import BaseRepository


class DismissalRepository(BaseRepository):
    """Dismissal Set access. Rows are only ever added."""

    def is_dismissed(self, subject_id: Any, candidate_id: Any) -> bool:
        return self.db.get(Dismissal, (subject_id, candidate_id)) is not None

    def dismissed_ids(self, subject_id: Any) -> Set[int]:
        stmt = select(Dismissal.candidate_id).where(Dismissal.subject_id == subject_id)
        return set(self.db.execute(stmt).scalars().all())

    def add(self, subject_id: Any, candidate_id: Any) -> bool:
        """Record a dismissal. Returns False if it was already recorded."""
        if self.is_dismissed(subject_id, candidate_id):
            return False
        self.db.add(Dismissal(subject_id=subject_id, candidate_id=candidate_id))
        self.db.flush()
        return True
