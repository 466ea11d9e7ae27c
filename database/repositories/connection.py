import logging
from typing import Any, List, Optional, Set

from sqlalchemy import select, or_, and_

from database.models import Connection
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ConnectionRepository(BaseRepository):
    """Connection Ledger access. A connection is visible from both parties."""

    def _pair_clause(self, a: Any, b: Any):
        return or_(
            and_(Connection.initiator_id == a, Connection.target_id == b),
            and_(Connection.initiator_id == b, Connection.target_id == a),
        )

    def is_connected(self, a: Any, b: Any) -> bool:
        stmt = select(Connection.id).where(self._pair_clause(a, b)).limit(1)
        return self.db.execute(stmt).scalar_one_or_none() is not None

    def connected_ids(self, org_id: Any) -> Set[int]:
        """Ids of every organization connected to `org_id`, in either direction."""
        stmt = select(Connection.initiator_id, Connection.target_id).where(
            or_(Connection.initiator_id == org_id, Connection.target_id == org_id)
        )
        return {
            target if initiator == org_id else initiator
            for initiator, target in self.db.execute(stmt).all()
        }

    def list_for(self, org_id: Any) -> List[Connection]:
        stmt = select(Connection).where(
            or_(Connection.initiator_id == org_id, Connection.target_id == org_id)
        ).order_by(Connection.created_at.desc(), Connection.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_for_party(self, connection_id: Any, org_id: Any) -> Optional[Connection]:
        stmt = select(Connection).where(
            Connection.id == connection_id,
            or_(Connection.initiator_id == org_id, Connection.target_id == org_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, initiator_id: Any, target_id: Any) -> Connection:
        connection = Connection(initiator_id=initiator_id, target_id=target_id)
        self.db.add(connection)
        self.db.flush()
        logger.info(f"Connection {connection.id} created: {initiator_id} -> {target_id}")
        return connection

    def delete(self, connection: Connection) -> None:
        self.db.delete(connection)
        self.db.flush()
        logger.info(
            f"Connection {connection.id} removed: {connection.initiator_id} -> {connection.target_id}"
        )
