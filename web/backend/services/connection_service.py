#!/usr/bin/env python3
"""
Connection service - business logic for the connection ledger.
"""

import logging
from typing import List

from core.matcher import CandidateSetManager, ConnectionDTO
from ..models.responses import ConnectionSummary
from ..utils import safe_datetime_iso, safe_str

logger = logging.getLogger(__name__)


class ConnectionService:
    """Service for listing, creating and removing connections."""

    def __init__(self, manager: CandidateSetManager):
        self.manager = manager

    def list_connections(self, org_id: int) -> List[ConnectionSummary]:
        return [self._to_summary(c) for c in self.manager.list_connections(org_id)]

    def create_connection(self, initiator_id: int, target_id: int) -> ConnectionSummary:
        """
        Connect the caller with `target_id`.

        The pair leaves both candidate sets in the same transaction and is
        never scored again while connected.
        """
        connection = self.manager.connect(initiator_id, target_id)
        return self._to_summary(connection)

    def delete_connection(self, org_id: int, connection_id: int) -> None:
        self.manager.disconnect(org_id, connection_id)

    def _to_summary(self, connection: ConnectionDTO) -> ConnectionSummary:
        return ConnectionSummary(
            connection_id=connection.id,
            user_id=connection.other_id,
            organization_name=safe_str(connection.organization_name),
            profile_picture_url=connection.profile_picture_url,
            direction=connection.direction,
            created_at=safe_datetime_iso(connection.created_at),
        )
