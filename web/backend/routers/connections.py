#!/usr/bin/env python3
"""
Connection endpoints - list, create and remove connections.
"""

import logging
from fastapi import APIRouter, Depends, Response, status

from core.matcher import CandidateSetManager
from ..dependencies import get_candidate_manager, get_current_subject
from ..services.connection_service import ConnectionService
from ..models.requests import ConnectionCreate
from ..models.responses import ConnectionsResponse, ConnectionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/connections", tags=["connections"])


def get_connection_service(
    manager: CandidateSetManager = Depends(get_candidate_manager)
) -> ConnectionService:
    return ConnectionService(manager)


@router.get("", response_model=ConnectionsResponse)
def list_connections(
    subject_id: int = Depends(get_current_subject),
    service: ConnectionService = Depends(get_connection_service)
):
    """List the caller's connections, both initiated and received."""
    connections = service.list_connections(subject_id)
    return ConnectionsResponse(
        success=True,
        count=len(connections),
        connections=connections
    )


@router.post("", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED)
def create_connection(
    request: ConnectionCreate,
    subject_id: int = Depends(get_current_subject),
    service: ConnectionService = Depends(get_connection_service)
):
    """Connect with another organization of the opposite role."""
    connection = service.create_connection(subject_id, request.target_id)
    return ConnectionResponse(success=True, connection=connection)


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_connection(
    connection_id: int,
    subject_id: int = Depends(get_current_subject),
    service: ConnectionService = Depends(get_connection_service)
):
    """Remove a connection the caller is a party to."""
    service.delete_connection(subject_id, connection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
