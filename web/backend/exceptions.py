#!/usr/bin/env python3
"""
Custom exceptions and error handlers for the web application.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import (
    ServiceException,
    OrganizationNotFound,
    CandidateNotFound,
    ConnectionNotFound,
    InvalidConnection,
    ConnectionExists,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

__all__ = [
    'ServiceException', 'OrganizationNotFound', 'CandidateNotFound',
    'ConnectionNotFound', 'InvalidConnection', 'ConnectionExists',
    'StoreUnavailable', 'status_code_for', 'service_exception_handler',
    'http_exception_handler', 'general_exception_handler',
]


def status_code_for(exc: ServiceException) -> int:
    if isinstance(exc, (OrganizationNotFound, CandidateNotFound, ConnectionNotFound)):
        return 404
    if isinstance(exc, InvalidConnection):
        return 400
    if isinstance(exc, ConnectionExists):
        return 409
    if isinstance(exc, StoreUnavailable):
        return 503
    return 500


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    headers = {"Retry-After": "1"} if isinstance(exc, StoreUnavailable) else None
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__
        },
        headers=headers
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.

    Args:
        request: The FastAPI request.
        exc: The HTTP exception.

    Returns:
        JSONResponse with error details.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        },
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: The FastAPI request.
        exc: The exception.

    Returns:
        JSONResponse with error details.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )
