#!/usr/bin/env python3
"""
Service-layer exceptions raised by the matching core.

The web layer maps each class to an HTTP status; see web/backend/exceptions.py.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class OrganizationNotFound(ServiceException):
    """Raised when an organization does not exist."""
    pass


class CandidateNotFound(ServiceException):
    """Raised when a candidate is not in the subject's current set."""
    pass


class ConnectionNotFound(ServiceException):
    """Raised when a connection does not exist or the caller is not a party to it."""
    pass


class InvalidConnection(ServiceException):
    """Raised for self-connections and same-role connections."""
    pass


class ConnectionExists(ServiceException):
    """Raised when the two organizations are already connected."""
    pass


class StoreUnavailable(ServiceException):
    """Raised when the database fails mid-operation. Safe to retry."""
    pass
