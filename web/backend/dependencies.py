#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import logging
from functools import lru_cache
from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.config_loader import AuthConfig, MatchingConfig
from core.matcher import CandidateSetManager
from .config import get_config

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, url: Optional[str] = None):
        config = get_config()
        self.engine = create_engine(
            url or config.database.url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=20
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


@lru_cache()
def get_db_manager() -> DatabaseManager:
    """Process-wide database manager, created on first use."""
    return DatabaseManager()


def get_session_factory() -> sessionmaker:
    """Session constructor for services that own their transactions."""
    return get_db_manager().SessionLocal


def get_db(
    session_factory: sessionmaker = Depends(get_session_factory)
) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...

    Yields:
        Session: Database session that will be automatically closed.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_matching_config() -> MatchingConfig:
    return get_config().matching


def get_auth_config() -> AuthConfig:
    return get_config().auth


def get_candidate_manager(
    session_factory: sessionmaker = Depends(get_session_factory),
    config: MatchingConfig = Depends(get_matching_config)
) -> CandidateSetManager:
    return CandidateSetManager(session_factory=session_factory, config=config)


def decode_subject_id(token: str, auth: AuthConfig) -> int:
    """Decode a bearer token and return the organization id it was issued for."""
    if not auth.secret_key:
        raise JWTError("No JWT secret key configured")

    payload = jwt.decode(token, auth.secret_key, algorithms=[auth.algorithm])
    subject = payload.get("user_id", payload.get("sub"))
    if subject is None:
        raise JWTError("Token missing subject")

    try:
        return int(subject)
    except (TypeError, ValueError):
        raise JWTError(f"Invalid subject in token: {subject!r}")


def get_current_subject(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthConfig = Depends(get_auth_config)
) -> int:
    """
    Resolve the authenticated organization id from the bearer token.

    Raises HTTPException 401 if not authenticated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        return decode_subject_id(credentials.credentials, auth)
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise credentials_exception
