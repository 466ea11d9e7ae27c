from database.repositories.base import BaseRepository
from database.repositories.organization import OrganizationRepository
from database.repositories.connection import ConnectionRepository
from database.repositories.dismissal import DismissalRepository
from database.repositories.candidate import CandidateRepository

__all__ = [
    'BaseRepository',
    'OrganizationRepository',
    'ConnectionRepository',
    'DismissalRepository',
    'CandidateRepository',
]
