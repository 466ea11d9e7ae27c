from .base import Base
from .organization import Organization, Profile, ProviderData, RecipientData
from .connection import Connection, Dismissal
from .match import CandidateScore

__all__ = [
    'Base',
    'Organization',
    'Profile',
    'ProviderData',
    'RecipientData',
    'Connection',
    'Dismissal',
    'CandidateScore',
]
