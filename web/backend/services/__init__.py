"""Business logic services."""

from .match_service import MatchService
from .connection_service import ConnectionService
from .profile_service import ProfileService
