"""API route handlers."""

from .matches import router as matches_router
from .connections import router as connections_router
from .profiles import router as profiles_router
from .status import router as status_router
