"""API routers for leaveflow."""

from . import approvals
from . import health
from . import users

__all__ = [
    "approvals",
    "health",
    "users",
]
