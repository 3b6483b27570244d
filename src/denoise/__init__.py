"""deNoise client: identity, profile sync and session boundaries."""

from .app import DenoiseApp
from .errors import (
    ApiError,
    AuthError,
    DenoiseError,
    ProfileNotFoundError,
    ProfileWriteError,
    SessionPurgeError,
)

__all__ = [
    "ApiError",
    "AuthError",
    "DenoiseApp",
    "DenoiseError",
    "ProfileNotFoundError",
    "ProfileWriteError",
    "SessionPurgeError",
]
