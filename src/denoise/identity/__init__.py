"""Identity derivation, persistence and the current-user signal."""

from .models import Identity
from .resolver import AuthResult, IdentityResolver, derive_id
from .storage import STORAGE_KEY, IdentityStorage

__all__ = [
    "AuthResult",
    "Identity",
    "IdentityResolver",
    "IdentityStorage",
    "STORAGE_KEY",
    "derive_id",
]
