"""Identity resolution and the current-user signal."""

from __future__ import annotations

import base64
import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from ..errors import AuthError, DenoiseError
from ..logging import get_logger
from .models import Identity
from .storage import IdentityStorage

if TYPE_CHECKING:
    from ..profile import ProfileReconciler

logger = logging.getLogger(__name__)

ID_MAX_LENGTH = 20
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

IdentityListener = Callable[[Identity | None], None]


def derive_id(email: str) -> str:
    """Derive the user id from an email address.

    The id is the Base64 encoding of the email with everything but ASCII
    letters and digits removed, cut to 20 characters. It is deterministic
    and URL safe, but reversible and prone to collisions between emails
    sharing a long prefix.

    Raises:
        AuthError: The email is empty or has characters outside Latin-1.
    """
    try:
        raw = email.encode("latin-1")
    except UnicodeEncodeError as e:
        raise AuthError(f"Cannot derive an id from {email!r}: {e.reason}") from e

    user_id = _NON_ALNUM.sub("", base64.b64encode(raw).decode("ascii"))[:ID_MAX_LENGTH]
    if not user_id:
        raise AuthError("Email must not be empty")
    return user_id


@dataclass(frozen=True)
class AuthResult:
    """Outcome of sign_in/sign_up; exactly one of the fields is set."""

    identity: Identity | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IdentityResolver:
    """Owns the current identity and publishes every change of it.

    Listeners are called synchronously, in subscription order, with the
    new current identity (or None) after each load, authenticate, profile
    update and sign-out.
    """

    def __init__(
        self,
        reconciler: ProfileReconciler,
        storage: IdentityStorage | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.storage = storage or IdentityStorage()
        self._current: Identity | None = None
        self._loading = True
        self._listeners: list[IdentityListener] = []

    @property
    def loading(self) -> bool:
        """True until load() has determined whether a user is signed in."""
        return self._loading

    def current(self) -> Identity | None:
        return self._current

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        current = self._current
        for listener in list(self._listeners):
            listener(current)

    def load(self) -> Identity | None:
        """Restore the persisted identity. Called once at startup."""
        self._current = self.storage.load()
        self._loading = False
        get_logger().log("startup", user_id=self._current.id if self._current else None)
        self._publish()
        return self._current

    async def authenticate(self, email: str) -> Identity:
        """Resolve, reconcile and activate the identity for an email.

        Raises:
            AuthError: The id could not be derived or the profile could not
                be written. Local state is left untouched.
        """
        start = time.monotonic()
        user_id = derive_id(email)

        try:
            profile = await self.reconciler.reconcile(user_id, email)
        except DenoiseError as e:
            get_logger().log("auth_failed", user_id=user_id, error=str(e))
            raise AuthError(f"Could not sign in: {e}") from e

        identity = Identity(
            id=user_id,
            email=email,
            display_name=profile.display_name,
            system_instructions=profile.system_instructions,
        )

        try:
            self.storage.save(identity)
        except OSError as e:
            get_logger().log("auth_failed", user_id=user_id, error=str(e))
            raise AuthError(f"Could not store identity: {e}") from e

        self._current = identity
        get_logger().set_user_id(user_id)
        get_logger().log(
            "auth_success",
            user_id=user_id,
            duration_ms=(time.monotonic() - start) * 1000,
        )
        self._publish()
        return identity

    async def sign_in(self, email: str) -> AuthResult:
        try:
            return AuthResult(identity=await self.authenticate(email))
        except AuthError as e:
            logger.warning("Sign-in failed: %s", e)
            return AuthResult(error=e)

    async def sign_up(self, email: str) -> AuthResult:
        """Registration is the same as signing in; the profile upsert creates the user."""
        return await self.sign_in(email)

    def sign_out(self) -> None:
        if self._current is None:
            return

        user_id = self._current.id
        self._current = None
        try:
            self.storage.clear()
        finally:
            # Listeners must see the departure even if the file could not be removed
            get_logger().log("sign_out", user_id=user_id)
            get_logger().set_user_id(None)
            self._publish()

    def update_local(self, **fields: str) -> Identity | None:
        """Overwrite cached profile fields on the current identity and persist."""
        if self._current is None:
            return None

        self._current = self._current.with_profile(**fields)
        self.storage.save(self._current)
        self._publish()
        return self._current
