"""Exception hierarchy for the deNoise client."""


class DenoiseError(Exception):
    """Base class for all deNoise client errors."""


class AuthError(DenoiseError):
    """Identity derivation or the authenticate step failed."""


class ApiError(DenoiseError):
    """A call to the remote deNoise API failed.

    Attributes:
        status_code: HTTP status of the response, None for transport failures.
        transient: True when the failure was a network/timeout error rather
            than a response from the server.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class ProfileNotFoundError(ApiError):
    """The remote store has no profile for the requested user."""


class ProfileWriteError(ApiError):
    """Upserting the remote profile record failed."""


class SessionPurgeError(ApiError):
    """Clearing the remote conversation memory failed."""
