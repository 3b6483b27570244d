"""Reconciles the remote profile record with the local identity."""

import logging
from dataclasses import dataclass

from ..api import DenoiseClient, ProfileRecord
from ..errors import ApiError, ProfileNotFoundError, ProfileWriteError
from ..logging import get_logger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileValues:
    display_name: str = ""
    system_instructions: str = ""


class ProfileReconciler:
    """Reads and writes the per-user profile record.

    The remote record is last-writer-wins: after every reconcile the
    record holds exactly the values the client last observed.
    """

    def __init__(self, api: DenoiseClient) -> None:
        self.api = api

    async def read(self, user_id: str) -> ProfileValues:
        """Best-effort read; absence and failures both yield empty values."""
        try:
            remote = await self.api.get_user_instructions(user_id)
        except ProfileNotFoundError:
            logger.debug("No remote profile for %s, treating as new user", user_id)
            return ProfileValues()
        except ApiError as e:
            logger.warning("Profile read failed for %s: %s. Using defaults.", user_id, e)
            return ProfileValues()

        return ProfileValues(
            display_name=remote.display_name,
            system_instructions=remote.instructions,
        )

    async def reconcile(self, user_id: str, email: str) -> ProfileValues:
        """Read the remote profile, then write it back in canonical form.

        Raises:
            ProfileWriteError: The write was rejected by the server. Network
                failures on the write are logged and do not raise.
        """
        values = await self.read(user_id)
        record = ProfileRecord(
            user_id=user_id,
            email=email,
            display_name=values.display_name,
            system_instructions=values.system_instructions,
        )

        try:
            await self.api.sync_user_profile(record)
        except ProfileWriteError as e:
            if not e.transient:
                raise
            logger.warning("Profile write for %s skipped, API unreachable: %s", user_id, e)
            get_logger().log("profile_reconciled", user_id=user_id, synced=False, error=str(e))
        else:
            get_logger().log("profile_reconciled", user_id=user_id, synced=True)

        return values

    async def update_profile(
        self,
        user_id: str,
        email: str,
        display_name: str,
        system_instructions: str,
    ) -> None:
        """Overwrite the remote record with the full set of fields."""
        record = ProfileRecord(
            user_id=user_id,
            email=email,
            display_name=display_name,
            system_instructions=system_instructions,
        )
        try:
            await self.api.sync_user_profile(record)
        except ProfileWriteError as e:
            get_logger().log("profile_save_failed", user_id=user_id, error=str(e))
            raise
        get_logger().log("profile_saved", user_id=user_id)
