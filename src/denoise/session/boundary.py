"""Session boundary detection.

Watches the stream of current-identity values and, on every edge
(sign-in, sign-out, switch of user), clears the local transient state
and purges the server-side conversation memory of the affected user.
Repeated observations of the same identity are not edges.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from ..identity import Identity
from ..logging import get_logger
from .state import GlobalState

logger = logging.getLogger(__name__)

PurgeFn = Callable[[str], Awaitable[Any]]


class TransitionKind(Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    SWITCH = "switch"


@dataclass(frozen=True)
class Transition:
    kind: TransitionKind
    previous_id: str | None
    current_id: str | None

    @property
    def purge_id(self) -> str:
        """The user whose remote memory is cleared: the departing one on
        sign-out, otherwise the arriving one."""
        if self.kind is TransitionKind.DEPARTURE:
            assert self.previous_id is not None
            return self.previous_id
        assert self.current_id is not None
        return self.current_id


def classify(previous_id: str | None, current_id: str | None) -> Transition | None:
    """Map a (previous, current) pair to a transition, or None for no edge."""
    if previous_id == current_id:
        return None
    if current_id is None:
        kind = TransitionKind.DEPARTURE
    elif previous_id is None:
        kind = TransitionKind.ARRIVAL
    else:
        kind = TransitionKind.SWITCH
    return Transition(kind=kind, previous_id=previous_id, current_id=current_id)


class SessionBoundaryController:
    """Edge-triggered reset of local and remote session state.

    ``observe`` must be called from within a running event loop. The
    state reset finishes before it returns; the remote purge runs as a
    detached task bound to the id captured at the transition, and its
    failure is only logged.
    """

    def __init__(
        self,
        purge: PurgeFn,
        state: GlobalState,
        previous_id: str | None = None,
    ) -> None:
        self._purge = purge
        self.state = state
        self._previous_id = previous_id
        self._generation = 0
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def previous_id(self) -> str | None:
        return self._previous_id

    @property
    def generation(self) -> int:
        """Incremented on every transition, including a re-login as the same user."""
        return self._generation

    @property
    def pending(self) -> int:
        """Number of purge calls still in flight."""
        return len(self._pending)

    def observe(self, identity: Identity | str | None) -> Transition | None:
        current_id = identity.id if isinstance(identity, Identity) else identity
        transition = classify(self._previous_id, current_id)
        self._previous_id = current_id

        if transition is None:
            return None

        self._generation += 1
        self.state.reset()
        get_logger().log_boundary(
            transition.kind.value,
            previous_id=transition.previous_id,
            current_id=transition.current_id,
            generation=self._generation,
        )
        self._spawn_purge(transition.purge_id)
        return transition

    def _spawn_purge(self, user_id: str) -> None:
        task = asyncio.get_running_loop().create_task(self._run_purge(user_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_purge(self, user_id: str) -> None:
        start = time.monotonic()
        try:
            await self._purge(user_id)
        except Exception as e:
            logger.warning("Session purge for %s failed: %s", user_id, e)
            get_logger().log_purge(
                user_id,
                False,
                duration_ms=(time.monotonic() - start) * 1000,
                error=str(e),
            )
        else:
            get_logger().log_purge(
                user_id, True, duration_ms=(time.monotonic() - start) * 1000
            )

    async def wait_pending(self) -> None:
        """Wait for every purge issued so far to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
