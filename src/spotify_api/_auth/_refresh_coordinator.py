import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..models.errors import AuthorizationError, AuthorizationErrorKind
from ._token_state import TokenState

logger = logging.getLogger("spotify_api.auth")


class RefreshCoordinator:
    """Collapses concurrent refresh attempts into one network call.

    The first caller that finds no pending refresh starts a task; every caller
    arriving while it runs awaits that same task and receives the identical
    result. The slot is emptied the moment the task finishes so the next
    expiry starts a fresh refresh.

    The check and the assignment of the pending slot happen without an
    ``await`` in between, which makes them a single step on the event loop.
    """

    def __init__(
        self,
        request: Callable[[], Awaitable[TokenState]],
        install: Callable[[TokenState], None],
    ) -> None:
        self._request = request
        self._install = install
        self._pending: Optional["asyncio.Task[TokenState]"] = None
        self._generation = 0

    @property
    def is_refreshing(self) -> bool:
        return self._pending is not None

    async def refresh(self) -> TokenState:
        if self._pending is None:
            logger.debug("Starting token refresh")
            self._pending = asyncio.ensure_future(self._run(self._generation))
            self._pending.add_done_callback(_retrieve_exception)
        else:
            logger.debug("Joining token refresh already in flight")

        # a cancelled waiter must not cancel the call the others share
        return await asyncio.shield(self._pending)

    def invalidate(self) -> None:
        """Discard the outcome of the refresh in flight, if any.

        Its waiters receive a NO_CREDENTIAL error; the next refresh starts anew.
        """
        self._generation += 1
        self._pending = None

    async def _run(self, generation: int) -> TokenState:
        try:
            # deauthorized before the task got to run
            self._check_generation(generation)
            state = await self._request()
            self._check_generation(generation)
            self._install(state)
            return state
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

    def _check_generation(self, generation: int) -> None:
        if generation != self._generation:
            logger.info("Discarding token refresh: deauthorized during refresh")
            raise AuthorizationError(
                AuthorizationErrorKind.NO_CREDENTIAL,
                "Deauthorized while the token was being refreshed.",
            )


def _retrieve_exception(task: "asyncio.Task[TokenState]") -> None:
    # every waiter may have been cancelled; mark the failure as seen
    if not task.cancelled():
        task.exception()
