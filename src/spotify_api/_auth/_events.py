import logging
from enum import Enum
from typing import Callable, Generic, List, Optional, TypeVar

from ._token_state import TokenState

logger = logging.getLogger("spotify_api.auth")

T = TypeVar("T")


class AuthorizationEventKind(str, Enum):
    """Transitions observers can be notified about."""

    DID_CHANGE = "did_change"
    DID_DEAUTHORIZE = "did_deauthorize"


class Signal(Generic[T]):
    """A minimal synchronous notification stream."""

    def __init__(self, kind: AuthorizationEventKind) -> None:
        self.kind = kind
        self._subscribers: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, value: T) -> None:
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                # a broken observer must not undo the state transition
                logger.exception(f"Subscriber of {self.kind.value} raised")


class AuthorizationEvents:
    """The two independent streams of an authorization manager.

    ``did_change`` fires with the new snapshot each time one is installed;
    ``did_deauthorize`` fires only on explicit deauthorization. A transition
    emits on exactly one of them.
    """

    def __init__(self) -> None:
        self.did_change: Signal[TokenState] = Signal(AuthorizationEventKind.DID_CHANGE)
        self.did_deauthorize: Signal[Optional[TokenState]] = Signal(
            AuthorizationEventKind.DID_DEAUTHORIZE
        )
