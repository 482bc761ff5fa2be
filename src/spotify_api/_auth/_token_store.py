import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import ValidationError

from ._authorization_manager import AuthorizationManager
from ._token_state import TokenState

logger = logging.getLogger("spotify_api.auth")


class FileTokenStore:
    """Keeps a JSON copy of a manager's token on disk.

    Once attached, every installed snapshot is written and deauthorization
    removes the file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        self._unsubscribers: List[Callable[[], None]] = []

    def load(self) -> Optional[TokenState]:
        if not self.path.exists():
            logger.debug(f"No token file at {self.path}")
            return None
        try:
            return TokenState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError:
            logger.warning(f"Ignoring unreadable token file {self.path}")
            return None

    def save(self, state: TokenState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # the file holds credentials, so it is never created readable by others
        fd = os.open(self.path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(state.model_dump_json(indent=2))

    def clear(self, _previous: Optional[TokenState] = None) -> None:
        self.path.unlink(missing_ok=True)

    def attach(self, manager: AuthorizationManager, *, restore: bool = True) -> None:
        """Restore the saved token into ``manager`` and follow its changes."""
        if restore:
            saved = self.load()
            if saved is not None:
                manager.restore(saved)

        self._unsubscribers.append(manager.events.did_change.subscribe(self.save))
        self._unsubscribers.append(manager.events.did_deauthorize.subscribe(self.clear))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
