import logging
import re
from enum import Enum
from typing import FrozenSet, Iterable, Optional

logger = logging.getLogger("spotify_api")

_DELIMITERS = re.compile(r"[\s,]+")


class Scope(str, Enum):
    """Authorization scopes of the Spotify Web API."""

    UGC_IMAGE_UPLOAD = "ugc-image-upload"
    USER_READ_PLAYBACK_STATE = "user-read-playback-state"
    USER_MODIFY_PLAYBACK_STATE = "user-modify-playback-state"
    USER_READ_CURRENTLY_PLAYING = "user-read-currently-playing"
    APP_REMOTE_CONTROL = "app-remote-control"
    STREAMING = "streaming"
    PLAYLIST_READ_PRIVATE = "playlist-read-private"
    PLAYLIST_READ_COLLABORATIVE = "playlist-read-collaborative"
    PLAYLIST_MODIFY_PRIVATE = "playlist-modify-private"
    PLAYLIST_MODIFY_PUBLIC = "playlist-modify-public"
    USER_FOLLOW_MODIFY = "user-follow-modify"
    USER_FOLLOW_READ = "user-follow-read"
    USER_READ_PLAYBACK_POSITION = "user-read-playback-position"
    USER_TOP_READ = "user-top-read"
    USER_READ_RECENTLY_PLAYED = "user-read-recently-played"
    USER_LIBRARY_MODIFY = "user-library-modify"
    USER_LIBRARY_READ = "user-library-read"
    USER_READ_EMAIL = "user-read-email"
    USER_READ_PRIVATE = "user-read-private"

    @classmethod
    def make_string(cls, scopes: Iterable["Scope"]) -> str:
        """Space separated scope string as expected by the authorize endpoint."""
        return " ".join(sorted(Scope(scope).value for scope in scopes))

    @classmethod
    def from_string(cls, text: Optional[str]) -> FrozenSet["Scope"]:
        """Parse a space or comma delimited scope string.

        Scopes this enum does not know are skipped.
        """
        if not text:
            return frozenset()

        scopes = set()
        for raw in _DELIMITERS.split(text.strip()):
            if not raw:
                continue
            try:
                scopes.add(cls(raw))
            except ValueError:
                logger.debug(f"Ignoring unknown scope: {raw}")
        return frozenset(scopes)
