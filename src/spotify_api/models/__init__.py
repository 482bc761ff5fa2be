from .albums import (
    Album,
    Artist,
    SavedAlbum,
    SavedShow,
    SavedTrack,
    SeveralAlbums,
    Show,
    Track,
)
from .errors import (
    APIError,
    AuthorizationError,
    AuthorizationErrorKind,
    DecodingError,
    NetworkError,
    SpotifyError,
)
from .paging import CursorPage, Cursors, Page, Paginated
from .scopes import Scope

__all__ = [
    "Album",
    "Artist",
    "SavedAlbum",
    "SavedShow",
    "SavedTrack",
    "SeveralAlbums",
    "Show",
    "Track",
    "APIError",
    "AuthorizationError",
    "AuthorizationErrorKind",
    "DecodingError",
    "NetworkError",
    "SpotifyError",
    "CursorPage",
    "Cursors",
    "Page",
    "Paginated",
    "Scope",
]
