from ._auth import (
    AuthorizationCodeFlowManager,
    AuthorizationManager,
    ClientCredentialsFlowManager,
    FileTokenStore,
    TokenState,
    make_code_challenge,
    make_code_verifier,
    make_state,
)
from ._config import Config
from ._spotify_api import SpotifyAPI
from ._utils import RequestSpec
from .models import (
    APIError,
    AuthorizationError,
    AuthorizationErrorKind,
    CursorPage,
    DecodingError,
    NetworkError,
    Page,
    Scope,
    SpotifyError,
)

__all__ = [
    "SpotifyAPI",
    "Config",
    "RequestSpec",
    "AuthorizationCodeFlowManager",
    "AuthorizationManager",
    "ClientCredentialsFlowManager",
    "FileTokenStore",
    "TokenState",
    "make_code_challenge",
    "make_code_verifier",
    "make_state",
    "APIError",
    "AuthorizationError",
    "AuthorizationErrorKind",
    "CursorPage",
    "DecodingError",
    "NetworkError",
    "Page",
    "Scope",
    "SpotifyError",
]
