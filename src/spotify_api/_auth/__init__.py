from ._authorization_code_flow import (
    AuthorizationCodeFlowManager,
    make_code_challenge,
    make_code_verifier,
    make_state,
)
from ._authorization_manager import AuthorizationManager
from ._client_credentials_flow import ClientCredentialsFlowManager
from ._events import AuthorizationEventKind, AuthorizationEvents, Signal
from ._refresh_coordinator import RefreshCoordinator
from ._token_state import TokenData, TokenState
from ._token_store import FileTokenStore

__all__ = [
    "AuthorizationCodeFlowManager",
    "AuthorizationManager",
    "ClientCredentialsFlowManager",
    "AuthorizationEventKind",
    "AuthorizationEvents",
    "Signal",
    "RefreshCoordinator",
    "TokenData",
    "TokenState",
    "FileTokenStore",
    "make_code_challenge",
    "make_code_verifier",
    "make_state",
]
