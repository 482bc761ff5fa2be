import base64
import hashlib
import logging
import secrets
from typing import ClassVar, Iterable, Optional
from urllib.parse import urlencode

from .._utils import url_query_params
from .._utils.constants import AUTHORIZE_PATH
from ..models.errors import AuthorizationError, AuthorizationErrorKind
from ..models.scopes import Scope
from ._authorization_manager import AuthorizationManager
from ._token_state import TokenState

logger = logging.getLogger("spotify_api.auth")


def make_code_verifier(length: int = 64) -> str:
    """Random PKCE code verifier of ``length`` characters (43 to 128)."""
    if not 43 <= length <= 128:
        raise ValueError("code verifier length must be between 43 and 128")
    return secrets.token_urlsafe(96)[:length]


def make_code_challenge(code_verifier: str) -> str:
    """S256 code challenge: unpadded base64url of the verifier's SHA-256."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def make_state(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


class AuthorizationCodeFlowManager(AuthorizationManager):
    """Authorization code flow, with or without PKCE.

    The user authorizes in a browser; the code handed to the redirect URI is
    exchanged for an access and a refresh token. Without a client secret the
    manager runs the PKCE variant and sends ``client_id`` in the form body.
    """

    supports_scopes: ClassVar[bool] = True

    def make_authorization_url(
        self,
        scopes: Iterable[Scope],
        *,
        state: Optional[str] = None,
        show_dialog: bool = False,
        code_challenge: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> str:
        redirect_uri = redirect_uri or self._config.redirect_uri
        if not redirect_uri:
            raise ValueError("A redirect URI is required for the authorization code flow")

        params = url_query_params(
            {
                "client_id": self._config.client_id,
                "response_type": "code",
                "redirect_uri": redirect_uri,
                "scope": Scope.make_string(scopes) or None,
                "state": state,
                "show_dialog": show_dialog,
                "code_challenge_method": "S256" if code_challenge else None,
                "code_challenge": code_challenge,
            }
        )
        base = self._config.accounts_base_url.rstrip("/")
        return f"{base}{AUTHORIZE_PATH}?{urlencode(params)}"

    async def request_access_and_refresh_tokens(
        self,
        code: str,
        *,
        code_verifier: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> TokenState:
        """Exchange an authorization code and install the resulting token."""
        redirect_uri = redirect_uri or self._config.redirect_uri
        if not redirect_uri:
            raise ValueError("A redirect URI is required for the authorization code flow")

        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if code_verifier is not None:
            form["code_verifier"] = code_verifier
        if not self._config.client_secret:
            form["client_id"] = self._config.client_id

        state = await self._post_token_request(form)
        if state.refresh_token is None:
            logger.warning("Token response did not include a refresh token")
        self._install(state)
        return state

    async def _request_refresh(self) -> TokenState:
        previous = self._state
        if previous is None or previous.refresh_token is None:
            raise AuthorizationError(AuthorizationErrorKind.REAUTHORIZATION_REQUIRED)

        form = {
            "grant_type": "refresh_token",
            "refresh_token": previous.refresh_token,
        }
        if not self._config.client_secret:
            form["client_id"] = self._config.client_id

        logger.debug("Refreshing access token")
        return await self._post_token_request(form, previous=previous)
