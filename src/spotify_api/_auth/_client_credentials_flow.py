import logging
from typing import ClassVar

from ..models.errors import AuthorizationError, AuthorizationErrorKind
from ._authorization_manager import AuthorizationManager
from ._token_state import TokenState

logger = logging.getLogger("spotify_api.auth")


class ClientCredentialsFlowManager(AuthorizationManager):
    """Server-to-server flow without a user.

    No refresh token is issued: renewal repeats the client credentials grant.
    Tokens from this flow never carry scopes.
    """

    supports_scopes: ClassVar[bool] = False

    async def authorize(self) -> TokenState:
        """Request a token and install it."""
        state = await self._request_token()
        self._install(state)
        return state

    def _can_refresh(self, state: TokenState) -> bool:
        return True

    async def _request_refresh(self) -> TokenState:
        logger.debug("Requesting a new client credentials token")
        return await self._request_token()

    async def _request_token(self) -> TokenState:
        if not self._config.client_secret:
            raise AuthorizationError(
                AuthorizationErrorKind.REAUTHORIZATION_REQUIRED,
                "The client credentials flow requires a client secret.",
            )
        return await self._post_token_request({"grant_type": "client_credentials"})
