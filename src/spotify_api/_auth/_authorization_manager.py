import logging
from abc import ABC, abstractmethod
from base64 import b64encode
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Dict, Iterable, Optional

import httpx
from pydantic import ValidationError

from .._config import Config
from .._utils import get_httpx_client_kwargs
from .._utils.constants import (
    FORM_URLENCODED,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    TOKEN_PATH,
)
from ..models.errors import (
    APIError,
    AuthorizationError,
    AuthorizationErrorKind,
    DecodingError,
    NetworkError,
)
from ..models.scopes import Scope
from ._events import AuthorizationEvents
from ._refresh_coordinator import RefreshCoordinator
from ._token_state import TokenData, TokenState

logger = logging.getLogger("spotify_api.auth")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthorizationManager(ABC):
    """Owns the current token and hands out usable access tokens.

    Subclasses implement one OAuth flow: how the first token is obtained and
    how it is renewed. ``supports_scopes`` tells callers whether the flow can
    grant scopes at all; flows that cannot reject any non-empty scope set.
    """

    supports_scopes: ClassVar[bool] = False

    def __init__(
        self,
        config: Config,
        *,
        client: Optional[httpx.AsyncClient] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(
            **get_httpx_client_kwargs(config.timeout)
        )
        self._clock = clock
        self._state: Optional[TokenState] = None
        self._expiration_override: Optional[datetime] = None
        self._coordinator = RefreshCoordinator(self._request_refresh, self._install)
        self.events = AuthorizationEvents()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def state(self) -> Optional[TokenState]:
        return self._state

    @property
    def is_authorized(self) -> bool:
        return self._state is not None

    @property
    def token_url(self) -> str:
        return f"{self._config.accounts_base_url.rstrip('/')}{TOKEN_PATH}"

    async def authorized_token(self, required_scopes: Iterable[Scope] = ()) -> str:
        """Return an access token valid for ``required_scopes``.

        A usable token is returned without touching the network. An expired
        token, or one lacking scopes, is renewed through the refresh
        coordinator so concurrent callers share a single refresh.
        """
        required = frozenset(required_scopes)
        if required and not self.supports_scopes:
            raise AuthorizationError(
                AuthorizationErrorKind.INSUFFICIENT_SCOPES,
                f"{type(self).__name__} cannot grant scopes.",
                required_scopes=required,
            )

        state = self._state
        if state is None:
            raise AuthorizationError(AuthorizationErrorKind.NO_CREDENTIAL)

        if state.is_usable(required, self._clock(), self._expiration_override):
            return state.access_token

        if not self._can_refresh(state):
            raise AuthorizationError(
                AuthorizationErrorKind.REAUTHORIZATION_REQUIRED,
                required_scopes=required,
                granted_scopes=state.scopes,
            )

        state = await self._coordinator.refresh()
        if not state.has_scopes(required):
            raise AuthorizationError(
                AuthorizationErrorKind.INSUFFICIENT_SCOPES,
                required_scopes=required,
                granted_scopes=state.scopes,
            )
        return state.access_token

    async def refresh(self) -> TokenState:
        """Renew the token now, joining a refresh that is already running."""
        state = self._state
        if state is None:
            raise AuthorizationError(AuthorizationErrorKind.NO_CREDENTIAL)
        if not self._can_refresh(state):
            raise AuthorizationError(AuthorizationErrorKind.REAUTHORIZATION_REQUIRED)
        return await self._coordinator.refresh()

    async def refresh_rejected(self, access_token: str) -> None:
        """Renew after the server rejected ``access_token``.

        Nothing is requested when that token was already replaced by a
        refresh some other caller completed in the meantime.
        """
        state = self._state
        if state is not None and state.access_token != access_token:
            logger.debug("Rejected token already replaced, not refreshing again")
            return
        await self.refresh()

    def deauthorize(self) -> None:
        """Forget the current token.

        A refresh in flight still completes but its result is dropped.
        Observers receive the "deauthorized" event only.
        """
        previous = self._state
        self._state = None
        self._expiration_override = None
        self._coordinator.invalidate()
        logger.info("Deauthorized")
        self.events.did_deauthorize.emit(previous)

    def restore(self, state: TokenState) -> None:
        """Install a previously saved snapshot."""
        self._install(state)

    def set_expiration_override(self, expires_at: Optional[datetime]) -> None:
        """Pretend the token expires at ``expires_at`` (testing hook).

        Cleared automatically when the next snapshot is installed.
        """
        self._expiration_override = expires_at

    async def aclose(self) -> None:
        await self._client.aclose()

    def _install(self, state: TokenState) -> None:
        self._state = state
        self._expiration_override = None
        logger.info(f"Authorization updated, token expires at {state.expires_at.isoformat()}")
        self.events.did_change.emit(state)

    def _can_refresh(self, state: TokenState) -> bool:
        return state.refresh_token is not None

    @abstractmethod
    async def _request_refresh(self) -> TokenState:
        """Perform the renewal network call and return the new snapshot."""

    def _basic_authorization(self) -> Dict[str, str]:
        if not self._config.client_secret:
            return {}
        credentials = f"{self._config.client_id}:{self._config.client_secret}"
        encoded = b64encode(credentials.encode()).decode()
        return {HEADER_AUTHORIZATION: f"Basic {encoded}"}

    async def _post_token_request(
        self, form: Dict[str, Any], *, previous: Optional[TokenState] = None
    ) -> TokenState:
        """POST ``form`` to the token endpoint and decode the snapshot."""
        headers = {HEADER_CONTENT_TYPE: FORM_URLENCODED, **self._basic_authorization()}
        logger.debug(f"Request: POST {self.token_url} ({form.get('grant_type')})")

        try:
            response = await self._client.post(self.token_url, data=form, headers=headers)
        except httpx.TransportError as e:
            raise NetworkError.from_transport_error(e) from e

        if response.is_error:
            error = APIError.from_response(response)
            if response.status_code >= 500:
                raise AuthorizationError(
                    AuthorizationErrorKind.EXPIRED,
                    f"Token endpoint unavailable: {error}",
                ) from error
            raise AuthorizationError(
                AuthorizationErrorKind.REAUTHORIZATION_REQUIRED,
                f"Token request rejected: {error}",
            ) from error

        try:
            data = TokenData.model_validate(response.json())
            return TokenState.from_token_data(data, now=self._clock(), previous=previous)
        except ValidationError as e:
            raise DecodingError.from_validation_error(
                e, response_type="TokenData", body=response.text
            ) from e
        except ValueError as e:
            raise DecodingError(
                f"Could not decode token response: {e}",
                response_type="TokenData",
                body=response.text,
            ) from e
