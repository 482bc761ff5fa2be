import asyncio
import math
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from functools import lru_cache
from logging import getLogger
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from httpx import URL, AsyncClient, Headers, Response, TransportError
from pydantic import TypeAdapter, ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from .._auth import AuthorizationManager
from .._config import Config
from .._utils import (
    RequestSpec,
    get_httpx_client_kwargs,
    sorted_query_url,
    url_query_params,
)
from .._utils.constants import HEADER_AUTHORIZATION, HEADER_RETRY_AFTER
from ..models.errors import (
    APIError,
    AuthorizationError,
    AuthorizationErrorKind,
    DecodingError,
    NetworkError,
)
from ..models.scopes import Scope

Sleep = Callable[[float], Awaitable[None]]
Attempt = Tuple[str, Response]


def parse_retry_after(headers: Headers) -> Optional[float]:
    """Seconds to wait according to the ``Retry-After`` header.

    Accepts delta seconds or an HTTP date. Returns None when the header is
    missing or cannot be parsed, in which case no retry is attempted.
    """
    # httpx.Headers lookups ignore the casing of the header name
    retry_after = headers.get(HEADER_RETRY_AFTER)
    if retry_after is None or not retry_after.strip():
        return None

    try:
        seconds = float(retry_after)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            return None
        return max(seconds, 0.0)

    try:
        retry_date = parsedate_to_datetime(retry_after)
        delta = (retry_date - datetime.now(retry_date.tzinfo)).total_seconds()
        return max(delta, 0.0)
    except (ValueError, TypeError):
        return None


@dataclass
class _RetryBudget:
    """Retries already spent by one call; each signal is honoured once."""

    rate_limited: bool = False

    def should_retry(self, attempt: Attempt) -> bool:
        _, response = attempt
        if response.status_code != 429 or self.rate_limited:
            return False
        if parse_retry_after(response.headers) is None:
            return False
        self.rate_limited = True
        return True


def _wait_retry_after(retry_state: RetryCallState) -> float:
    _, response = retry_state.outcome.result()  # type: ignore[union-attr]
    return parse_retry_after(response.headers) or 0.0


def _last_attempt(retry_state: RetryCallState) -> Attempt:
    return retry_state.outcome.result()  # type: ignore[union-attr]


@lru_cache(maxsize=128)
def _type_adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def _type_name(response_type: Any) -> str:
    return getattr(response_type, "__name__", None) or repr(response_type)


def decode_response(response: Response, response_type: Any = None) -> Any:
    """Decode a JSON body, validating it against ``response_type`` if given."""
    if not response.content:
        return None

    try:
        payload = response.json()
    except ValueError as e:
        raise DecodingError(
            f"Response body is not valid JSON: {e}",
            response_type=_type_name(response_type) if response_type else None,
            body=response.text,
        ) from e

    if response_type is None:
        return payload

    try:
        return _type_adapter(response_type).validate_python(payload)
    except ValidationError as e:
        raise DecodingError.from_validation_error(
            e, response_type=_type_name(response_type), body=response.text
        ) from e


class BaseService:
    """Sends authorized requests to the Web API.

    Every attempt asks the authorization manager for a token first. Two
    server signals are retried, each at most once per call:

    * 401: the token is refreshed (unless someone else already replaced it)
      and the request is sent again; a second 401 is fatal.
    * 429: the request is sent again after the ``Retry-After`` delay; without
      a usable header the 429 is returned as an error straight away.

    Anything else that is not 2xx becomes an ``APIError``. Timeouts and
    transport failures surface as ``NetworkError`` and are never retried.
    """

    def __init__(
        self,
        config: Config,
        authorization_manager: AuthorizationManager,
        *,
        client: Optional[AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._logger = getLogger("spotify_api")
        self._config = config
        self._authorization = authorization_manager
        self._client_async = client or AsyncClient(
            headers=Headers(self.default_headers),
            **get_httpx_client_kwargs(config.timeout),
        )
        self._sleep = sleep

    @property
    def default_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    @property
    def authorization_manager(self) -> AuthorizationManager:
        return self._authorization

    def resolve_url(
        self, url: Union[URL, str], params: Optional[Mapping[str, Any]] = None
    ) -> URL:
        """Absolute URL for ``url`` with canonical, sorted query parameters."""
        raw = str(url)
        if raw.startswith(("http://", "https://")):
            target = URL(raw)
        else:
            target = URL(f"{self._config.api_base_url.rstrip('/')}/{raw.lstrip('/')}")

        query = url_query_params(params)
        if query:
            target = target.copy_merge_params(query)
        return sorted_query_url(target)

    async def request_async(
        self,
        method: str,
        url: Union[URL, str],
        *,
        required_scopes: Iterable[Scope] = (),
        params: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> Response:
        target = self.resolve_url(url, params)
        scopes = frozenset(required_scopes)
        budget = _RetryBudget()

        token, response = await self._send(budget, method, target, scopes, **kwargs)

        if response.status_code == 401:
            self._logger.warning(
                f"Access token rejected (401) for {method} {target}. "
                "Refreshing and retrying once"
            )
            await self._authorization.refresh_rejected(token)
            token, response = await self._send(budget, method, target, scopes, **kwargs)
            if response.status_code == 401:
                raise AuthorizationError(
                    AuthorizationErrorKind.REAUTHORIZATION_REQUIRED,
                    "The access token was rejected again after refreshing.",
                ) from APIError.from_response(response)

        if response.is_error:
            retry_after = (
                parse_retry_after(response.headers)
                if response.status_code == 429
                else None
            )
            raise APIError.from_response(response, retry_after=retry_after)

        return response

    async def execute(self, spec: RequestSpec, response_type: Any = None) -> Any:
        """Send ``spec`` and decode the body into ``response_type``."""
        kwargs = {
            key: value
            for key, value in {
                "content": spec.content,
                "json": spec.json,
                "data": spec.data,
                "timeout": spec.timeout,
            }.items()
            if value is not None
        }
        response = await self.request_async(
            spec.method,
            spec.endpoint,
            required_scopes=spec.required_scopes,
            params=spec.params,
            headers=spec.headers,
            **kwargs,
        )
        return decode_response(response, response_type)

    async def _send(
        self,
        budget: _RetryBudget,
        method: str,
        url: URL,
        required_scopes: frozenset,
        **kwargs: Any,
    ) -> Attempt:
        retrying = AsyncRetrying(
            sleep=self._sleep,
            retry=retry_if_result(budget.should_retry),
            stop=stop_after_attempt(2),
            wait=_wait_retry_after,
            before_sleep=self._log_rate_limited,
            retry_error_callback=_last_attempt,
        )
        return await retrying(self._attempt, method, url, required_scopes, **kwargs)

    async def _attempt(
        self,
        method: str,
        url: URL,
        required_scopes: frozenset,
        *,
        headers: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> Attempt:
        token = await self._authorization.authorized_token(required_scopes)

        request_headers = {
            **self.default_headers,
            **(headers or {}),
            HEADER_AUTHORIZATION: f"Bearer {token}",
        }
        self._logger.debug(f"Request: {method} {url}")

        try:
            response = await self._client_async.request(
                method, url, headers=request_headers, **kwargs
            )
        except TransportError as e:
            raise NetworkError.from_transport_error(e) from e

        self._logger.debug(f"Response: {response.status_code} {method} {url}")
        return token, response

    def _log_rate_limited(self, retry_state: RetryCallState) -> None:
        _, response = retry_state.outcome.result()  # type: ignore[union-attr]
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        self._logger.warning(
            f"Rate limited (429) on {response.request.method} {response.request.url}. "
            f"Retrying after {delay:.2f}s"
        )
