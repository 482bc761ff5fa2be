import asyncio
from typing import Any, AsyncIterator, List, Optional, TypeVar

import httpx
from dotenv import load_dotenv

from ._auth import AuthorizationManager
from ._config import Config
from ._services import AlbumsService, ApiClient, LibraryService, PageWalker
from ._services._base_service import Sleep
from ._utils import get_httpx_client_kwargs, setup_logging

load_dotenv()

P = TypeVar("P")


class SpotifyAPI:
    """
    Entry point to the Spotify Web API.

    All services share one HTTP client and the authorization manager passed
    in, so concurrent calls from any service coordinate their token refreshes.
    """

    def __init__(
        self,
        authorization_manager: AuthorizationManager,
        *,
        config: Optional[Config] = None,
        debug: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            authorization_manager (AuthorizationManager): Supplies access
                tokens; one of the flow managers.
            config (Optional[Config]): Defaults to the manager's config.
            debug (bool): Enable debug logging if set to True. Defaults to False.
            client (Optional[httpx.AsyncClient]): HTTP client to send requests
                with. One is created when omitted.
            sleep: Coroutine used to wait before a rate limited retry.
        """
        self._authorization_manager = authorization_manager
        self._config = config or authorization_manager.config
        self._client = client or httpx.AsyncClient(
            **get_httpx_client_kwargs(self._config.timeout)
        )
        self._sleep = sleep

        setup_logging(debug)

    @property
    def authorization_manager(self) -> AuthorizationManager:
        return self._authorization_manager

    @property
    def api_client(self) -> ApiClient:
        """
        Low-level client for direct, authorized requests to any endpoint.
        """
        return ApiClient(**self._service_kwargs())

    @property
    def albums(self) -> AlbumsService:
        """
        Albums and their tracks.
        """
        return AlbumsService(**self._service_kwargs())

    @property
    def library(self) -> LibraryService:
        """
        The current user's saved albums and tracks.

        Requires an authorization flow that supports scopes.
        """
        return LibraryService(**self._service_kwargs())

    @property
    def pages(self) -> PageWalker:
        return PageWalker(self.api_client)

    def extend_pages(
        self, page: P, max_extra_pages: Optional[int] = None
    ) -> AsyncIterator[P]:
        """Yield ``page`` and the pages following it, in order.

        See ``PageWalker.extend_pages``.
        """
        return self.pages.extend_pages(page, max_extra_pages)

    async def all_items(
        self, page: Any, max_extra_pages: Optional[int] = None
    ) -> List[Any]:
        return await self.pages.all_items(page, max_extra_pages)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SpotifyAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _service_kwargs(self) -> dict:
        return {
            "config": self._config,
            "authorization_manager": self._authorization_manager,
            "client": self._client,
            "sleep": self._sleep,
        }
