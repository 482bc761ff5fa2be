from typing import Any, Iterable, Type, TypeVar, Union

from httpx import URL, Response

from ..models.scopes import Scope
from ._base_service import BaseService, decode_response

T = TypeVar("T")


class ApiClient(BaseService):
    """
    Low-level client for making direct HTTP requests to the Spotify Web API.

    Use it for endpoints the higher-level services do not cover; requests
    still get a valid token and the 401/429 retry policy.
    """

    async def request(
        self,
        method: str,
        url: Union[URL, str],
        *,
        required_scopes: Iterable[Scope] = (),
        **kwargs: Any,
    ) -> Response:
        """
        Make an authorized request.

        Args:
            method (str): The HTTP method to use (GET, POST, PUT, DELETE).
            url (Union[URL, str]): A path relative to the API base URL or an
                absolute URL.
            required_scopes (Iterable[Scope]): Scopes the token must carry.
            **kwargs (Any): Passed on to ``httpx.AsyncClient.request``
                (``params``, ``json``, ``headers``, ...).

        Returns:
            Response: The successful HTTP response.
        """
        return await self.request_async(
            method, url, required_scopes=required_scopes, **kwargs
        )

    async def get_from_href(self, href: str, response_type: Type[T]) -> T:
        """
        Retrieve the data an href links to and decode it into ``response_type``.

        Many responses link to additional data instead of embedding it, the
        ``next`` link of a page being the most common case. The href is used
        as is, apart from its query items being put in canonical order.
        """
        response = await self.request_async("GET", href)
        return decode_response(response, response_type)
