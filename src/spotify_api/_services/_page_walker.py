from logging import getLogger
from typing import Any, AsyncIterator, List, Optional, Type, TypeVar

from ..models.paging import Paginated
from .api_client import ApiClient

P = TypeVar("P", bound=Paginated)


class PageWalker:
    """Follows the ``next`` links of a paginated result.

    Pages are fetched one at a time: the request for a page is only sent
    after the previous one was received and handed to the consumer, so
    pages always arrive in order and abandoning the iteration stops the
    walk before another request goes out.
    """

    def __init__(self, api_client: ApiClient) -> None:
        self._logger = getLogger("spotify_api")
        self._api_client = api_client

    async def extend_pages(
        self,
        page: P,
        max_extra_pages: Optional[int] = None,
        *,
        page_type: Optional[Type[P]] = None,
    ) -> AsyncIterator[P]:
        """Yield ``page`` followed by the pages after it.

        Args:
            page: A page already retrieved; it is yielded first without any
                network call.
            max_extra_pages: Maximum number of additional pages to request.
                ``1`` fetches just the next page; ``None`` walks to the end.
            page_type: Type the following pages are decoded into. Defaults
                to the type of ``page``.

        Yields:
            The pages in the order they were fetched. The iteration ends when
            a page has no ``next`` link or the cap is reached. A failed
            request ends it with that error.
        """
        if max_extra_pages is not None and max_extra_pages < 0:
            raise ValueError("max_extra_pages must not be negative")

        response_type = page_type or type(page)
        current = page
        extra_pages = 0
        yield current

        while True:
            next_href = getattr(current, "next", None)
            if next_href is None:
                self._logger.debug("Last page reached")
                return
            if max_extra_pages is not None and extra_pages >= max_extra_pages:
                self._logger.debug(f"Stopping after {extra_pages} extra pages")
                return

            extra_pages += 1
            self._logger.debug(f"Requesting extra page {extra_pages}: {next_href}")
            current = await self._api_client.get_from_href(next_href, response_type)
            yield current

    async def all_items(
        self, page: Any, max_extra_pages: Optional[int] = None
    ) -> List[Any]:
        """Items of ``page`` and of every page after it, in order."""
        items: List[Any] = []
        async for extended in self.extend_pages(page, max_extra_pages):
            items.extend(extended.items)
        return items
