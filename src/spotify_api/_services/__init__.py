from ._base_service import BaseService, decode_response, parse_retry_after
from ._page_walker import PageWalker
from .albums_service import AlbumsService
from .api_client import ApiClient
from .library_service import LibraryService

__all__ = [
    "BaseService",
    "decode_response",
    "parse_retry_after",
    "PageWalker",
    "AlbumsService",
    "ApiClient",
    "LibraryService",
]
