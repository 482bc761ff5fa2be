from ._logs import setup_logging
from ._request_spec import RequestSpec
from ._http_client import get_httpx_client_kwargs
from ._url import (
    chunked,
    comma_separated,
    remove_duplicates,
    sorted_query_url,
    url_query_params,
)

__all__ = [
    "setup_logging",
    "RequestSpec",
    "get_httpx_client_kwargs",
    "chunked",
    "comma_separated",
    "remove_duplicates",
    "sorted_query_url",
    "url_query_params",
]
