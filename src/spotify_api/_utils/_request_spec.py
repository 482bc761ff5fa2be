from dataclasses import dataclass, field
from typing import Any, FrozenSet, Union

from ..models.scopes import Scope


@dataclass
class RequestSpec:
    """Encapsulates the configuration for making an HTTP request.

    Besides the usual method, endpoint, query parameters, headers and body,
    a spec names the scopes the access token must carry for the call.
    ``endpoint`` is either a path relative to the API base URL or an
    absolute href.
    """

    method: str
    endpoint: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)
    content: Any | None = None
    json: Any | None = None
    data: Any | None = None
    timeout: Union[int, float] | None = None
    required_scopes: FrozenSet[Scope] = frozenset()
