from typing import Any, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from httpx import URL

T = TypeVar("T")

QueryParams = List[Tuple[str, str]]


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "value") and isinstance(value.value, str):
        return value.value
    if isinstance(value, (set, frozenset)):
        return ",".join(sorted(_render(item) for item in value))
    if isinstance(value, (list, tuple)):
        return comma_separated(value)
    return str(value)


def url_query_params(params: Optional[Mapping[str, Any]]) -> QueryParams:
    """Canonical query parameters: ``None`` dropped, values as strings, keys sorted.

    Identical logical requests always produce byte identical URLs.
    """
    if not params:
        return []
    return sorted(
        (key, _render(value)) for key, value in params.items() if value is not None
    )


def sorted_query_url(url: Union[URL, str]) -> URL:
    """Return ``url`` with its query items sorted by name then value."""
    url = URL(url) if isinstance(url, str) else url
    if not url.query:
        return url
    return url.copy_with(params=sorted(url.params.multi_items()))


def comma_separated(values: Iterable[Any]) -> str:
    """Join raw values with commas and no spaces."""
    return ",".join(_render(value) for value in values)


def chunked(items: Iterable[T], size: int) -> List[List[T]]:
    """Split ``items`` into lists of ``size`` elements; the last may be shorter."""
    if size < 1:
        raise ValueError("size must be at least 1")
    items = list(items)
    return [items[i : i + size] for i in range(0, len(items), size)]


def remove_duplicates(items: Iterable[T]) -> List[T]:
    """Drop repeated elements, keeping the first occurrence of each."""
    unique: List[T] = []
    for item in items:
        if item not in unique:
            unique.append(item)
    return unique
