from typing import Iterable, List

from ._url import remove_duplicates

_URI_PREFIX = "spotify:"


def spotify_id(value: str, category: str) -> str:
    """Bare id of ``value``, which may be an id or a ``spotify:<category>:<id>`` URI.

    Raises:
        ValueError: If a URI of another category is passed.
    """
    value = value.strip()
    if not value.startswith(_URI_PREFIX):
        return value

    parts = value.split(":")
    if len(parts) != 3 or not parts[2]:
        raise ValueError(f"Invalid Spotify URI: '{value}'")
    if parts[1] != category:
        raise ValueError(f"Expected a '{category}' URI but got '{value}'")
    return parts[2]


def spotify_ids(values: Iterable[str], category: str) -> List[str]:
    """Bare, de-duplicated ids in input order."""
    return remove_duplicates(spotify_id(value, category) for value in values)
