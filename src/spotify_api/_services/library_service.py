from typing import List, Optional, Sequence

from .._utils import RequestSpec, chunked, comma_separated
from .._utils._identifiers import spotify_id, spotify_ids
from ..models import Page, SavedAlbum, SavedShow, SavedTrack, Scope
from ._base_service import BaseService

ITEMS_PER_REQUEST = 50


class LibraryService(BaseService):
    """Service for the current user's saved albums, tracks and shows.

    Reading requires the ``user-library-read`` scope, changes require
    ``user-library-modify``.
    """

    async def saved_albums(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        market: Optional[str] = None,
    ) -> Page[SavedAlbum]:
        """Get a page of the albums saved in the user's library.

        Args:
            limit: Maximum number of albums to return (1 to 50, default 20).
            offset: Index of the first album to return.
            market: Country code or ``from_token`` for track relinking.

        Returns:
            Page[SavedAlbum]: One page; walk the rest with ``extend_pages``.
        """
        spec = self._saved_spec("/me/albums", limit=limit, offset=offset, market=market)
        return await self.execute(spec, Page[SavedAlbum])

    async def saved_tracks(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        market: Optional[str] = None,
    ) -> Page[SavedTrack]:
        """Get a page of the tracks saved in the user's library."""
        spec = self._saved_spec("/me/tracks", limit=limit, offset=offset, market=market)
        return await self.execute(spec, Page[SavedTrack])

    async def save_albums(self, albums: Sequence[str]) -> None:
        """Save albums (ids or URIs) to the user's library."""
        await self._modify("PUT", "/me/albums", spotify_ids(albums, "album"))

    async def remove_saved_albums(
        self, albums: Sequence[str], *, market: Optional[str] = None
    ) -> None:
        """Remove albums from the user's library."""
        await self._modify(
            "DELETE", "/me/albums", spotify_ids(albums, "album"), market=market
        )

    async def saved_albums_contains(self, albums: Sequence[str]) -> List[bool]:
        """Check which of the albums are saved, one flag per album."""
        return await self._contains("/me/albums/contains", albums, "album")

    async def save_tracks(self, tracks: Sequence[str]) -> None:
        """Save tracks (ids or URIs) to the user's library."""
        await self._modify("PUT", "/me/tracks", spotify_ids(tracks, "track"))

    async def remove_saved_tracks(
        self, tracks: Sequence[str], *, market: Optional[str] = None
    ) -> None:
        """Remove tracks from the user's library."""
        await self._modify(
            "DELETE", "/me/tracks", spotify_ids(tracks, "track"), market=market
        )

    async def saved_tracks_contains(self, tracks: Sequence[str]) -> List[bool]:
        """Check which of the tracks are saved, one flag per track."""
        return await self._contains("/me/tracks/contains", tracks, "track")

    async def saved_shows(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        market: Optional[str] = None,
    ) -> Page[SavedShow]:
        """Get a page of the podcast shows the user follows."""
        spec = self._saved_spec("/me/shows", limit=limit, offset=offset, market=market)
        return await self.execute(spec, Page[SavedShow])

    async def save_shows(self, shows: Sequence[str]) -> None:
        """Save shows (ids or URIs) to the user's library."""
        await self._modify("PUT", "/me/shows", spotify_ids(shows, "show"))

    async def remove_saved_shows(
        self, shows: Sequence[str], *, market: Optional[str] = None
    ) -> None:
        """Remove shows from the user's library.

        With ``market`` set, only shows available in that market are removed.
        """
        await self._modify(
            "DELETE", "/me/shows", spotify_ids(shows, "show"), market=market
        )

    async def saved_shows_contains(self, shows: Sequence[str]) -> List[bool]:
        """Check which of the shows are saved, one flag per show."""
        return await self._contains("/me/shows/contains", shows, "show")

    async def _modify(
        self,
        method: str,
        endpoint: str,
        ids: Sequence[str],
        *,
        market: Optional[str] = None,
    ) -> None:
        for batch in chunked(ids, ITEMS_PER_REQUEST):
            spec = RequestSpec(
                method=method,
                endpoint=endpoint,
                params={"ids": comma_separated(batch), "market": market},
                required_scopes=frozenset({Scope.USER_LIBRARY_MODIFY}),
            )
            await self.execute(spec)

    async def _contains(
        self, endpoint: str, items: Sequence[str], category: str
    ) -> List[bool]:
        # not de-duplicated: the result has one flag per requested item
        ids = [spotify_id(item, category) for item in items]
        flags: List[bool] = []
        for batch in chunked(ids, ITEMS_PER_REQUEST):
            spec = RequestSpec(
                method="GET",
                endpoint=endpoint,
                params={"ids": comma_separated(batch)},
                required_scopes=frozenset({Scope.USER_LIBRARY_READ}),
            )
            flags.extend(await self.execute(spec, List[bool]))
        return flags

    def _saved_spec(
        self,
        endpoint: str,
        *,
        limit: Optional[int],
        offset: Optional[int],
        market: Optional[str],
    ) -> RequestSpec:
        return RequestSpec(
            method="GET",
            endpoint=endpoint,
            params={"limit": limit, "offset": offset, "market": market},
            required_scopes=frozenset({Scope.USER_LIBRARY_READ}),
        )
