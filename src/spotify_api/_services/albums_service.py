from typing import List, Optional, Sequence

from .._utils import RequestSpec, chunked, comma_separated
from .._utils._identifiers import spotify_id
from ..models import Album, Page, SeveralAlbums, Track
from ._base_service import BaseService

ALBUMS_PER_REQUEST = 20


class AlbumsService(BaseService):
    """Service for retrieving albums and their tracks."""

    async def album(self, album: str, *, market: Optional[str] = None) -> Album:
        """Get a single album.

        Args:
            album: Album id or URI.
            market: ISO 3166-1 alpha-2 country code or ``from_token``, used
                for track relinking.

        Returns:
            Album: The full album object.
        """
        spec = self._album_spec(album, market=market)
        return await self.execute(spec, Album)

    async def albums(
        self, albums: Sequence[str], *, market: Optional[str] = None
    ) -> List[Optional[Album]]:
        """Get several albums, in the order requested.

        Ids are sent in batches of 20. Albums the API does not know are
        returned as ``None``.
        """
        ids = [spotify_id(album, "album") for album in albums]
        results: List[Optional[Album]] = []
        for batch in chunked(ids, ALBUMS_PER_REQUEST):
            spec = self._albums_spec(batch, market=market)
            response = await self.execute(spec, SeveralAlbums)
            results.extend(response.albums)
        return results

    async def album_tracks(
        self,
        album: str,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        market: Optional[str] = None,
    ) -> Page[Track]:
        """Get one page of an album's tracks.

        Pass the result to ``extend_pages`` to walk the remaining pages.
        """
        spec = self._album_tracks_spec(
            album, limit=limit, offset=offset, market=market
        )
        return await self.execute(spec, Page[Track])

    def _album_spec(self, album: str, *, market: Optional[str]) -> RequestSpec:
        return RequestSpec(
            method="GET",
            endpoint=f"/albums/{spotify_id(album, 'album')}",
            params={"market": market},
        )

    def _albums_spec(self, ids: Sequence[str], *, market: Optional[str]) -> RequestSpec:
        return RequestSpec(
            method="GET",
            endpoint="/albums",
            params={"ids": comma_separated(ids), "market": market},
        )

    def _album_tracks_spec(
        self,
        album: str,
        *,
        limit: Optional[int],
        offset: Optional[int],
        market: Optional[str],
    ) -> RequestSpec:
        return RequestSpec(
            method="GET",
            endpoint=f"/albums/{spotify_id(album, 'album')}/tracks",
            params={"limit": limit, "offset": offset, "market": market},
        )
