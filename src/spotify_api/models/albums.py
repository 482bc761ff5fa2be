from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .paging import Page


class Artist(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    uri: Optional[str] = None


class Track(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    uri: Optional[str] = None
    duration_ms: Optional[int] = None
    track_number: Optional[int] = None
    artists: List[Artist] = Field(default_factory=list)


class Album(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    uri: Optional[str] = None
    album_type: Optional[str] = None
    release_date: Optional[str] = None
    total_tracks: Optional[int] = None
    artists: List[Artist] = Field(default_factory=list)
    tracks: Optional[Page[Track]] = None


class SavedAlbum(BaseModel):
    model_config = ConfigDict(extra="allow")

    added_at: Optional[str] = None
    album: Album


class SavedTrack(BaseModel):
    model_config = ConfigDict(extra="allow")

    added_at: Optional[str] = None
    track: Track


class Show(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    uri: Optional[str] = None
    publisher: Optional[str] = None
    total_episodes: Optional[int] = None


class SavedShow(BaseModel):
    model_config = ConfigDict(extra="allow")

    added_at: Optional[str] = None
    show: Show


class SeveralAlbums(BaseModel):
    albums: List[Optional[Album]]
