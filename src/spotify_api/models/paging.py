from typing import Generic, List, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


@runtime_checkable
class Paginated(Protocol):
    """Anything carrying a link to the next page of results."""

    @property
    def next(self) -> Optional[str]: ...


class Page(BaseModel, Generic[T]):
    """A slice of an ordered collection (Spotify paging object).

    ``next`` is only present when the server holds items beyond
    ``offset + len(items)``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    href: Optional[str] = None
    items: List[T] = Field(default_factory=list)
    limit: int
    offset: int
    total: int
    previous: Optional[str] = None
    next: Optional[str] = None

    @model_validator(mode="after")
    def validate_item_count(self):
        if len(self.items) > self.limit:
            raise ValueError(
                f"page holds {len(self.items)} items but its limit is {self.limit}"
            )
        return self

    @property
    def has_next(self) -> bool:
        return self.next is not None


class Cursors(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    after: Optional[str] = None
    before: Optional[str] = None


class CursorPage(BaseModel, Generic[T]):
    """Cursor based paging object, used by time ordered collections."""

    model_config = ConfigDict(frozen=True, extra="allow")

    href: Optional[str] = None
    items: List[T] = Field(default_factory=list)
    limit: int
    next: Optional[str] = None
    cursors: Optional[Cursors] = None
    total: Optional[int] = None

    @property
    def has_next(self) -> bool:
        return self.next is not None
