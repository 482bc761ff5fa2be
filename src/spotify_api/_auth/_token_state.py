"""Token snapshots and the token endpoint payload."""

from datetime import datetime, timedelta, timezone
from typing import FrozenSet, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.scopes import Scope


class TokenData(BaseModel):
    """Pydantic model for the token endpoint response."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[float] = None
    expires_at: Optional[float] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None


class TokenState(BaseModel):
    """Immutable snapshot of an authorization.

    A refresh replaces the whole snapshot, it is never updated field by field.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_at: datetime
    refresh_token: Optional[str] = None
    scopes: FrozenSet[Scope] = Field(default_factory=frozenset)

    @field_validator("expires_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # naive timestamps are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def is_expired(self, now: datetime, expires_at: Optional[datetime] = None) -> bool:
        return now >= (expires_at or self.expires_at)

    def has_scopes(self, required: Iterable[Scope]) -> bool:
        return frozenset(required) <= self.scopes

    def is_usable(
        self,
        required: Iterable[Scope],
        now: datetime,
        expires_at: Optional[datetime] = None,
    ) -> bool:
        return not self.is_expired(now, expires_at) and self.has_scopes(required)

    @classmethod
    def from_token_data(
        cls,
        data: TokenData,
        *,
        now: datetime,
        previous: Optional["TokenState"] = None,
    ) -> "TokenState":
        """Normalize a token response into a snapshot.

        The expiry is given either relative (``expires_in`` seconds) or as an
        absolute epoch (``expires_at``). A response without a new refresh
        token or scope string keeps the ones of ``previous``.
        """
        if data.expires_at is not None:
            expires_at = datetime.fromtimestamp(data.expires_at, tz=timezone.utc)
        elif data.expires_in is not None:
            expires_at = now + timedelta(seconds=data.expires_in)
        else:
            raise ValueError("token response has neither expires_in nor expires_at")

        refresh_token = data.refresh_token
        if refresh_token is None and previous is not None:
            refresh_token = previous.refresh_token

        if data.scope is not None:
            scopes = Scope.from_string(data.scope)
        elif previous is not None:
            scopes = previous.scopes
        else:
            scopes = frozenset()

        return cls(
            access_token=data.access_token,
            expires_at=expires_at,
            refresh_token=refresh_token,
            scopes=scopes,
        )

    def __repr__(self) -> str:
        """Override repr to keep credentials out of logs."""
        return (
            f"TokenState(access_token='***', expires_at={self.expires_at.isoformat()!r}, "
            f"refresh_token={'***' if self.refresh_token else None!r}, "
            f"scopes={Scope.make_string(self.scopes)!r})"
        )

    def __str__(self) -> str:
        return self.__repr__()
