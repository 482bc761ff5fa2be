from os import environ as env
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from ._utils.constants import (
    DEFAULT_ACCOUNTS_BASE_URL,
    DEFAULT_API_BASE_URL,
    DEFAULT_TIMEOUT,
    ENV_ACCOUNTS_BASE_URL,
    ENV_API_BASE_URL,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_REDIRECT_URI,
    ENV_REQUEST_TIMEOUT,
    ENV_TOKEN_FILE,
)


class Config(BaseModel):
    client_id: str
    client_secret: Optional[str] = None
    redirect_uri: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    accounts_base_url: str = DEFAULT_ACCOUNTS_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    token_file: Optional[Path] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a config from ``SPOTIFY_*`` environment variables.

        Keyword arguments that are not ``None`` take precedence over the
        environment. Unset optional values keep their defaults.
        """
        values = {
            "client_id": env.get(ENV_CLIENT_ID),
            "client_secret": env.get(ENV_CLIENT_SECRET),
            "redirect_uri": env.get(ENV_REDIRECT_URI),
            "api_base_url": env.get(ENV_API_BASE_URL),
            "accounts_base_url": env.get(ENV_ACCOUNTS_BASE_URL),
            "timeout": env.get(ENV_REQUEST_TIMEOUT),
            "token_file": env.get(ENV_TOKEN_FILE),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        # client_id is always passed so a missing value fails validation
        return cls(
            client_id=values.pop("client_id"),  # type: ignore[arg-type]
            **{k: v for k, v in values.items() if v is not None},
        )
