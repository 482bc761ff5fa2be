import logging
from datetime import datetime, timedelta, timezone
from typing import Iterator, List

import pytest
from click.testing import CliRunner

from spotify_api import AuthorizationCodeFlowManager, Config, Scope, TokenState

API_BASE_URL = "https://api.test/v1"
ACCOUNTS_BASE_URL = "https://accounts.test"
TOKEN_URL = f"{ACCOUNTS_BASE_URL}/api/token"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers the requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    for name in (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SPOTIFY_REDIRECT_URI",
        "SPOTIFY_API_BASE_URL",
        "SPOTIFY_ACCOUNTS_BASE_URL",
        "SPOTIFY_REQUEST_TIMEOUT",
        "SPOTIFY_TOKEN_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop handlers setup_logging attached to streams the test runner swapped."""
    package_logger = logging.getLogger("spotify_api")
    yield
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def base_url() -> str:
    return API_BASE_URL


@pytest.fixture
def token_url() -> str:
    return TOKEN_URL


@pytest.fixture
def config() -> Config:
    return Config(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://localhost:8888/callback",
        api_base_url=API_BASE_URL,
        accounts_base_url=ACCOUNTS_BASE_URL,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def token_state(clock: FakeClock) -> TokenState:
    return TokenState(
        access_token="access-1",
        expires_at=clock.now + timedelta(hours=1),
        refresh_token="refresh-1",
        scopes=frozenset({Scope.USER_LIBRARY_READ, Scope.USER_LIBRARY_MODIFY}),
    )


@pytest.fixture
def manager(config: Config, clock: FakeClock) -> AuthorizationCodeFlowManager:
    return AuthorizationCodeFlowManager(config, clock=clock)


@pytest.fixture
def authorized_manager(
    manager: AuthorizationCodeFlowManager, token_state: TokenState
) -> AuthorizationCodeFlowManager:
    manager.restore(token_state)
    return manager
