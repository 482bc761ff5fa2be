import asyncio
from base64 import b64encode
from datetime import timedelta
from typing import List, Optional
from urllib.parse import parse_qs

import httpx
import pytest
from pytest_httpx import HTTPXMock

from spotify_api import (
    AuthorizationCodeFlowManager,
    AuthorizationError,
    AuthorizationErrorKind,
    NetworkError,
    Scope,
    TokenState,
)


def form_of(request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def token_response(
    access_token: str = "access-2",
    *,
    refresh_token: Optional[str] = None,
    scope: Optional[str] = None,
    expires_in: int = 3600,
) -> dict:
    body = {"access_token": access_token, "token_type": "Bearer", "expires_in": expires_in}
    if refresh_token is not None:
        body["refresh_token"] = refresh_token
    if scope is not None:
        body["scope"] = scope
    return body


class TestAuthorizedToken:
    @pytest.mark.anyio
    async def test_usable_token_is_returned_without_network(
        self, httpx_mock: HTTPXMock, authorized_manager: AuthorizationCodeFlowManager
    ):
        token = await authorized_manager.authorized_token([Scope.USER_LIBRARY_READ])

        assert token == "access-1"
        assert httpx_mock.get_requests() == []

    @pytest.mark.anyio
    async def test_without_credential(self, manager: AuthorizationCodeFlowManager):
        with pytest.raises(AuthorizationError) as exc_info:
            await manager.authorized_token()

        assert exc_info.value.kind == AuthorizationErrorKind.NO_CREDENTIAL

    @pytest.mark.anyio
    async def test_expired_token_is_refreshed(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
        token_url: str,
    ):
        """The refresh grant is posted with basic auth and the old refresh token is kept."""
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())
        clock.advance(3600)

        token = await authorized_manager.authorized_token()

        assert token == "access-2"
        request = httpx_mock.get_request()
        assert request is not None
        assert form_of(request) == {
            "grant_type": "refresh_token",
            "refresh_token": "refresh-1",
        }
        credentials = b64encode(b"test-client-id:test-client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {credentials}"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"

        state = authorized_manager.state
        assert state is not None
        assert state.refresh_token == "refresh-1"
        assert state.scopes == {Scope.USER_LIBRARY_READ, Scope.USER_LIBRARY_MODIFY}
        assert state.expires_at == clock.now + timedelta(seconds=3600)

    @pytest.mark.anyio
    async def test_concurrent_callers_trigger_single_refresh(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
        token_url: str,
    ):
        """Concurrent requests with an expired token share one refresh."""
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())
        clock.advance(7200)

        tokens = await asyncio.gather(
            *(authorized_manager.authorized_token() for _ in range(10))
        )

        assert tokens == ["access-2"] * 10
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.anyio
    async def test_rotated_refresh_token_replaces_old_one(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
        token_url: str,
    ):
        httpx_mock.add_response(
            url=token_url,
            method="POST",
            json=token_response(refresh_token="refresh-2", scope="user-library-read"),
        )
        clock.advance(3600)

        await authorized_manager.authorized_token()

        state = authorized_manager.state
        assert state is not None
        assert state.refresh_token == "refresh-2"
        assert state.scopes == {Scope.USER_LIBRARY_READ}

    @pytest.mark.anyio
    async def test_missing_scope_after_refresh(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_url: str,
    ):
        """A token lacking a scope is refreshed once, then the scope error surfaces."""
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())

        with pytest.raises(AuthorizationError) as exc_info:
            await authorized_manager.authorized_token([Scope.PLAYLIST_MODIFY_PRIVATE])

        assert exc_info.value.kind == AuthorizationErrorKind.INSUFFICIENT_SCOPES
        assert exc_info.value.missing_scopes == {Scope.PLAYLIST_MODIFY_PRIVATE}
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.anyio
    async def test_expired_without_refresh_token(
        self,
        httpx_mock: HTTPXMock,
        manager: AuthorizationCodeFlowManager,
        token_state: TokenState,
        clock,
    ):
        manager.restore(token_state.model_copy(update={"refresh_token": None}))
        clock.advance(3600)

        with pytest.raises(AuthorizationError) as exc_info:
            await manager.authorized_token()

        assert exc_info.value.kind == AuthorizationErrorKind.REAUTHORIZATION_REQUIRED
        assert httpx_mock.get_requests() == []


class TestTokenEndpointErrors:
    @pytest.mark.anyio
    async def test_rejected_refresh_token(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_state: TokenState,
        token_url: str,
    ):
        httpx_mock.add_response(
            url=token_url,
            method="POST",
            status_code=400,
            json={"error": "invalid_grant", "error_description": "Refresh token revoked"},
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await authorized_manager.refresh()

        assert exc_info.value.kind == AuthorizationErrorKind.REAUTHORIZATION_REQUIRED
        assert "Refresh token revoked" in exc_info.value.message
        assert authorized_manager.state == token_state

    @pytest.mark.anyio
    async def test_unavailable_token_endpoint(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_url: str,
    ):
        httpx_mock.add_response(url=token_url, method="POST", status_code=503)

        with pytest.raises(AuthorizationError) as exc_info:
            await authorized_manager.refresh()

        assert exc_info.value.kind == AuthorizationErrorKind.EXPIRED

    @pytest.mark.anyio
    async def test_transport_failure(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_url: str,
    ):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=token_url)

        with pytest.raises(NetworkError) as exc_info:
            await authorized_manager.refresh()

        assert not exc_info.value.is_timeout


class TestEvents:
    @pytest.mark.anyio
    async def test_refresh_emits_change_only(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_url: str,
    ):
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())
        changes: List[TokenState] = []
        deauthorizations: List[Optional[TokenState]] = []
        authorized_manager.events.did_change.subscribe(changes.append)
        authorized_manager.events.did_deauthorize.subscribe(deauthorizations.append)

        await authorized_manager.refresh()

        assert [state.access_token for state in changes] == ["access-2"]
        assert deauthorizations == []

    @pytest.mark.anyio
    async def test_deauthorize_emits_deauthorize_only(
        self,
        authorized_manager: AuthorizationCodeFlowManager,
        token_state: TokenState,
    ):
        """Deauthorizing is reported once on its own stream; requests then fail."""
        changes: List[TokenState] = []
        deauthorizations: List[Optional[TokenState]] = []
        authorized_manager.events.did_change.subscribe(changes.append)
        authorized_manager.events.did_deauthorize.subscribe(deauthorizations.append)

        authorized_manager.deauthorize()

        assert changes == []
        assert deauthorizations == [token_state]
        assert not authorized_manager.is_authorized
        with pytest.raises(AuthorizationError) as exc_info:
            await authorized_manager.authorized_token()
        assert exc_info.value.kind == AuthorizationErrorKind.NO_CREDENTIAL

    @pytest.mark.anyio
    async def test_deauthorize_before_queued_refresh_runs(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
    ):
        clock.advance(7200)

        async def deauthorize() -> None:
            authorized_manager.deauthorize()

        result, _ = await asyncio.gather(
            asyncio.ensure_future(authorized_manager.authorized_token()),
            asyncio.ensure_future(deauthorize()),
            return_exceptions=True,
        )

        assert isinstance(result, AuthorizationError)
        assert result.kind == AuthorizationErrorKind.NO_CREDENTIAL
        assert httpx_mock.get_requests() == []
        assert not authorized_manager.is_authorized

    def test_unsubscribe(
        self, authorized_manager: AuthorizationCodeFlowManager, token_state: TokenState
    ):
        changes: List[TokenState] = []
        unsubscribe = authorized_manager.events.did_change.subscribe(changes.append)

        unsubscribe()
        authorized_manager.restore(token_state)

        assert changes == []

    def test_failing_subscriber_does_not_block_others(
        self, manager: AuthorizationCodeFlowManager, token_state: TokenState
    ):
        received: List[TokenState] = []

        def broken(_state: TokenState) -> None:
            raise RuntimeError("observer failed")

        manager.events.did_change.subscribe(broken)
        manager.events.did_change.subscribe(received.append)

        manager.restore(token_state)

        assert received == [token_state]
        assert manager.state == token_state


class TestExpirationOverride:
    @pytest.mark.anyio
    async def test_override_forces_refresh(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
        token_url: str,
    ):
        """An override in the past makes a fresh token count as expired."""
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())
        authorized_manager.set_expiration_override(clock.now - timedelta(seconds=1))

        token = await authorized_manager.authorized_token()

        assert token == "access-2"
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.anyio
    async def test_override_cleared_by_new_token(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        clock,
        token_url: str,
    ):
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())
        authorized_manager.set_expiration_override(clock.now)

        await authorized_manager.authorized_token()
        token = await authorized_manager.authorized_token()

        assert token == "access-2"
        assert len(httpx_mock.get_requests()) == 1


class TestRefreshRejected:
    @pytest.mark.anyio
    async def test_replaced_token_is_not_refreshed_again(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
    ):
        """A 401 for a token someone else already replaced needs no new refresh."""
        await authorized_manager.refresh_rejected("access-0")

        assert httpx_mock.get_requests() == []
        assert authorized_manager.state is not None
        assert authorized_manager.state.access_token == "access-1"

    @pytest.mark.anyio
    async def test_current_token_is_refreshed(
        self,
        httpx_mock: HTTPXMock,
        authorized_manager: AuthorizationCodeFlowManager,
        token_url: str,
    ):
        httpx_mock.add_response(url=token_url, method="POST", json=token_response())

        await authorized_manager.refresh_rejected("access-1")

        assert authorized_manager.state is not None
        assert authorized_manager.state.access_token == "access-2"
