from typing import List

import httpx
from pydantic import BaseModel, ValidationError

from spotify_api import APIError, AuthorizationError, AuthorizationErrorKind, DecodingError
from spotify_api.models.errors import format_location


class TestAPIError:
    def test_web_api_error_object(self):
        response = httpx.Response(
            403,
            json={"error": {"status": 403, "message": "Forbidden", "reason": "PREMIUM_REQUIRED"}},
        )

        error = APIError.from_response(response)

        assert error.status_code == 403
        assert error.message == "Forbidden"
        assert error.reason == "PREMIUM_REQUIRED"

    def test_accounts_error_object(self):
        response = httpx.Response(
            400, json={"error": "invalid_client", "error_description": "Invalid client"}
        )

        error = APIError.from_response(response)

        assert error.message == "Invalid client"
        assert error.reason == "invalid_client"

    def test_body_without_json(self):
        response = httpx.Response(502, text="Bad gateway")

        error = APIError.from_response(response)

        assert error.message == "Bad Gateway"
        assert error.body == "Bad gateway"


class TestAuthorizationError:
    def test_default_message(self):
        error = AuthorizationError(AuthorizationErrorKind.NO_CREDENTIAL)

        assert "Not authorized" in str(error)

    def test_missing_scopes(self):
        error = AuthorizationError(
            AuthorizationErrorKind.INSUFFICIENT_SCOPES,
            required_scopes={"a", "b"},
            granted_scopes={"b"},
        )

        assert error.missing_scopes == {"a"}


class TestDecodingError:
    def test_path_of_nested_failure(self):
        class Inner(BaseModel):
            name: str

        class Outer(BaseModel):
            items: List[Inner]

        try:
            Outer.model_validate({"items": [{"name": "ok"}, {}]})
        except ValidationError as e:
            error = DecodingError.from_validation_error(e, response_type="Outer")
        else:
            raise AssertionError("validation should fail")

        assert error.path == "items[1].name"
        assert "Outer" in error.message

    def test_format_location(self):
        assert format_location(("items", 27, "track", "album")) == "items[27].track.album"
        assert format_location(()) == ""
