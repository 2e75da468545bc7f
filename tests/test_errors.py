"""Tests for the exception hierarchy."""

import pytest

from gemini_harness.errors import (
    AUTH_HELP_URL,
    ApiError,
    AuthenticationError,
    ConfigurationError,
    GeminiHarnessError,
    InvalidRequestError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
)


class TestHierarchy:
    @pytest.mark.parametrize("cls", [
        ConfigurationError, ApiError, AuthenticationError, InvalidRequestError,
        RateLimitError, ServerError, RequestTimeoutError,
    ])
    def test_all_derive_from_base(self, cls):
        assert issubclass(cls, GeminiHarnessError)

    @pytest.mark.parametrize("cls", [
        AuthenticationError, InvalidRequestError, RateLimitError, ServerError,
    ])
    def test_http_errors_are_api_errors(self, cls):
        assert issubclass(cls, ApiError)

    def test_timeout_is_not_an_api_error(self):
        assert not issubclass(RequestTimeoutError, ApiError)
        assert not issubclass(RequestTimeoutError, TimeoutError)


class TestDefaults:
    @pytest.mark.parametrize("cls,status", [
        (AuthenticationError, 401),
        (InvalidRequestError, 400),
        (RateLimitError, 429),
        (ServerError, 500),
        (ApiError, None),
    ])
    def test_default_status(self, cls, status):
        assert cls().status_code == status

    def test_auth_message_mentions_key_page(self):
        assert AUTH_HELP_URL in str(AuthenticationError())

    def test_default_messages_are_non_empty(self):
        for cls in (GeminiHarnessError, ConfigurationError, RateLimitError,
                    ServerError, RequestTimeoutError):
            assert cls().message

    def test_custom_message_and_status(self):
        err = AuthenticationError("forbidden", status_code=403)
        assert err.message == "forbidden"
        assert str(err) == "forbidden"
        assert err.status_code == 403

    def test_explicit_none_status(self):
        err = InvalidRequestError("temperature must be between 0.0 and 1.0", status_code=None)
        assert err.status_code is None

    def test_single_except_clause_catches_everything(self):
        for exc in (ConfigurationError(), ServerError(), RequestTimeoutError()):
            with pytest.raises(GeminiHarnessError):
                raise exc
