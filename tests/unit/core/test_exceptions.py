"""
Tests for the exception hierarchy and httpx error classification.
"""

import httpx
import pytest

from http_middleware.core.exceptions import (
    ConfigurationError,
    ConnectionError,
    FatalError,
    HTTPMiddlewareException,
    InvalidKeyError,
    MiddlewareChainError,
    NetworkError,
    RequestCloneError,
    TimeoutError,
    TransportError,
    classify_httpx_exception,
)


class TestHierarchy:

    def test_transport_errors_are_retryable(self):
        for error in (TransportError("x"), NetworkError("x"), TimeoutError("x"), ConnectionError("x")):
            assert isinstance(error, HTTPMiddlewareException)
            assert error.retryable
            assert not error.fatal

    def test_chain_errors_are_fatal(self):
        for error in (
            RequestCloneError("x"),
            MiddlewareChainError("x"),
            InvalidKeyError(""),
            ConfigurationError("x"),
        ):
            assert error.fatal
            assert not error.retryable

    def test_fatal_subclasses(self):
        assert issubclass(RequestCloneError, FatalError)
        assert issubclass(MiddlewareChainError, FatalError)
        assert issubclass(InvalidKeyError, FatalError)

    def test_messages_include_context(self):
        assert "url: https://x" in str(ConnectionError("refused", "https://x"))
        assert "(read timeout)" in str(TimeoutError("slow", timeout_type="read"))
        assert "(middleware: Swr)" in str(MiddlewareChainError("twice", "Swr"))
        assert "(POST https://x)" in str(RequestCloneError("stream", "POST", "https://x"))
        assert "from DedupMiddleware" in str(InvalidKeyError(None, "DedupMiddleware"))

    def test_configuration_error_keeps_field(self):
        assert ConfigurationError("bad", field="base_url").field == "base_url"


class TestClassifyHttpxException:

    @pytest.mark.parametrize(
        "exc, timeout_type",
        [
            (httpx.ConnectTimeout("t"), "connect"),
            (httpx.ReadTimeout("t"), "read"),
            (httpx.WriteTimeout("t"), "write"),
            (httpx.PoolTimeout("t"), "pool"),
        ],
    )
    def test_timeouts(self, exc, timeout_type):
        result = classify_httpx_exception(exc, "https://x")

        assert isinstance(result, TimeoutError)
        assert result.timeout_type == timeout_type
        assert result.url == "https://x"

    def test_connect_error(self):
        result = classify_httpx_exception(httpx.ConnectError("refused"))
        assert isinstance(result, ConnectionError)

    def test_network_error(self):
        result = classify_httpx_exception(httpx.ReadError("reset"))
        assert isinstance(result, ConnectionError)

    def test_other_transport_error(self):
        result = classify_httpx_exception(httpx.RemoteProtocolError("bad frame"))
        assert type(result) is TransportError

    def test_unknown_error(self):
        result = classify_httpx_exception(ValueError("boom"))
        assert type(result) is HTTPMiddlewareException
        assert str(result) == "boom"
