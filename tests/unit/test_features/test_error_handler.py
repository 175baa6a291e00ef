"""Tests for GraphQL error classification and masking."""

from __future__ import annotations

import pytest
from graphql import GraphQLError

from ledger_gateway.core.exceptions import (
    BadRequestException,
    NotFoundException,
    UnsupportedOperationException,
)
from ledger_gateway.features.graphql.error_handler import (
    INTERNAL_MESSAGE,
    UPSTREAM_MESSAGE,
    ErrorCategory,
    ensure_error_code,
    error_code,
    format_error,
    is_user_facing_error,
)
from ledger_gateway.infra.ledger.exceptions import LedgerRPCError, LedgerTransportError


def wrap(original: Exception | None, message: str | None = None) -> GraphQLError:
    return GraphQLError(
        message or (str(original) if original else "Syntax Error"),
        path=["checkpoint"],
        original_error=original,
    )


@pytest.mark.unit
class TestErrorCode:
    @pytest.mark.parametrize(
        ("original", "expected"),
        [
            (NotFoundException("Checkpoint '9' not found"), ErrorCategory.NOT_FOUND),
            (BadRequestException("first must not be negative"), ErrorCategory.BAD_REQUEST),
            (UnsupportedOperationException("backward pagination"), ErrorCategory.UNSUPPORTED_OPERATION),
            (LedgerTransportError("sui_getCheckpoint", "HTTP 503"), ErrorCategory.UPSTREAM),
            (LedgerRPCError("sui_getCheckpoint", -32000, "boom"), ErrorCategory.UPSTREAM),
            (KeyError("oops"), ErrorCategory.INTERNAL),
            (None, ErrorCategory.BAD_REQUEST),
        ],
    )
    def test_classification(self, original, expected) -> None:
        assert error_code(wrap(original)) == expected

    def test_nested_graphql_error(self) -> None:
        inner = wrap(NotFoundException("missing"))

        assert error_code(wrap(inner)) == ErrorCategory.NOT_FOUND

    def test_user_facing(self) -> None:
        assert is_user_facing_error(wrap(NotFoundException("missing")))
        assert not is_user_facing_error(wrap(RuntimeError("secret")))


@pytest.mark.unit
class TestFormatError:
    def test_not_found_keeps_message_and_details(self) -> None:
        error = wrap(NotFoundException("Object '0x5' not found", type="object-not-found", extra={"key": "0x5"}))

        formatted = format_error(error, production=True)

        assert formatted.message == "Object '0x5' not found"
        assert formatted.extensions["code"] == "NOT_FOUND"
        assert formatted.extensions["type"] == "object-not-found"
        assert formatted.extensions["status"] == 404
        assert formatted.extensions["details"] == {"key": "0x5"}
        assert formatted.path == ["checkpoint"]

    def test_upstream_masked_in_production(self) -> None:
        error = wrap(LedgerTransportError("sui_getCheckpoint", "connect to 10.0.0.7 refused"))

        formatted = format_error(error, production=True)

        assert formatted.message == UPSTREAM_MESSAGE
        assert formatted.extensions["code"] == "UPSTREAM_ERROR"
        assert "details" not in formatted.extensions

    def test_upstream_visible_in_development(self) -> None:
        error = wrap(LedgerTransportError("sui_getCheckpoint", "HTTP 503"))

        formatted = format_error(error, production=False)

        assert "HTTP 503" in formatted.message
        assert "details" not in formatted.extensions

    def test_internal_masked_in_production(self) -> None:
        formatted = format_error(wrap(RuntimeError("db password is hunter2")), production=True)

        assert formatted.message == INTERNAL_MESSAGE
        assert "timestamp" in formatted.extensions
        assert "debug" not in formatted.extensions

    def test_internal_debug_in_development(self) -> None:
        formatted = format_error(wrap(RuntimeError("boom")), production=False)

        assert formatted.message == "boom"
        assert formatted.extensions["debug"] == {
            "exception_type": "RuntimeError",
            "exception_message": "boom",
        }

    def test_validation_error_is_bad_request(self) -> None:
        formatted = format_error(wrap(None, "Cannot query field 'nope' on type 'Query'."), production=True)

        assert formatted.extensions["code"] == "BAD_REQUEST"
        assert formatted.message == "Cannot query field 'nope' on type 'Query'."


@pytest.mark.unit
class TestEnsureErrorCode:
    def test_literal_parse_failure_is_bad_request(self) -> None:
        error = GraphQLError("Expected value of type 'SuiAddress!'", original_error=ValueError("bad address"))

        ensure_error_code(error)

        assert error.extensions == {"code": "BAD_REQUEST"}

    def test_existing_code_kept(self) -> None:
        error = GraphQLError("boom", extensions={"code": "UPSTREAM_ERROR"})

        ensure_error_code(error)

        assert error.extensions == {"code": "UPSTREAM_ERROR"}
