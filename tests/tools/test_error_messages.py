"""Tests for boond_mcp.tools.error_messages: get_user_message + handle_tool_error."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from boond_mcp.clients.resilience import (
    AuthError,
    CircuitOpenError,
    NotFoundError,
    PermanentAPIError,
    TransientAPIError,
    ValidationError,
)
from boond_mcp.models.boond import EntityId
from boond_mcp.tools.error_messages import (
    format_validation_errors,
    get_user_message,
    handle_tool_error,
)


def _pydantic_error() -> PydanticValidationError:
    with pytest.raises(PydanticValidationError) as exc_info:
        EntityId.model_validate({})
    return exc_info.value


class TestGetUserMessage:
    def test_not_found(self):
        assert get_user_message(NotFoundError("x", 404), "retrieving", "Candidate") == (
            "Candidate not found"
        )

    def test_api_validation_error(self):
        msg = get_user_message(ValidationError("email taken", 422), "creating", "Candidate")
        assert msg == "Validation error: email taken"

    def test_pydantic_validation_error(self):
        msg = get_user_message(_pydantic_error(), "retrieving", "Company")
        assert msg.startswith("Validation error: ")
        assert "id" in msg

    def test_auth_error(self):
        msg = get_user_message(AuthError("401", 401), "searching", "Candidates")
        assert "BOOND_API_TOKEN" in msg

    def test_circuit_open(self):
        msg = get_user_message(CircuitOpenError("boond"), "searching", "Companies")
        assert "temporarily unavailable" in msg

    def test_transient_error(self):
        msg = get_user_message(TransientAPIError("HTTP 503", 503), "updating", "Candidate")
        assert "temporary issue updating candidate" in msg

    def test_permanent_error(self):
        msg = get_user_message(PermanentAPIError("HTTP 403", 403), "updating", "Candidate")
        assert msg == "Error updating candidate: HTTP 403"

    def test_unknown_error(self):
        msg = get_user_message(RuntimeError("oops"), "searching", "Companies")
        assert msg == "Error searching companies: oops"


class TestFormatValidationErrors:
    def test_field_and_message(self):
        assert format_validation_errors(_pydantic_error()).startswith("id: ")


class TestHandleToolError:
    def test_returns_error_result(self):
        result = handle_tool_error(NotFoundError("x", 404), "retrieving", "Company")
        assert result.is_error is True
        assert result.content[0].text == "Company not found"

    def test_unexpected_errors_logged_with_traceback(self, caplog):
        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            handle_tool_error(exc, "searching", "Candidates")
        assert "Tool error while searching candidates" in caplog.text
        assert caplog.records[-1].exc_info is not None
