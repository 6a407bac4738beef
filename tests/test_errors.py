"""Tests for SCRU64 error handling."""

import pytest

from scru64.errors import (
    CounterModeError,
    GlobalGeneratorConfigError,
    InvalidSyntaxError,
    OutOfRangeError,
    Scru64Error,
)


class TestScru64Error:
    """Test Scru64Error base class."""

    def test_basic_error_creation(self) -> None:
        """Test creating a basic Scru64Error."""
        error = Scru64Error(code="scru64:test/error", message="Test error message")

        assert error.code == "scru64:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_to_dict(self) -> None:
        """Test serializing an error to a dict."""
        error = Scru64Error("scru64:test/error", "msg", {"key": "value"})

        assert error.to_dict() == {
            "code": "scru64:test/error",
            "message": "msg",
            "details": {"key": "value"},
        }

    def test_error_details_not_shared(self) -> None:
        """Test that details dict is not shared between instances."""
        error1 = Scru64Error("code", "msg")
        error2 = Scru64Error("code", "msg")

        error1.details["key"] = "value"

        assert error2.details == {}


class TestInvalidSyntaxError:
    """Test InvalidSyntaxError class."""

    def test_carries_rejected_value(self) -> None:
        """Test that the rejected input is kept on the error."""
        error = InvalidSyntaxError("invalid string representation", "0u375nxqh5c")

        assert error.code == "scru64:syntax/invalid"
        assert error.value == "0u375nxqh5c"
        assert error.details == {"value": "0u375nxqh5c"}

    def test_is_value_error(self) -> None:
        """Test that syntax errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise InvalidSyntaxError("invalid", "x")


class TestOutOfRangeError:
    """Test OutOfRangeError class."""

    def test_default_message_names_field(self) -> None:
        """Test that the default message mentions the field."""
        error = OutOfRangeError("timestamp", -1)

        assert error.message == "`timestamp` out of range"
        assert error.field == "timestamp"
        assert error.value == -1
        assert error.details == {"field": "timestamp", "value": "-1"}

    def test_custom_message(self) -> None:
        """Test that a custom message replaces the default one."""
        error = OutOfRangeError("node_id", 256, message="`node_id` must fit in 8 bits")

        assert str(error) == "`node_id` must fit in 8 bits"
        assert isinstance(error, ValueError)


class TestCounterModeError:
    """Test CounterModeError class."""

    def test_reports_counter_and_size(self) -> None:
        """Test that the error records the offending counter and its width."""
        error = CounterModeError(1 << 16, 16)

        assert error.code == "scru64:internal/counter_mode"
        assert error.counter == 65536
        assert error.counter_size == 16
        assert "16 bits" in error.message
        assert isinstance(error, RuntimeError)
        assert not isinstance(error, ValueError)


class TestGlobalGeneratorConfigError:
    """Test GlobalGeneratorConfigError class."""

    def test_basic_creation(self) -> None:
        """Test creating a configuration error."""
        error = GlobalGeneratorConfigError(
            "could not read config from SCRU64_NODE_SPEC env var",
            details={"variable": "SCRU64_NODE_SPEC"},
        )

        assert error.code == "scru64:config/global_generator"
        assert error.details["variable"] == "SCRU64_NODE_SPEC"
        assert isinstance(error, Scru64Error)
