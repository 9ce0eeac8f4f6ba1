"""Tests for shipit.core.result module."""

import pytest

from shipit.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_create_ok(self) -> None:
        result = Ok(42)
        assert result.value == 42

    def test_ok_is_ok(self) -> None:
        assert Ok(42).is_ok() is True
        assert Ok(42).is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or(self) -> None:
        """Ok.unwrap_or() returns the value, ignoring default."""
        assert Ok(42).unwrap_or(0) == 42

    def test_ok_map(self) -> None:
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_ok_map_err(self) -> None:
        """Ok.map_err() returns self unchanged."""
        assert Ok(42).map_err(lambda e: f"error: {e}") == Ok(42)

    def test_ok_frozen(self) -> None:
        result = Ok(42)
        with pytest.raises(AttributeError):
            result.value = 0  # type: ignore[misc]


class TestErr:
    """Tests for Err type."""

    def test_err_is_err(self) -> None:
        assert Err("boom").is_err() is True
        assert Err("boom").is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_err_map(self) -> None:
        """Err.map() leaves the error untouched."""
        assert Err("boom").map(lambda x: x * 2) == Err("boom")

    def test_err_map_err(self) -> None:
        assert Err("boom").map_err(lambda e: f"wrapped: {e}") == Err("wrapped: boom")


class TestTypeGuards:
    def test_is_ok(self) -> None:
        result: Result[int, str] = Ok(1)
        assert is_ok(result)
        assert not is_err(result)

    def test_is_err(self) -> None:
        result: Result[int, str] = Err("x")
        assert is_err(result)
        assert not is_ok(result)

    def test_pattern_matching(self) -> None:
        """Results work with structural pattern matching."""
        result: Result[int, str] = Err("nope")
        match result:
            case Ok(value):
                seen = f"ok {value}"
            case Err(error):
                seen = f"err {error}"
        assert seen == "err nope"
