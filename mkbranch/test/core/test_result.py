"""Tests for mkbranch.core.result module."""

import pytest

from mkbranch.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_carries_value(self) -> None:
        """Ok exposes its value and reports success."""
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap_and_unwrap_or(self) -> None:
        """unwrap returns the value; unwrap_or ignores the default."""
        result = Ok("wmf/1.40")
        assert result.unwrap() == "wmf/1.40"
        assert result.unwrap_or("master") == "wmf/1.40"

    def test_map(self) -> None:
        """map transforms the carried value."""
        assert Ok(2).map(lambda v: v * 3) == Ok(6)

    def test_repr(self) -> None:
        assert repr(Ok("x")) == "Ok('x')"


class TestErr:
    """Tests for Err type."""

    def test_carries_error(self) -> None:
        """Err exposes its error and reports failure."""
        result = Err("boom")
        assert result.error == "boom"
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_unwrap_raises(self) -> None:
        """unwrap on an Err raises ValueError naming the error."""
        with pytest.raises(ValueError, match="called unwrap on Err: boom"):
            Err("boom").unwrap()

    def test_unwrap_or_returns_default(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_map_is_noop(self) -> None:
        """map leaves an Err untouched."""
        err = Err("boom")
        assert err.map(lambda v: v) is err

    def test_frozen(self) -> None:
        err = Err("boom")
        with pytest.raises(AttributeError):
            err.error = "other"  # type: ignore[misc]


class TestGuards:
    """Tests for is_ok / is_err type guards."""

    def test_guards(self) -> None:
        ok: Result[int, str] = Ok(1)
        err: Result[int, str] = Err("no")
        assert is_ok(ok) and not is_err(ok)
        assert is_err(err) and not is_ok(err)

    def test_pattern_matching(self) -> None:
        """Results work with structural pattern matching."""

        def describe(result: Result[int, str]) -> str:
            match result:
                case Ok(value):
                    return f"value {value}"
                case Err(error):
                    return f"error {error}"

        assert describe(Ok(3)) == "value 3"
        assert describe(Err("x")) == "error x"
