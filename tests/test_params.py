"""Tests for parameter substitution."""

import pytest

from pgkit.core.guards import ParameterError
from pgkit.core.params import check_parameters, substitute, to_literal


def test_substitute_string_escapes_quote():
    """Test single quotes are doubled."""
    result = substitute("SELECT * FROM t WHERE name = $1", ["O'Brien"])
    assert result == "SELECT * FROM t WHERE name = 'O''Brien'"


def test_substitute_types():
    """Test NULL, booleans and numbers."""
    result = substitute("VALUES ($1, $2, $3, $4, $5)", [None, True, False, 42, 1.5])
    assert result == "VALUES (NULL, TRUE, FALSE, 42, 1.5)"


def test_substitute_backslash_and_nul():
    """Test backslashes are doubled and NUL bytes stripped."""
    assert to_literal("a\\b\x00c") == "'a\\\\bc'"


def test_substitute_negative_number_parenthesized():
    """Test negative numbers cannot form a -- comment."""
    assert substitute("SELECT 10 -$1", [-5]) == "SELECT 10 -(-5)"


def test_substitute_ten_not_prefix_of_one():
    """Test $1 does not match inside $10."""
    parameters = [f"v{i}" for i in range(1, 11)]
    result = substitute("SELECT $1, $10", parameters)
    assert result == "SELECT 'v1', 'v10'"


def test_substitute_single_pass():
    """Test inserted text is not rescanned for placeholders."""
    assert substitute("SELECT $1, $2", ["$2", "x"]) == "SELECT '$2', 'x'"


def test_substitute_missing_parameter_untouched():
    """Test placeholders without a parameter are left as-is."""
    assert substitute("SELECT $1, $3", ["a"]) == "SELECT 'a', $3"


def test_substitute_no_parameters():
    """Test None and empty parameters leave the statement unchanged."""
    assert substitute("SELECT $1", None) == "SELECT $1"
    assert substitute("SELECT $1", []) == "SELECT $1"


def test_substitute_repeated_placeholder():
    """Test a placeholder used twice is replaced twice."""
    assert substitute("SELECT $1 WHERE $1 = 'a'", ["a"]) == "SELECT 'a' WHERE 'a' = 'a'"


def test_infinity_rejected():
    """Test non-finite numbers are rejected."""
    with pytest.raises(ParameterError, match=r"\$1 must be a finite number"):
        substitute("SELECT $1", [float("inf")])


def test_nan_rejected():
    """Test NaN is rejected."""
    with pytest.raises(ParameterError, match="finite"):
        check_parameters([1, float("nan")])


def test_object_rejected():
    """Test dict parameters are rejected."""
    with pytest.raises(ParameterError, match=r"\$1 has unsupported type dict"):
        substitute("SELECT $1", [{}])


def test_rejection_is_all_or_nothing():
    """Test a bad later parameter rejects the whole call."""
    with pytest.raises(ParameterError, match=r"\$2"):
        substitute("SELECT $1, $2", ["ok", [1, 2]])


def test_bool_not_rendered_as_number():
    """Test True renders as TRUE, not 1."""
    assert to_literal(True) == "TRUE"
