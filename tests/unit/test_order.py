"""Tests for order parsing, normalization and reversal."""

import pytest

from keyset_pagination.errors.problem_details import InvalidOrderError
from keyset_pagination.pagination.order import (
    Direction, JoinedTerm, NullPlacement, PlainTerm,
    normalize_order, parse_term, reverse_order
)
from keyset_pagination.pagination.predicate import ColumnRef, Operator


class TestDirection:
    """Test direction parsing and the direction table."""

    @pytest.mark.parametrize("raw, expected", [
        ("asc", Direction.ASC),
        ("DESC", Direction.DESC),
        ("desc nulls first", Direction.DESC_NULLS_FIRST),
        ("ASC  NULLS\tLAST", Direction.ASC_NULLS_LAST),
        ("Desc Nulls Last", Direction.DESC_NULLS_LAST),
        ("asc nulls first", Direction.ASC_NULLS_FIRST),
        (None, Direction.ASC),
        ("", Direction.ASC),
        (Direction.DESC, Direction.DESC),
    ])
    def test_parse(self, raw, expected):
        """Directions parse case- and whitespace-insensitively."""
        assert Direction.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["up", "ASC NULLS", 1])
    def test_parse_invalid(self, raw):
        """Unknown directions are rejected."""
        with pytest.raises(InvalidOrderError):
            Direction.parse(raw)

    @pytest.mark.parametrize("direction, op, nulls", [
        (Direction.ASC, Operator.GT, NullPlacement.DEFAULT),
        (Direction.DESC, Operator.LT, NullPlacement.DEFAULT),
        (Direction.ASC_NULLS_FIRST, Operator.GT, NullPlacement.FIRST),
        (Direction.ASC_NULLS_LAST, Operator.GT, NullPlacement.LAST),
        (Direction.DESC_NULLS_FIRST, Operator.LT, NullPlacement.FIRST),
        (Direction.DESC_NULLS_LAST, Operator.LT, NullPlacement.LAST),
    ])
    def test_direction_table(self, direction, op, nulls):
        """Each direction maps to a comparison operator and NULL placement."""
        assert direction.comparison is op
        assert direction.nulls is nulls
        assert direction.ascending is (op is Operator.GT)


class TestParseTerm:
    """Test the accepted order item shapes."""

    def test_bare_column(self):
        assert parse_term("counter") == PlainTerm("counter", Direction.ASC)

    def test_single_element_list(self):
        assert parse_term(["counter"]) == PlainTerm("counter", Direction.ASC)

    def test_column_and_direction(self):
        assert parse_term(["counter", "desc"]) == PlainTerm("counter", Direction.DESC)

    def test_falsy_direction_defaults_to_asc(self):
        assert parse_term(("counter", None)) == PlainTerm("counter", Direction.ASC)

    def test_entity_reference(self):
        """Mapping entity references contribute their alias."""
        term = parse_term([{"model": object(), "as": "persons"}, "name", "desc"])

        assert term == JoinedTerm("persons", "name", Direction.DESC)
        assert term.ref == ColumnRef("name", "persons")

    def test_entity_reference_without_direction(self):
        assert parse_term([{"alias": "persons"}, "name"]) == JoinedTerm("persons", "name")

    def test_alias_string(self):
        """Three-element items may name the alias directly."""
        assert parse_term(["persons", "name", "asc"]) == JoinedTerm("persons", "name")

    def test_terms_pass_through(self):
        term = JoinedTerm("persons", "name", Direction.DESC)
        assert parse_term(term) is term

    @pytest.mark.parametrize("item", [
        [],
        [None],
        ["a", "b", "c", "d"],
        [{"model": object()}, "name", "asc"],
        [{"as": "persons"}],
        [1, "asc"],
        [object(), "name", "asc"],
        42,
    ])
    def test_malformed_items(self, item):
        """Unsupported shapes raise InvalidOrderError."""
        with pytest.raises(InvalidOrderError):
            parse_term(item)


class TestNormalizeOrder:
    """Test canonical order construction."""

    def test_empty_order_gets_primary_key(self):
        assert normalize_order(None, "id") == (PlainTerm("id"),)
        assert normalize_order([], "id") == (PlainTerm("id"),)

    def test_primary_key_appended(self):
        order = normalize_order([["counter", "desc"], "extra"], "id")

        assert order == (
            PlainTerm("counter", Direction.DESC),
            PlainTerm("extra"),
            PlainTerm("id"),
        )

    def test_primary_key_already_present(self):
        """A primary key already in the order keeps its direction."""
        order = normalize_order([["id", "desc"]], "id")
        assert order == (PlainTerm("id", Direction.DESC),)

    def test_composite_primary_key(self):
        order = normalize_order([["tenant", "desc"]], ["tenant", "number"])

        assert order == (PlainTerm("tenant", Direction.DESC), PlainTerm("number"))

    def test_joined_column_does_not_count_as_primary_key(self):
        """Only plain terms satisfy the primary-key tie-break."""
        order = normalize_order([[{"as": "persons"}, "id", "asc"]], "id")

        assert order == (JoinedTerm("persons", "id"), PlainTerm("id"))

    def test_omit_primary_key(self):
        assert normalize_order([["counter", "asc"]], "id", omit_primary_key_from_order=True) == (
            PlainTerm("counter"),
        )

    def test_bare_string_order(self):
        assert normalize_order("counter", "id") == (PlainTerm("counter"), PlainTerm("id"))

    def test_duplicates_are_kept(self):
        """Normalization does not deduplicate."""
        order = normalize_order(["counter", "counter"], "id")
        assert len(order) == 3

    def test_caller_order_is_not_mutated(self):
        raw = [["counter", None]]
        normalize_order(raw, "id")
        assert raw == [["counter", None]]


class TestReverseOrder:
    """Test order reversal for backward pagination."""

    @pytest.mark.parametrize("original, reversed_", [
        (Direction.ASC, Direction.DESC),
        (Direction.DESC, Direction.ASC),
        (Direction.ASC_NULLS_LAST, Direction.DESC),
        (Direction.ASC_NULLS_FIRST, Direction.DESC),
        (Direction.DESC_NULLS_FIRST, Direction.ASC),
        (Direction.DESC_NULLS_LAST, Direction.ASC),
    ])
    def test_plain_reversal_drops_nulls(self, original, reversed_):
        order = reverse_order((PlainTerm("a", original),))
        assert order == (PlainTerm("a", reversed_),)

    @pytest.mark.parametrize("original, reversed_", [
        (Direction.ASC, Direction.DESC_NULLS_FIRST),
        (Direction.DESC, Direction.ASC_NULLS_LAST),
        (Direction.ASC_NULLS_LAST, Direction.DESC_NULLS_FIRST),
        (Direction.DESC_NULLS_FIRST, Direction.ASC_NULLS_LAST),
        (Direction.DESC_NULLS_LAST, Direction.ASC_NULLS_FIRST),
        (Direction.ASC_NULLS_FIRST, Direction.DESC_NULLS_LAST),
    ])
    def test_enforced_reversal_flips_nulls(self, original, reversed_):
        order = reverse_order((PlainTerm("a", original),), enforce_null_order=True)
        assert order == (PlainTerm("a", reversed_),)

    def test_reversal_keeps_term_kind(self):
        order = (JoinedTerm("persons", "name", Direction.ASC), PlainTerm("id"))

        assert reverse_order(order, enforce_null_order=True) == (
            JoinedTerm("persons", "name", Direction.DESC_NULLS_FIRST),
            PlainTerm("id", Direction.DESC_NULLS_FIRST),
        )

    def test_double_enforced_reversal_is_identity_for_explicit_nulls(self):
        order = (PlainTerm("a", Direction.DESC_NULLS_LAST), PlainTerm("b", Direction.ASC_NULLS_FIRST))
        assert reverse_order(reverse_order(order, True), True) == order

    def test_input_is_not_mutated(self):
        order = (PlainTerm("a", Direction.ASC),)
        reverse_order(order, enforce_null_order=True)
        assert order == (PlainTerm("a", Direction.ASC),)
