"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

from decimal import Decimal
from uuid import UUID

import pytest

from ticketing.domain import Buyer, EventId, Interval, Money
from ticketing.domain.errors import (
    BulkCashierConflictError,
    DiscontinuousRangeError,
    ErrorCode,
    EventNotFoundError,
    OutOfBoundsError,
    StoreUnavailableError,
)


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        assert Money(Decimal("25.50")).amount == Decimal("25.50")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money(Decimal("0")).amount == Decimal("0")

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("7.5"))) == "7.50"


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        raw = "12345678-1234-5678-1234-567812345678"
        event_id = EventId.from_string(raw)
        assert event_id.value == UUID(raw)
        assert str(event_id) == raw

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")


class TestInterval:
    """Tests for the inclusive Interval value object."""

    def test_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            Interval(10, 5)

    def test_single_number_interval(self):
        interval = Interval(7, 7)
        assert len(interval) == 1
        assert 7 in interval
        assert 8 not in interval

    def test_size_counts_both_ends(self):
        assert len(Interval(1, 1000)) == 1000

    def test_adjacent_intervals_touch(self):
        """[1,10] and [11,20] share no number but leave no gap."""
        assert Interval(1, 10).touches(Interval(11, 20))
        assert Interval(11, 20).touches(Interval(1, 10))

    def test_overlapping_intervals_touch(self):
        assert Interval(1, 10).touches(Interval(5, 15))

    def test_separated_intervals_do_not_touch(self):
        assert not Interval(1, 10).touches(Interval(12, 20))

    def test_gap_size(self):
        """[1,10] and [15,20] leave 11..14 unallocated."""
        assert Interval(1, 10).gap_to(Interval(15, 20)) == 4
        assert Interval(15, 20).gap_to(Interval(1, 10)) == 4

    def test_union(self):
        assert Interval(5, 10).union(Interval(1, 7)) == Interval(1, 10)

    def test_str(self):
        assert str(Interval(1, 50)) == "1-50"


class TestBuyer:
    """Tests for Buyer value object."""

    def test_rejects_blank_name(self):
        with pytest.raises(ValueError):
            Buyer("   ")

    def test_from_input_strips_and_blanks_to_none(self):
        buyer = Buyer.from_input("  Jane Doe ", "  ", "")
        assert buyer == Buyer("Jane Doe", None, None)

    def test_merge_replaces_name_and_supplied_contacts(self):
        stored = Buyer("Acme", "old@acme.test", "555-0100")
        merged = stored.merged_with(Buyer("Acme Corp", "new@acme.test"))
        assert merged == Buyer("Acme Corp", "new@acme.test", "555-0100")


class TestDomainErrors:
    """Tests for error codes, messages and structured details."""

    def test_str_includes_code(self):
        assert str(EventNotFoundError("abc")) == "EVENT_NOT_FOUND: Event not found"

    def test_discontinuous_range_reports_gap(self):
        exc = DiscontinuousRangeError(Interval(15, 20), Interval(1, 10), 4)
        assert exc.code is ErrorCode.DISCONTINUOUS_RANGE
        assert "Gap size: 4" in exc.message
        assert exc.details() == {"gap_size": 4, "requested": [15, 20], "existing": [1, 10]}

    def test_out_of_bounds_details(self):
        exc = OutOfBoundsError(Interval(1, 1100), Interval(1, 1000))
        assert exc.details() == {"requested": [1, 1100], "bounds": [1, 1000]}

    def test_conflict_lists_numbers(self):
        exc = BulkCashierConflictError(list(range(1, 13)))
        assert exc.details() == {"numbers": list(range(1, 13))}
        assert exc.message.endswith(", ...")

    def test_only_store_unavailable_is_retryable(self):
        assert StoreUnavailableError().retryable
        assert not EventNotFoundError("abc").retryable
