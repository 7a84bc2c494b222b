"""Tests for sequence id formatting and atomic allocation."""

import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from workhub.core.modules.counter.models import EntityType, format_sequence_id, parse_sequence_id
from workhub.errors import RetryableConflictError, ValidationError
from workhub.utils import now


class TestFormatSequenceId:
    """Tests for format_sequence_id."""

    def test_prefix_year_and_padding(self):
        """Test that ids are prefix, two-digit year and zero-padded sequence."""
        assert format_sequence_id(EntityType.SPACE, 2025, 1) == "SPC25001"
        assert format_sequence_id(EntityType.BUILDING, 2025, 42) == "BLD25042"
        assert format_sequence_id(EntityType.CITY, 2030, 7) == "CIT30007"
        assert format_sequence_id(EntityType.SERVICE, 2025, 3) == "SVC25003"

    def test_orders_use_four_digits(self):
        assert format_sequence_id(EntityType.ORDER, 2025, 1) == "ORD250001"

    def test_sequence_grows_past_padding(self):
        """Test that sequences above the padding width are not truncated."""
        assert format_sequence_id(EntityType.SPACE, 2025, 1234) == "SPC251234"

    def test_non_positive_sequence_rejected(self):
        with pytest.raises(ValueError, match="positive"):
            format_sequence_id(EntityType.SPACE, 2025, 0)


class TestParseSequenceId:
    """Tests for parse_sequence_id."""

    def test_parses_parts(self):
        parsed = parse_sequence_id("SPC25001")
        assert parsed.entity_type == EntityType.SPACE
        assert parsed.year_suffix == 25
        assert parsed.sequence == 1

    def test_parses_order_id(self):
        parsed = parse_sequence_id("ORD260012")
        assert parsed.entity_type == EntityType.ORDER
        assert parsed.sequence == 12

    @pytest.mark.parametrize("value", ["XYZ25001", "SPC2501", "spc25001", "SPC-25-001", "ORD25001", ""])
    def test_invalid_ids_rejected(self, value):
        with pytest.raises(ValidationError, match="Invalid id format"):
            parse_sequence_id(value)


class TestCounterService:
    """Tests for CounterService against the in-memory database."""

    async def test_first_allocation_starts_at_one(self, core):
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25001"
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25002"

    async def test_entity_types_have_independent_counters(self, core):
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25001"
        assert await core.services.counter.allocate(EntityType.BUILDING, 2025) == "BLD25001"
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25002"

    async def test_new_year_starts_new_scope(self, core):
        """Test that a new year restarts at 1 while the old year's counter is kept."""
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25001"
        assert await core.services.counter.allocate(EntityType.SPACE, 2026) == "SPC26001"
        assert await core.services.counter.peek(EntityType.SPACE, 2025) == 1
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25002"

    async def test_default_year_is_current(self, core):
        sequence_id = await core.services.counter.allocate(EntityType.CITY)
        assert sequence_id == f"CIT{now().year % 100:02d}001"

    async def test_concurrent_allocations_are_unique_and_gapless(self, core):
        """Test that N concurrent allocations return exactly 1..N."""
        ids = await asyncio.gather(*(core.services.counter.allocate(EntityType.ORDER, 2025) for _ in range(50)))
        sequences = sorted(parse_sequence_id(sequence_id).sequence for sequence_id in ids)
        assert sequences == list(range(1, 51))
        assert await core.services.counter.peek(EntityType.ORDER, 2025) == 50

    async def test_peek_unknown_scope_is_zero(self, core):
        assert await core.services.counter.peek(EntityType.SERVICE, 2025) == 0

    async def test_lost_upsert_race_is_retried(self, core, database):
        """Test that a DuplicateKeyError from a concurrent first upsert is retried."""
        database.get_collection("counters").fail_next("find_one_and_update", DuplicateKeyError("E11000", 11000))
        assert await core.services.counter.allocate(EntityType.SPACE, 2025) == "SPC25001"

    async def test_exhausted_retries_raise_retryable_conflict(self, core, database, monkeypatch):
        async def always_duplicate(*args, **kwargs):
            raise DuplicateKeyError("E11000", 11000)

        monkeypatch.setattr(database.get_collection("counters"), "find_one_and_update", always_duplicate)
        with pytest.raises(RetryableConflictError, match="after 3 attempts"):
            await core.services.counter.allocate(EntityType.SPACE, 2025)
        assert await core.services.counter.peek(EntityType.SPACE, 2025) == 0
