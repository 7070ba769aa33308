"""Tests for bk_common.id_generator and bk_common.datetime_utils."""

from datetime import UTC, date, datetime

import pytest

from src.bk_common.datetime_utils import parse_date, utc_now
from src.bk_common.id_generator import IdGenerator, new_id


class TestIdGenerator:
    def test_prefixed(self) -> None:
        assert new_id("ent").startswith("ent_")

    def test_unique_ids(self) -> None:
        gen = IdGenerator(node_id=1)
        ids = {gen.new_id("stl") for _ in range(5000)}
        assert len(ids) == 5000

    def test_monotonically_increasing(self) -> None:
        gen = IdGenerator(node_id=3)
        prev = gen.next_int()
        for _ in range(200):
            current = gen.next_int()
            assert current > prev
            prev = current

    def test_node_id_range(self) -> None:
        with pytest.raises(ValueError):
            IdGenerator(node_id=1024)


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo == UTC

    def test_parse_date_accepts_iso_string(self) -> None:
        assert parse_date(" 2026-03-01 ") == date(2026, 3, 1)

    def test_parse_date_truncates_datetime(self) -> None:
        assert parse_date(datetime(2026, 3, 1, 15, 30)) == date(2026, 3, 1)

    def test_parse_date_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_date("01/03/2026")
        with pytest.raises(ValueError):
            parse_date(20260301)
