"""Column widths in the migrations must admit everything validation accepts."""

import re
from pathlib import Path

import pytest

from src.bk_common.errors import ValidationError
from src.bk_ledger.domain.validation import (
    MAX_NOTES_LENGTH,
    MAX_PARTY_NAME_LENGTH,
    validate_notes,
)

VERSIONS = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def _varchar_width(migration: str, column: str) -> int:
    sql = (VERSIONS / migration).read_text()
    match = re.search(rf"^\s*{column}\s+VARCHAR\((\d+)\)", sql, re.MULTILINE)
    assert match is not None, f"{column} not declared in {migration}"
    return int(match.group(1))


class TestNotesLength:
    def test_longest_note_accepted(self) -> None:
        assert validate_notes("x" * MAX_NOTES_LENGTH) == "x" * MAX_NOTES_LENGTH

    def test_one_over_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_notes("x" * (MAX_NOTES_LENGTH + 1))
        assert exc_info.value.rule == "notes"

    @pytest.mark.parametrize(
        "migration",
        ["002_create_entries.py", "003_create_settlements.py"],
    )
    def test_notes_column_fits_the_limit(self, migration: str) -> None:
        assert _varchar_width(migration, "notes") >= MAX_NOTES_LENGTH


class TestPartyNameLength:
    def test_name_column_fits_the_limit(self) -> None:
        assert _varchar_width("001_create_parties.py", "name") >= MAX_PARTY_NAME_LENGTH
