"""Parsers for wide-format Zillow CSV exports."""

import csv
import io
from collections.abc import Iterable

from .models import RawRecord


class DatasetParseError(ValueError):
    """Raised when an uploaded dataset cannot be read as CSV."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"CSV parsing error in {file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


def _read_csv(text: str) -> Iterable[RawRecord]:
    """Read a comma-separated payload into string-only dictionaries."""
    buffer = io.StringIO(text, newline="")
    reader = csv.DictReader(buffer)
    for row in reader:
        # Skip blank lines, including rows of empty separators at EOF.
        if all(value is None or value.strip() == "" for key, value in row.items() if key):
            continue
        # Short rows pad with None; overflow cells land under a None key.
        yield {key: (value or "") for key, value in row.items() if key is not None}


def parse_csv_text(text: str, file_name: str = "<memory>") -> list[RawRecord]:
    """Parse decoded CSV text; the header row becomes the record keys."""
    try:
        return list(_read_csv(text))
    except csv.Error as exc:
        raise DatasetParseError(file_name, str(exc)) from exc


def parse_csv_bytes(payload: bytes, file_name: str = "<memory>") -> list[RawRecord]:
    """Decode UTF-8 (BOM tolerated) file bytes and parse them as CSV."""
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DatasetParseError(file_name, f"not valid UTF-8 ({exc.reason})") from exc
    return parse_csv_text(text, file_name)


__all__ = ["DatasetParseError", "parse_csv_bytes", "parse_csv_text"]
