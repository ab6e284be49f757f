"""CSV loader — reads and normalizes the admin roster file."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from appeal_engine.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    parse_bool,
    parse_expertise,
)

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Detect the delimiter (comma/semicolon/tab) to support spreadsheet exports."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    delims = [";", ",", "\t"]
    counts = {d: first_line.count(d) for d in delims}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect
    return csv.excel


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = []
        for raw_row in reader:
            row = {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            rows.append(row)

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_admin_roster(file_path: Path) -> list[dict]:
    """Load and normalize the admin roster CSV.

    Expected columns (after normalization):
        admin_id (or telegram_id / id), available (optional),
        expertise (optional, e.g. "scholarship:3; dormitory:2")

    Rows without a numeric admin id are skipped with a warning.
    """
    rows = _read_csv(file_path)
    admins = []
    for line_no, row in enumerate(rows, start=2):
        raw_id = row.get("admin_id") or row.get("telegram_id") or row.get("id")
        admin_id = _parse_int(raw_id)
        if admin_id is None:
            logger.warning("Roster line %d: missing or invalid admin id %r, skipping", line_no, raw_id)
            continue
        admins.append({
            "admin_id": admin_id,
            "is_available": parse_bool(row.get("available") or row.get("is_available")),
            "expertise": parse_expertise(row.get("expertise") or row.get("categories")),
        })
    logger.info("Parsed %d admins", len(admins))
    return admins


def _parse_int(value: str | None) -> int | None:
    """Safely parse an int from a string."""
    if not value:
        return None
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return None
