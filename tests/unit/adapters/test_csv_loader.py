"""Tests for the admin roster CSV loader."""

import csv
import tempfile
from pathlib import Path

import pytest

from appeal_engine.adapters.csv_loader.loader import load_admin_roster


def _write_csv(rows: list[dict], path: Path, encoding: str = "utf-8-sig", delimiter: str = ",") -> None:
    """Helper to write a test CSV file."""
    if not rows:
        return
    with open(path, "w", encoding=encoding, newline="") as f:
        writer = csv.DictWriter(f, fieldnames=rows[0].keys(), delimiter=delimiter)
        writer.writeheader()
        writer.writerows(rows)


def test_load_roster_basic():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "admins.csv"
        _write_csv([
            {"Admin ID": "1001", "Available": "yes", "Expertise": "scholarship:3; dormitory:2"},
            {"Admin ID": "1002", "Available": "no", "Expertise": ""},
        ], csv_path)

        admins = load_admin_roster(csv_path)
        assert len(admins) == 2
        assert admins[0] == {
            "admin_id": 1001,
            "is_available": True,
            "expertise": {"scholarship": 3, "dormitory": 2},
        }
        assert admins[1]["is_available"] is False
        assert admins[1]["expertise"] == {}


def test_load_roster_semicolon_delimiter():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "admins.csv"
        _write_csv([
            {"telegram_id": "55", "categories": "events"},
        ], csv_path, delimiter=";")

        admins = load_admin_roster(csv_path)
        assert admins == [{"admin_id": 55, "is_available": True, "expertise": {"events": 1}}]


def test_load_roster_skips_invalid_ids():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "admins.csv"
        _write_csv([
            {"admin_id": "abc"},
            {"admin_id": ""},
            {"admin_id": " 7 "},
        ], csv_path)

        admins = load_admin_roster(csv_path)
        assert [a["admin_id"] for a in admins] == [7]


def test_load_roster_empty_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "admins.csv"
        csv_path.write_text("", encoding="utf-8")

        with pytest.raises(ValueError):
            load_admin_roster(csv_path)
