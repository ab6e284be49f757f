"""CSV value normalization — handles BOM, trailing spaces, loose spellings."""

from __future__ import annotations

import re

TRUE_VALUES = {"1", "true", "yes", "y", "так", "да", "+"}
FALSE_VALUES = {"0", "false", "no", "n", "ні", "нет", "-"}


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Removes BOM characters (\\ufeff)
    - Replaces runs of spaces / non-breaking spaces with a single underscore
    - Lowercases
    - Strips non-alphanumeric characters (except underscore)
    """
    name = name.replace("\ufeff", "").strip()
    name = re.sub(r"[\s\u00a0]+", "_", name)
    name = name.lower()
    # Keep Cyrillic letters, drop punctuation
    name = re.sub(r"[^\w]", "", name, flags=re.UNICODE)
    return name


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_bool(raw: str | None, default: bool = True) -> bool:
    """Parse yes/no style cells; empty or unrecognised values give *default*."""
    value = clean_string(raw)
    if value is None:
        return default
    value = value.lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default


def parse_expertise(raw: str | None) -> dict[str, int]:
    """Parse 'scholarship:3; dormitory:2' into {"scholarship": 3, "dormitory": 2}.

    Entries are separated by comma or semicolon; a bare category name means
    level 1. Malformed levels are skipped. Category names are lowercased
    but not validated here.
    """
    if not raw:
        return {}
    result: dict[str, int] = {}
    for part in re.split(r"[,;]+", raw):
        part = part.strip()
        if not part:
            continue
        name, _, level = part.partition(":")
        name = name.strip().lower()
        if not name:
            continue
        level = level.strip()
        if not level:
            result[name] = 1
            continue
        try:
            result[name] = int(level)
        except ValueError:
            continue
    return result
