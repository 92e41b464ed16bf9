"""Wordlist and combo-list loading."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from redfox.errors import ExhaustedInputError

from .defaults import BUILTIN_COMBOS, BUILTIN_WORDLISTS

logger = logging.getLogger(__name__)

WORDLIST_SUFFIXES = (".txt", ".lst", ".list", ".dic", ".dict", ".wordlist")
MAX_ENTRY_LENGTH = 256


def looks_like_path(value: str) -> bool:
    """Return True if the value names a file rather than a literal entry."""
    return (
        os.sep in value
        or "/" in value
        or value.startswith("~")
        or value.lower().endswith(WORDLIST_SUFFIXES)
    )


def find_wordlist(value: str, search_paths: Iterable[str | Path] = ()) -> Path | None:
    """Locate a wordlist file directly or under one of the search paths."""
    direct = Path(value).expanduser()
    if direct.is_file():
        return direct
    for base in search_paths:
        candidate = Path(base).expanduser() / value
        if candidate.is_file():
            return candidate
    return None


def read_entries(path: Path) -> list[str]:
    """Read non-empty, non-comment lines, deduplicated in order."""
    entries: list[str] = []
    seen: set[str] = set()
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as handle:
            for line in handle:
                entry = line.rstrip("\r\n").strip()
                if not entry or entry.startswith("#") or len(entry) > MAX_ENTRY_LENGTH:
                    continue
                if entry in seen:
                    continue
                seen.add(entry)
                entries.append(entry)
    except OSError as exc:
        raise ExhaustedInputError(f"Cannot read wordlist {path}: {exc}") from exc
    return entries


def load_wordlist(value: str | None, search_paths: Iterable[str | Path] = (), role: str = "wordlist") -> list[str]:
    """Load a user or password list.

    ``value`` may be a file (searched in ``search_paths`` when relative), a
    built-in ``@default-*`` name, a comma-separated list, or one literal entry.
    """
    if value is None or not value.strip():
        raise ExhaustedInputError(f"No {role} given")
    value = value.strip()

    if value in BUILTIN_WORDLISTS:
        return list(BUILTIN_WORDLISTS[value])

    path = find_wordlist(value, search_paths)
    if path is not None:
        entries = read_entries(path)
        if not entries:
            raise ExhaustedInputError(f"{role.capitalize()} {path} is empty")
        logger.debug("Loaded %d entries from %s", len(entries), path)
        return entries

    if looks_like_path(value):
        raise ExhaustedInputError(f"{role.capitalize()} not found: {value}")

    if "," in value:
        entries = _dedupe(item.strip() for item in value.split(","))
        if not entries:
            raise ExhaustedInputError(f"{role.capitalize()} {value!r} has no entries")
        return entries
    return [value]


def parse_combo_line(line: str, separator: str = ":") -> tuple[str, str] | None:
    """Split ``user<sep>password`` on the first separator."""
    line = line.rstrip("\r\n")
    if not line.strip() or line.lstrip().startswith("#") or separator not in line:
        return None
    username, password = line.split(separator, 1)
    username = username.strip()
    if not username:
        return None
    return username, password


def load_combos(
    value: str | None,
    search_paths: Iterable[str | Path] = (),
    separator: str = ":",
) -> list[tuple[str, str]]:
    """Load pre-paired credentials for credential-stuffing mode."""
    if value is None or not value.strip():
        raise ExhaustedInputError("No combo list given")
    value = value.strip()
    if value in BUILTIN_COMBOS:
        return list(BUILTIN_COMBOS[value])

    path = find_wordlist(value, search_paths)
    if path is None:
        raise ExhaustedInputError(f"Combo list not found: {value}")

    combos: list[tuple[str, str]] = []
    seen: set[tuple[str, str]] = set()
    skipped = 0
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as handle:
            for line in handle:
                pair = parse_combo_line(line, separator)
                if pair is None:
                    if line.strip() and not line.lstrip().startswith("#"):
                        skipped += 1
                    continue
                if pair in seen:
                    continue
                seen.add(pair)
                combos.append(pair)
    except OSError as exc:
        raise ExhaustedInputError(f"Cannot read combo list {path}: {exc}") from exc

    if skipped:
        logger.warning("Skipped %d malformed line(s) in %s", skipped, path)
    if not combos:
        raise ExhaustedInputError(f"Combo list {path} has no usable entries")
    return combos


def list_available(search_paths: Iterable[str | Path]) -> list[Path]:
    """List wordlist files found under the search paths (one level deep)."""
    found: list[Path] = []
    for base in search_paths:
        root = Path(base).expanduser()
        if root.is_file():
            found.append(root)
            continue
        if not root.is_dir():
            continue
        for path in sorted(root.iterdir()):
            if path.is_file() and path.suffix.lower() in WORDLIST_SUFFIXES:
                found.append(path)
    return found


def _dedupe(values: Iterable[str]) -> list[str]:
    ordered: list[str] = []
    seen: set[str] = set()
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered
