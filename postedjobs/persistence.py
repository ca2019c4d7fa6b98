"""
Atomic JSON persistence for identifier lists.

Every file the store owns (the active set and each archive partition) is a
JSON array of unique strings, sorted lexicographically. Writes go through
write_identifiers_atomic: temp sibling, fsync, os.replace, read-back check.
"""

import contextlib
import json
import os
from pathlib import Path
from typing import Iterable, List


class StoreError(Exception):
    """Base class for store persistence failures."""
    pass


class CorruptStoreError(StoreError):
    """Raised when a store file cannot be parsed as an array of strings."""
    pass


class WriteVerificationError(StoreError):
    """Raised when the file read back after a write disagrees with what was written."""
    pass


def temp_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".tmp")


def normalize_identifiers(ids: Iterable[str]) -> List[str]:
    """Sorted, deduplicated list ready for serialization."""
    return sorted(set(ids))


def read_identifiers(path: Path) -> List[str]:
    """
    Read an identifier file.

    Args:
        path: JSON file holding an array of strings

    Returns:
        The identifiers in file order

    Raises:
        FileNotFoundError: If the file does not exist
        CorruptStoreError: If the content is not a JSON array of strings
    """
    with path.open("r", encoding="utf-8") as f:
        content = f.read()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CorruptStoreError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, list):
        raise CorruptStoreError(f"Expected a JSON array in {path}, got {type(data).__name__}")
    if not all(isinstance(item, str) for item in data):
        raise CorruptStoreError(f"Non-string identifier in {path}")
    return data


def write_identifiers_atomic(path: Path, ids: Iterable[str]) -> List[str]:
    """
    Persist identifiers so that readers only ever see the old or the new file.

    Args:
        path: Final file path
        ids: Identifiers to write; duplicates are collapsed

    Returns:
        The sorted list that was written

    Raises:
        OSError: On any filesystem failure; the previous file is untouched
        WriteVerificationError: If the read-back length differs
    """
    payload = normalize_identifiers(ids)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = temp_path_for(path)

    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            tmp_path.unlink()

    try:
        written = read_identifiers(path)
    except CorruptStoreError as e:
        raise WriteVerificationError(f"Read-back of {path} failed: {e}") from e
    if len(written) != len(payload):
        raise WriteVerificationError(
            f"Write verification failed for {path}: "
            f"expected {len(payload)} identifiers, file contains {len(written)}"
        )
    return payload
