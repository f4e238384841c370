# notevault/vault/filesystem.py

from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path


def ensure_directory(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_text(
    path: Path,
    text: str,
    *,
    encoding: str = "utf-8",
) -> None:
    """
    Atomic-ish file write:
    - write to temp file in same directory
    - fsync
    - replace()

    Readers never observe a half-written note.
    """
    path = Path(path)
    parent = ensure_directory(path.parent)

    tmp_path = parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def read_text(path: Path, *, encoding: str = "utf-8") -> str:
    return Path(path).read_text(encoding=encoding)


def remove_file(path: Path) -> bool:
    """Delete a file if present. Returns True if something was removed."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    return True


def remove_tree(path: Path) -> bool:
    path = Path(path)
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True


def list_stems(directory: Path, suffix: str) -> list[str]:
    """File stems in `directory` with `suffix`, in filesystem enumeration order."""
    directory = Path(directory)
    return [
        entry.name[: -len(suffix)]
        for entry in os.scandir(directory)
        if entry.is_file() and entry.name.endswith(suffix) and not entry.name.startswith(".")
    ]
