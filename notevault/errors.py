"""Exception hierarchy for vault, note and index operations.

Filesystem failures and index failures are kept apart so that a caller can
tell "nothing happened" from "the file is on disk but the index lags".
"""
from __future__ import annotations

from typing import Any


class NoteVaultError(Exception):
    """Base exception for all notevault errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NoteNotFoundError(NoteVaultError):
    """Raised when no note file exists for a canonical id."""

    def __init__(self, canonical_id: str, vault: str | None = None):
        details = {"canonical_id": canonical_id}
        if vault:
            details["vault"] = vault
        super().__init__(f"Note '{canonical_id}' not found", details)
        self.canonical_id = canonical_id


class VaultNotFoundError(NoteVaultError):
    def __init__(self, name: str, path: Any = None):
        super().__init__(f"Vault '{name}' not found", {"path": str(path)} if path else None)
        self.name = name


class NoteConflictError(NoteVaultError):
    """Raised when a rename/update would overwrite a different note."""

    def __init__(self, source_id: str, target_id: str):
        super().__init__(
            f"Cannot move note '{source_id}': '{target_id}' already exists",
            {"source_id": source_id, "target_id": target_id},
        )
        self.source_id = source_id
        self.target_id = target_id


class InvalidIdentifierError(NoteVaultError):
    """Raised when neither title nor content yields a usable canonical id."""

    def __init__(self, raw: str, kind: str = "note"):
        super().__init__(f"Cannot derive a {kind} identifier from {raw!r}", {"raw": raw})
        self.raw = raw


class WriteVerificationError(NoteVaultError):
    """Raised when a written note is missing or empty on re-check."""

    def __init__(self, path: Any, reason: str):
        super().__init__(f"Write verification failed: {reason}", {"path": str(path)})
        self.path = path
        self.reason = reason


class VaultIOError(NoteVaultError):
    """Generic filesystem failure (permissions, disk full, ...)."""

    def __init__(self, message: str, path: Any = None):
        super().__init__(message, {"path": str(path)} if path is not None else None)
        self.path = path


class IndexCreationError(NoteVaultError):
    def __init__(self, message: str, path: Any = None):
        super().__init__(message, {"path": str(path)} if path is not None else None)
        self.path = path


class SearchIndexError(NoteVaultError):
    """Raised when an index add/delete/commit/search fails.

    ``file_committed`` is True when the filesystem side of the operation
    already happened and only the indexing step needs to be re-attempted.
    """

    def __init__(
        self,
        message: str,
        *,
        canonical_id: str | None = None,
        file_committed: bool = False,
    ):
        details: dict[str, Any] = {}
        if canonical_id is not None:
            details["canonical_id"] = canonical_id
        if file_committed:
            details["file_committed"] = True
        super().__init__(message, details)
        self.canonical_id = canonical_id
        self.file_committed = file_committed
