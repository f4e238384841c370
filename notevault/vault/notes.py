from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from notevault.core.links import NoteGraph
from notevault.core.names import (
    derive_canonical_id,
    display_title,
    normalize_whitespace,
    sanitize_identifier,
)
from notevault.errors import (
    InvalidIdentifierError,
    NoteConflictError,
    NoteNotFoundError,
    SearchIndexError,
    VaultIOError,
    WriteVerificationError,
)
from notevault.services.markdown_renderer import MarkdownRenderer
from notevault.settings import APP_NAME, NOTE_SUFFIX

from .filesystem import atomic_write_text, ensure_directory, list_stems, read_text, remove_file
from .manager import Vault

log = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class NoteWriteResult:
    """Outcome of a create/update.

    The file is the source of truth: when `indexed` is False the note is on
    disk and only the indexing step (`NoteStore.reindex_note`) needs a retry.
    """

    canonical_id: str
    title: str
    path: Path
    indexed: bool
    index_error: SearchIndexError | None = None
    previous_id: str | None = None

    @property
    def renamed(self) -> bool:
        return self.previous_id is not None and self.previous_id != self.canonical_id


class NoteStore:
    """
    Filesystem CRUD for the notes of an open vault.

    Every mutation touches the file first and the search index second; a
    failed index step never undoes the file step.
    """

    def __init__(self, renderer: MarkdownRenderer | None = None, graph: NoteGraph | None = None):
        self.renderer = renderer or MarkdownRenderer()
        self.graph = graph

    @staticmethod
    def note_path(vault: Vault, canonical_id: str) -> Path:
        return vault.root_path / f"{canonical_id}{NOTE_SUFFIX}"

    # ───────────────────────── writes ─────────────────────────

    def create_note(self, vault: Vault, title: str, content: str) -> NoteWriteResult:
        shown_title = display_title(title)
        canonical_id = derive_canonical_id(title, content)
        if not canonical_id:
            raise InvalidIdentifierError(title or content)

        clean = normalize_whitespace(content)
        try:
            ensure_directory(vault.root_path)
        except OSError as e:
            raise VaultIOError(f"Cannot create vault directory: {e}", vault.root_path) from e

        path = self.note_path(vault, canonical_id)
        self._write_verified(path, clean)
        log.info("Note written: vault=%s id=%s title=%s", vault.name, canonical_id, shown_title)

        index_error = self._index_best_effort(vault, canonical_id, clean)
        if self.graph is not None:
            self.graph.update_note(canonical_id, clean)

        return NoteWriteResult(
            canonical_id=canonical_id,
            title=shown_title,
            path=path,
            indexed=index_error is None,
            index_error=index_error,
        )

    def update_note(
        self,
        vault: Vault,
        canonical_id: str,
        content: str,
        title: str = "",
    ) -> NoteWriteResult:
        """
        Rewrite a note. The canonical id is derived again; when it changes
        the file is moved and the index entry follows it.
        """
        old_id = self._require_id(canonical_id)
        old_path = self.note_path(vault, old_id)
        if not old_path.is_file():
            raise NoteNotFoundError(old_id, vault.name)

        clean = normalize_whitespace(content)
        if not clean:
            raise WriteVerificationError(old_path, "refusing to write an empty note")
        new_id = derive_canonical_id(title, clean)
        if not new_id:
            raise InvalidIdentifierError(title or content)

        new_path = self.note_path(vault, new_id)
        if new_id != old_id:
            self._move(old_path, new_path, old_id, new_id)

        self._write_verified(new_path, clean)
        log.info("Note updated: vault=%s id=%s previous=%s", vault.name, new_id, old_id)

        index_error = None
        try:
            if new_id != old_id:
                vault.index.delete(old_id)
        except SearchIndexError as e:
            index_error = self._committed_index_error(e, old_id)
        if index_error is None:
            index_error = self._index_best_effort(vault, new_id, clean)

        if self.graph is not None:
            self.graph.rename_note(old_id, new_id, clean)

        return NoteWriteResult(
            canonical_id=new_id,
            title=display_title(title or new_id),
            path=new_path,
            indexed=index_error is None,
            index_error=index_error,
            previous_id=old_id,
        )

    def rename_note(self, vault: Vault, old_canonical_id: str, new_title: str) -> str:
        """
        Give a note a new title: rename file -> delete old index doc -> add
        new index doc. Returns the new canonical id.
        """
        old_id = self._require_id(old_canonical_id)
        old_path = self.note_path(vault, old_id)
        if not old_path.is_file():
            raise NoteNotFoundError(old_id, vault.name)

        content = self._read(old_path)
        new_id = derive_canonical_id(new_title, content)
        if not new_id:
            raise InvalidIdentifierError(new_title)
        if new_id == old_id:
            log.info("Rename skipped, id unchanged: vault=%s id=%s", vault.name, old_id)
            return old_id

        self._move(old_path, self.note_path(vault, new_id), old_id, new_id)
        log.info("Note renamed: vault=%s %s -> %s", vault.name, old_id, new_id)

        if self.graph is not None:
            self.graph.rename_note(old_id, new_id, content)

        try:
            vault.index.delete(old_id)
            vault.index.upsert(new_id, content)
        except SearchIndexError as e:
            raise self._committed_index_error(e, new_id) from e
        return new_id

    def delete_note(self, vault: Vault, canonical_id: str) -> bool:
        """
        Remove the note file (if any), then its index entry.

        Returns True if a file was removed. The file is never recreated when
        the index step fails.
        """
        key = self._require_id(canonical_id)
        path = self.note_path(vault, key)

        try:
            removed = remove_file(path)
        except OSError as e:
            raise VaultIOError(f"Cannot delete note: {e}", path) from e
        if path.exists():
            raise WriteVerificationError(path, "file was not deleted")
        log.info("Note deleted: vault=%s id=%s removed=%s", vault.name, key, removed)

        if self.graph is not None:
            self.graph.remove_note(key)

        try:
            vault.index.delete(key)
        except SearchIndexError as e:
            raise self._committed_index_error(e, key) from e
        return removed

    # ───────────────────────── reads ─────────────────────────

    def read_note(self, vault: Vault, canonical_id: str) -> str:
        key = sanitize_identifier(canonical_id)
        path = self.note_path(vault, key)
        if not key or not path.is_file():
            raise NoteNotFoundError(key or canonical_id, vault.name)
        return self._read(path)

    def list_notes(self, vault: Vault) -> list[str]:
        try:
            return list_stems(vault.root_path, NOTE_SUFFIX)
        except OSError as e:
            raise VaultIOError(f"Cannot list notes: {e}", vault.root_path) from e

    def render_html(self, vault: Vault, canonical_id: str) -> str:
        return self.renderer.render_html(self.read_note(vault, canonical_id))

    def render_page(self, vault: Vault, canonical_id: str) -> str:
        return self.renderer.render_page(self.read_note(vault, canonical_id))

    def note_links(self, vault: Vault, canonical_id: str) -> list[str]:
        return self.renderer.extract_links(self.read_note(vault, canonical_id))

    def search_notes(self, vault: Vault, query: str, limit: int | None = 20) -> list[str]:
        return vault.index.search(query, limit=limit)

    # ───────────────────────── index maintenance ─────────────────────────

    def reindex_note(self, vault: Vault, canonical_id: str) -> None:
        """Retry only the indexing step for a note that is already on disk."""
        key = sanitize_identifier(canonical_id)
        content = self.read_note(vault, key)
        vault.index.delete(key)
        vault.index.upsert(key, content)
        log.info("Note reindexed: vault=%s id=%s", vault.name, key)

    def rebuild_index(self, vault: Vault) -> int:
        """Make the index match the files on disk. Returns the number of notes indexed."""
        on_disk = self.list_notes(vault)
        stale = vault.index.document_ids() - set(on_disk)
        for key in stale:
            vault.index.delete(key)

        for key in on_disk:
            vault.index.delete(key)
            vault.index.upsert(key, self._read(self.note_path(vault, key)))

        if self.graph is not None:
            self.graph.rebuild_from_vault(vault.root_path)

        log.info(
            "Index rebuilt: vault=%s notes=%d stale_removed=%d",
            vault.name, len(on_disk), len(stale),
        )
        return len(on_disk)

    # ───────────────────────── internal ─────────────────────────

    def _index_best_effort(self, vault: Vault, canonical_id: str, content: str) -> SearchIndexError | None:
        try:
            vault.index.delete(canonical_id)
            vault.index.upsert(canonical_id, content)
        except SearchIndexError as e:
            log.error(
                "Indexing failed, note kept on disk: vault=%s id=%s error=%s",
                vault.name, canonical_id, e,
            )
            return self._committed_index_error(e, canonical_id)
        return None

    @staticmethod
    def _committed_index_error(e: SearchIndexError, canonical_id: str) -> SearchIndexError:
        err = SearchIndexError(e.message, canonical_id=canonical_id, file_committed=True)
        err.__cause__ = e
        return err

    @staticmethod
    def _require_id(canonical_id: str) -> str:
        key = sanitize_identifier(canonical_id)
        if not key:
            raise InvalidIdentifierError(canonical_id)
        return key

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return read_text(path)
        except FileNotFoundError as e:
            raise NoteNotFoundError(path.stem) from e
        except UnicodeDecodeError as e:
            raise VaultIOError(f"Note is not valid UTF-8: {e}", path) from e
        except OSError as e:
            raise VaultIOError(f"Cannot read note: {e}", path) from e

    @staticmethod
    def _write_verified(path: Path, text: str) -> None:
        if not text:
            raise WriteVerificationError(path, "refusing to write an empty note")
        try:
            atomic_write_text(path, text)
        except OSError as e:
            raise VaultIOError(f"Cannot write note: {e}", path) from e

        if not path.is_file():
            raise WriteVerificationError(path, "file was not created")
        if path.stat().st_size == 0:
            raise WriteVerificationError(path, "file was created but is empty")

    @staticmethod
    def _move(old_path: Path, new_path: Path, old_id: str, new_id: str) -> None:
        if new_path.exists() and not new_path.samefile(old_path):
            raise NoteConflictError(old_id, new_id)
        try:
            old_path.replace(new_path)
        except OSError as e:
            raise VaultIOError(f"Cannot rename note: {e}", old_path) from e
