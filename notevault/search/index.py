"""Full-text search index for a single vault.

The index lives in its own directory under the vault root and holds one
document per note: ``title`` is the canonical id (exact-term key, stored)
and ``content`` is the whitespace-normalized note body (searchable, not
stored). Every write commits immediately; there are no internal retries.
"""
from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path

from whoosh import index as whoosh_index
from whoosh.fields import ID, TEXT, Schema
from whoosh.qparser import MultifieldParser, OrGroup
from whoosh.query import Term

from notevault.core.names import normalize_whitespace, sanitize_identifier
from notevault.errors import IndexCreationError, SearchIndexError
from notevault.settings import APP_NAME

log = logging.getLogger(APP_NAME)

SEARCH_FIELDS = ["title", "content"]


class IndexState(enum.Enum):
    CREATED = "created"
    OPEN = "open"
    CLOSED = "closed"
    DELETED = "deleted"


def build_schema() -> Schema:
    return Schema(
        title=ID(stored=True, unique=True),
        content=TEXT(stored=False),
    )


def _schema_compatible(existing: Schema, expected: Schema) -> bool:
    if set(existing.names()) != set(expected.names()):
        return False
    return all(type(existing[name]) is type(expected[name]) for name in expected.names())


class SearchIndex:
    """Handle on an on-disk index, exclusively owned by one vault.

    Writers are serialized through the handle's lock; use one handle per
    vault and share it between threads rather than opening a second one.
    """

    def __init__(self, path: Path, ix, state: IndexState):
        self.path = Path(path)
        self._ix = ix
        self._lock = threading.Lock()
        self.state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, path: Path) -> "SearchIndex":
        """Create a new, empty index at `path` (parents are created too)."""
        path = Path(path)
        schema = build_schema()
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IndexCreationError(f"Index path is unusable: {e}", path) from e

        try:
            if whoosh_index.exists_in(str(path)):
                existing = whoosh_index.open_dir(str(path))
                try:
                    compatible = _schema_compatible(existing.schema, schema)
                finally:
                    existing.close()
                if not compatible:
                    raise IndexCreationError(
                        "An index with an incompatible schema already exists", path
                    )
            ix = whoosh_index.create_in(str(path), schema)
        except IndexCreationError:
            raise
        except Exception as e:
            raise IndexCreationError(f"Failed to create index: {e}", path) from e

        log.info("Search index created: path=%s", path)
        return cls(path, ix, IndexState.CREATED)

    @classmethod
    def open(cls, path: Path) -> "SearchIndex":
        """Open an index previously made by `create`."""
        path = Path(path)
        try:
            if not whoosh_index.exists_in(str(path)):
                raise IndexCreationError("No index found", path)
            ix = whoosh_index.open_dir(str(path))
        except IndexCreationError:
            raise
        except Exception as e:
            raise IndexCreationError(f"Failed to open index: {e}", path) from e

        if not _schema_compatible(ix.schema, build_schema()):
            ix.close()
            raise IndexCreationError("Index schema is incompatible", path)

        log.debug("Search index opened: path=%s", path)
        return cls(path, ix, IndexState.OPEN)

    @property
    def is_open(self) -> bool:
        return self.state in (IndexState.CREATED, IndexState.OPEN)

    def close(self) -> None:
        with self._lock:
            if not self.is_open:
                return
            self._ix.close()
            self.state = IndexState.CLOSED
            log.debug("Search index closed: path=%s", self.path)

    def mark_deleted(self) -> None:
        self.close()
        self.state = IndexState.DELETED

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, canonical_id: str, content: str) -> None:
        """
        Add one document and commit.

        This is an add: callers wanting replace semantics delete the old
        document for the same key first.
        """
        with self._lock:
            ix = self._require_open(canonical_id)
            try:
                writer = ix.writer()
                try:
                    writer.add_document(
                        title=canonical_id,
                        content=normalize_whitespace(content),
                    )
                except Exception:
                    writer.cancel()
                    raise
                writer.commit()
            except Exception as e:
                raise SearchIndexError(
                    f"Failed to index note: {e}", canonical_id=canonical_id
                ) from e
        log.debug("Indexed note: id=%s", canonical_id)

    def delete(self, canonical_id: str) -> None:
        """Delete by exact title term and commit. Missing keys are a no-op."""
        key = sanitize_identifier(canonical_id)
        with self._lock:
            ix = self._require_open(canonical_id)
            try:
                writer = ix.writer()
                try:
                    writer.delete_by_term("title", key)
                except Exception:
                    writer.cancel()
                    raise
                writer.commit()
            except Exception as e:
                raise SearchIndexError(
                    f"Failed to remove note from index: {e}", canonical_id=canonical_id
                ) from e
        log.debug("Removed note from index: id=%s", key)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def search(self, query: str, limit: int | None = 20) -> list[str]:
        """Titles of documents matching `query` in either field, best first."""
        ix = self._require_open()
        try:
            with ix.searcher() as searcher:
                parser = MultifieldParser(SEARCH_FIELDS, schema=ix.schema, group=OrGroup)
                results = searcher.search(parser.parse(query), limit=limit)
                return [hit["title"] for hit in results]
        except Exception as e:
            raise SearchIndexError(f"Search failed for {query!r}: {e}") from e

    def count(self, canonical_id: str) -> int:
        """Number of live documents whose title is exactly `canonical_id`."""
        ix = self._require_open(canonical_id)
        try:
            with ix.searcher() as searcher:
                return len(searcher.search(Term("title", canonical_id), limit=None))
        except Exception as e:
            raise SearchIndexError(f"Lookup failed: {e}", canonical_id=canonical_id) from e

    def document_ids(self) -> set[str]:
        ix = self._require_open()
        try:
            reader = ix.reader()
            try:
                return {fields["title"] for fields in reader.all_stored_fields()}
            finally:
                reader.close()
        except Exception as e:
            raise SearchIndexError(f"Failed to list indexed notes: {e}") from e

    def doc_count(self) -> int:
        ix = self._require_open()
        return ix.doc_count()

    def _require_open(self, canonical_id: str | None = None):
        if not self.is_open:
            raise SearchIndexError(
                f"Search index is {self.state.value}: {self.path}",
                canonical_id=canonical_id,
            )
        return self._ix
