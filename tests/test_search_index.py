import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from whoosh import index as whoosh_index
from whoosh.fields import TEXT, Schema

from notevault.errors import IndexCreationError, SearchIndexError
from notevault.search.index import IndexState, SearchIndex


@pytest.fixture
def index(tmp_path):
    ix = SearchIndex.create(tmp_path / "vault" / ".index")
    yield ix
    ix.close()


def test_create_makes_parents_and_starts_empty(tmp_path):
    path = tmp_path / "deep" / "nested" / ".index"
    with SearchIndex.create(path) as ix:
        assert path.is_dir()
        assert ix.state is IndexState.CREATED
        assert ix.doc_count() == 0
        assert ix.document_ids() == set()
    assert ix.state is IndexState.CLOSED


def test_upsert_then_search(index):
    index.upsert("Hello-world-example", "Hello   world\n example with [[Link]]")

    assert index.count("Hello-world-example") == 1
    assert index.search("world") == ["Hello-world-example"]
    assert index.document_ids() == {"Hello-world-example"}


def test_upsert_is_an_add(index):
    index.upsert("dup", "first body")
    index.upsert("dup", "second body")
    assert index.count("dup") == 2

    index.delete("dup")
    assert index.count("dup") == 0


def test_delete_by_sanitized_key(index):
    index.upsert("ProjectPlan", "plan details")
    index.delete("Project Plan!")
    assert index.count("ProjectPlan") == 0
    assert index.search("details") == []


def test_delete_missing_is_noop(index):
    index.delete("never-indexed")
    assert index.doc_count() == 0


def test_title_term_is_exact(index):
    index.upsert("alpha-beta", "x")
    assert index.count("alpha") == 0
    assert index.count("alpha-beta") == 1


def test_reopen_keeps_documents(tmp_path):
    path = tmp_path / ".index"
    with SearchIndex.create(path) as ix:
        ix.upsert("kept", "durable content")

    with SearchIndex.open(path) as ix:
        assert ix.state is IndexState.OPEN
        assert ix.document_ids() == {"kept"}
        assert ix.search("durable") == ["kept"]


def test_create_over_compatible_index_starts_empty(tmp_path):
    path = tmp_path / ".index"
    with SearchIndex.create(path) as ix:
        ix.upsert("old", "old content")

    with SearchIndex.create(path) as ix:
        assert ix.doc_count() == 0


def test_create_rejects_incompatible_schema(tmp_path):
    path = tmp_path / ".index"
    path.mkdir()
    whoosh_index.create_in(str(path), Schema(body=TEXT(stored=True))).close()

    with pytest.raises(IndexCreationError):
        SearchIndex.create(path)


def test_create_on_unusable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(IndexCreationError):
        SearchIndex.create(blocker / ".index")


def test_open_missing_index(tmp_path):
    with pytest.raises(IndexCreationError):
        SearchIndex.open(tmp_path / "nothing-here")


def test_closed_index_rejects_writes(tmp_path):
    ix = SearchIndex.create(tmp_path / ".index")
    ix.close()

    with pytest.raises(SearchIndexError) as exc:
        ix.upsert("a", "b")
    assert exc.value.canonical_id == "a"

    with pytest.raises(SearchIndexError):
        ix.delete("a")


def test_mark_deleted(tmp_path):
    ix = SearchIndex.create(tmp_path / ".index")
    ix.mark_deleted()
    assert ix.state is IndexState.DELETED
    assert not ix.is_open
