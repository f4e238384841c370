import sys
import os
import shutil

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from notevault.errors import IndexCreationError, InvalidIdentifierError, VaultNotFoundError
from notevault.search.index import IndexState, SearchIndex
from notevault.settings import INDEX_DIR_NAME
from notevault.vault.manager import StorageRoot, VaultManager


@pytest.fixture
def manager(tmp_path):
    return VaultManager(StorageRoot(tmp_path / "vaults"))


def test_create_vault(manager, tmp_path):
    with manager.create_vault("My Vault!") as vault:
        assert vault.name == "MyVault"
        assert vault.root_path == tmp_path / "vaults" / "MyVault"
        assert vault.root_path.is_dir()
        assert (vault.root_path / INDEX_DIR_NAME).is_dir()
        assert vault.is_open
    assert not vault.is_open


def test_create_vault_rejects_empty_name(manager):
    with pytest.raises(InvalidIdentifierError):
        manager.create_vault("***")


def test_list_vaults(manager):
    assert manager.list_vaults() == []

    manager.create_vault("beta").close()
    manager.create_vault("Alpha").close()

    assert manager.list_vaults() == ["Alpha", "beta"]


def test_delete_vault(manager):
    vault = manager.create_vault("Gone")
    (vault.root_path / "note.md").write_text("text", encoding="utf-8")

    manager.delete_vault(vault)

    assert not vault.root_path.exists()
    assert vault.index.state is IndexState.DELETED
    assert manager.list_vaults() == []

    # absence is not an error
    manager.delete_vault(vault)


def test_delete_vault_dir_without_index(manager):
    vault = manager.create_vault("Broken")
    vault.close()
    shutil.rmtree(vault.root_path / INDEX_DIR_NAME)

    with pytest.raises(IndexCreationError):
        manager.open_vault("Broken")

    assert manager.delete_vault_dir("Broken") is True
    assert not vault.root_path.exists()
    assert manager.delete_vault_dir("Broken") is False


def test_recreate_vault_resets_index_and_keeps_notes(manager):
    vault = manager.create_vault("Demo")
    vault.index.upsert("kept", "some text")
    (vault.root_path / "kept.md").write_text("some text", encoding="utf-8")
    vault.close()

    with manager.create_vault("Demo") as again:
        assert again.index.doc_count() == 0
        assert (again.root_path / "kept.md").exists()


def test_open_vault(manager):
    vault = manager.create_vault("Demo")
    vault.index.upsert("n1", "first note")
    vault.close()

    with manager.open_vault("Demo") as reopened:
        assert reopened.index.state is IndexState.OPEN
        assert reopened.index.document_ids() == {"n1"}


def test_open_missing_vault(manager):
    with pytest.raises(VaultNotFoundError):
        manager.open_vault("Nope")


def test_failed_index_creation_leaves_no_vault(manager, monkeypatch):
    def boom(path):
        raise IndexCreationError("boom", path)

    monkeypatch.setattr(SearchIndex, "create", staticmethod(boom))

    with pytest.raises(IndexCreationError):
        manager.create_vault("Broken")

    assert not manager.root.vault_path("Broken").exists()


def test_failed_index_creation_keeps_existing_notes(manager, monkeypatch):
    manager.create_vault("Existing").close()
    note = manager.root.vault_path("Existing") / "keep.md"
    note.write_text("keep me", encoding="utf-8")

    def boom(path):
        raise IndexCreationError("boom", path)

    monkeypatch.setattr(SearchIndex, "create", staticmethod(boom))

    with pytest.raises(IndexCreationError):
        manager.create_vault("Existing")

    assert note.read_text(encoding="utf-8") == "keep me"
    assert not (manager.root.vault_path("Existing") / INDEX_DIR_NAME).exists()
