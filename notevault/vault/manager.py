from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from notevault.core.names import sanitize_identifier
from notevault.errors import IndexCreationError, InvalidIdentifierError, VaultIOError, VaultNotFoundError
from notevault.search.index import SearchIndex
from notevault.settings import APP_NAME, DEFAULT_BASE_PATH, INDEX_DIR_NAME

from .filesystem import ensure_directory, remove_tree

log = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class StorageRoot:
    """Base directory that holds one sub-directory per vault."""

    base_path: Path = DEFAULT_BASE_PATH

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_path", Path(self.base_path))

    def vault_path(self, name: str) -> Path:
        return self.base_path / name


@dataclass
class Vault:
    """An open vault. Owns its search index until `close()`."""

    name: str
    root_path: Path
    index: SearchIndex

    @property
    def is_open(self) -> bool:
        return self.index.is_open

    def close(self) -> None:
        self.index.close()

    def __enter__(self) -> "Vault":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class VaultManager:
    def __init__(self, root: StorageRoot):
        self.root = root

    def create_vault(self, name: str) -> Vault:
        """
        Create (or re-create) a vault with a fresh, empty index.

        Existing notes in the directory are kept; the old index is discarded.
        """
        safe_name = self._safe_name(name)
        vault_dir = self.root.vault_path(safe_name)
        index_dir = vault_dir / INDEX_DIR_NAME
        created_dir = not vault_dir.exists()

        try:
            ensure_directory(self.root.base_path)
            ensure_directory(vault_dir)
            remove_tree(index_dir)
        except OSError as e:
            log.error("Vault directory setup failed: vault=%s error=%s", safe_name, e)
            raise VaultIOError(f"Cannot prepare vault directory: {e}", vault_dir) from e

        try:
            index = SearchIndex.create(index_dir)
        except IndexCreationError:
            log.exception("Index creation failed: vault=%s", safe_name)
            self._discard_partial(vault_dir, index_dir, created_dir)
            raise

        log.info("Vault created: name=%s path=%s", safe_name, vault_dir)
        return Vault(name=safe_name, root_path=vault_dir, index=index)

    def open_vault(self, name: str) -> Vault:
        safe_name = self._safe_name(name)
        vault_dir = self.root.vault_path(safe_name)
        if not vault_dir.is_dir():
            raise VaultNotFoundError(safe_name, vault_dir)

        index = SearchIndex.open(vault_dir / INDEX_DIR_NAME)
        log.info("Vault opened: name=%s path=%s", safe_name, vault_dir)
        return Vault(name=safe_name, root_path=vault_dir, index=index)

    def delete_vault(self, vault: Vault) -> None:
        """Close the vault's index, then remove its directory tree."""
        vault.index.mark_deleted()
        self._remove_vault_dir(vault.name, vault.root_path)

    def delete_vault_dir(self, name: str) -> bool:
        """
        Remove a vault directory without opening it, for vaults whose index
        is missing or unreadable. Returns True if something was removed.
        """
        safe_name = self._safe_name(name)
        return self._remove_vault_dir(safe_name, self.root.vault_path(safe_name))

    def list_vaults(self) -> list[str]:
        base = self.root.base_path
        if not base.exists():
            return []
        try:
            return sorted((entry.name for entry in os.scandir(base)), key=str.lower)
        except OSError as e:
            raise VaultIOError(f"Cannot list vaults: {e}", base) from e

    @staticmethod
    def _remove_vault_dir(name: str, vault_dir: Path) -> bool:
        try:
            removed = remove_tree(vault_dir)
        except OSError as e:
            log.error("Vault deletion failed: name=%s error=%s", name, e)
            raise VaultIOError(f"Cannot delete vault: {e}", vault_dir) from e
        log.info("Vault deleted: name=%s removed=%s", name, removed)
        return removed

    @staticmethod
    def _safe_name(name: str) -> str:
        safe_name = sanitize_identifier(name)
        if not safe_name:
            raise InvalidIdentifierError(name, kind="vault")
        return safe_name

    @staticmethod
    def _discard_partial(vault_dir: Path, index_dir: Path, created_dir: bool) -> None:
        # a vault without a usable index must not look valid
        try:
            remove_tree(vault_dir if created_dir else index_dir)
        except OSError:
            log.exception("Cleanup after failed vault creation failed: path=%s", vault_dir)
