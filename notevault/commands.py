"""Typed command surface for UI/CLI front-ends.

Each command returns a `CommandResult`; errors cross this boundary as
strings plus the exception class name, never as raised exceptions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from notevault.core.names import sanitize_identifier
from notevault.core.wikilinks import extract_links
from notevault.errors import IndexCreationError, NoteVaultError, VaultNotFoundError
from notevault.services.markdown_renderer import extract_plain_text
from notevault.settings import APP_NAME
from notevault.vault.manager import StorageRoot, Vault, VaultManager
from notevault.vault.notes import NoteStore, NoteWriteResult

log = logging.getLogger(APP_NAME)

T = TypeVar("T")


@dataclass(frozen=True)
class CommandResult(Generic[T]):
    ok: bool
    value: T | None = None
    error: str | None = None
    kind: str | None = None
    # set when the command succeeded on disk but the index lags behind
    warning: str | None = None


class CommandSurface:
    """Keeps one open handle per vault and routes commands to the store."""

    def __init__(self, root: StorageRoot, store: NoteStore | None = None):
        self.manager = VaultManager(root)
        self.store = store or NoteStore()
        self._vaults: dict[str, Vault] = {}

    # ───────────────────────── vaults ─────────────────────────

    def create_vault(self, name: str) -> CommandResult[str]:
        def run() -> str:
            self._forget(name)
            vault = self.manager.create_vault(name)
            self._vaults[vault.name] = vault
            return vault.name
        return self._run("create_vault", run)

    def list_vaults(self) -> CommandResult[list[str]]:
        return self._run("list_vaults", self.manager.list_vaults)

    def delete_vault(self, name: str) -> CommandResult[None]:
        def run() -> None:
            vault = self._vaults.pop(sanitize_identifier(name), None)
            if vault is None:
                try:
                    vault = self.manager.open_vault(name)
                except VaultNotFoundError:
                    return None
                except IndexCreationError:
                    log.warning("Deleting vault with unusable index: %s", name)
                    self.manager.delete_vault_dir(name)
                    return None
            self.manager.delete_vault(vault)
        return self._run("delete_vault", run)

    # ───────────────────────── notes ─────────────────────────

    def create_note(self, vault: str, title: str, content: str) -> CommandResult[NoteWriteResult]:
        return self._write("create_note", lambda: self.store.create_note(self._vault(vault), title, content))

    def update_note(self, vault: str, note_id: str, content: str, title: str = "") -> CommandResult[NoteWriteResult]:
        return self._write(
            "update_note",
            lambda: self.store.update_note(self._vault(vault), note_id, content, title),
        )

    def read_note(self, vault: str, note_id: str) -> CommandResult[str]:
        return self._run("read_note", lambda: self.store.read_note(self._vault(vault), note_id))

    def delete_note(self, vault: str, note_id: str) -> CommandResult[bool]:
        return self._run("delete_note", lambda: self.store.delete_note(self._vault(vault), note_id))

    def list_notes(self, vault: str) -> CommandResult[list[str]]:
        return self._run("list_notes", lambda: self.store.list_notes(self._vault(vault)))

    def rename_note(self, vault: str, note_id: str, new_title: str) -> CommandResult[str]:
        return self._run(
            "rename_note",
            lambda: self.store.rename_note(self._vault(vault), note_id, new_title),
        )

    def render_note(self, vault: str, note_id: str, *, page: bool = False) -> CommandResult[str]:
        render = self.store.render_page if page else self.store.render_html
        return self._run("render_note", lambda: render(self._vault(vault), note_id))

    def search_notes(self, vault: str, query: str, limit: int = 20) -> CommandResult[list[str]]:
        return self._run(
            "search_notes",
            lambda: self.store.search_notes(self._vault(vault), query, limit=limit),
        )

    def reindex_vault(self, vault: str) -> CommandResult[int]:
        return self._run("reindex_vault", lambda: self.store.rebuild_index(self._vault(vault)))

    # ───────────────────────── text ─────────────────────────

    def extract_links(self, text: str) -> CommandResult[list[str]]:
        return CommandResult(ok=True, value=extract_links(text))

    def extract_plain_text(self, text: str) -> CommandResult[str]:
        return CommandResult(ok=True, value=extract_plain_text(text))

    def close(self) -> None:
        for vault in self._vaults.values():
            vault.close()
        self._vaults.clear()

    # ───────────────────────── internal ─────────────────────────

    def _vault(self, name: str) -> Vault:
        key = sanitize_identifier(name)
        vault = self._vaults.get(key)
        if vault is None or not vault.is_open:
            vault = self.manager.open_vault(name)
            self._vaults[vault.name] = vault
        return vault

    def _forget(self, name: str) -> None:
        vault = self._vaults.pop(sanitize_identifier(name), None)
        if vault is not None:
            vault.close()

    def _write(self, command: str, fn: Callable[[], NoteWriteResult]) -> CommandResult[NoteWriteResult]:
        result = self._run(command, fn)
        if result.ok and result.value is not None and not result.value.indexed:
            return CommandResult(ok=True, value=result.value, warning=str(result.value.index_error))
        return result

    @staticmethod
    def _run(command: str, fn: Callable[[], Any]) -> CommandResult:
        try:
            value = fn()
        except NoteVaultError as e:
            log.warning("Command failed: %s error=%s", command, e)
            return CommandResult(ok=False, error=str(e), kind=type(e).__name__)
        return CommandResult(ok=True, value=value)
