from .manager import StorageRoot, Vault, VaultManager
from .notes import NoteStore, NoteWriteResult

__all__ = ["StorageRoot", "Vault", "VaultManager", "NoteStore", "NoteWriteResult"]
