from .core.names import derive_canonical_id, normalize_whitespace, sanitize_identifier
from .core.links import NoteGraph
from .errors import (
    IndexCreationError,
    InvalidIdentifierError,
    NoteConflictError,
    NoteNotFoundError,
    NoteVaultError,
    SearchIndexError,
    VaultIOError,
    VaultNotFoundError,
    WriteVerificationError,
)
from .search.index import SearchIndex
from .services.markdown_renderer import MarkdownRenderer
from .vault.manager import StorageRoot, Vault, VaultManager
from .vault.notes import NoteStore, NoteWriteResult

__version__ = "0.1.0"

__all__ = ["derive_canonical_id",
           "normalize_whitespace",
           "sanitize_identifier",
           "NoteGraph",
           "NoteVaultError",
           "NoteNotFoundError",
           "NoteConflictError",
           "InvalidIdentifierError",
           "WriteVerificationError",
           "IndexCreationError",
           "SearchIndexError",
           "VaultIOError",
           "VaultNotFoundError",
           "SearchIndex",
           "MarkdownRenderer",
           "StorageRoot",
           "Vault",
           "VaultManager",
           "NoteStore",
           "NoteWriteResult",
           ]
