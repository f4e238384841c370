from .names import derive_canonical_id, normalize_whitespace, sanitize_identifier
from .wikilinks import extract_link_targets, extract_links, wikilinks_to_html
from .links import NoteGraph

__all__ = ["derive_canonical_id",
           "normalize_whitespace",
           "sanitize_identifier",
           "extract_link_targets",
           "extract_links",
           "wikilinks_to_html",
           "NoteGraph",
           ]
