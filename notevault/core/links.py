from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from notevault.settings import NOTE_SUFFIX

from .names import sanitize_identifier
from .wikilinks import extract_link_targets


@dataclass
class NoteGraph:
    """In-memory link graph: note ids as nodes, wikilinks as edges."""

    nodes: set[str] = field(default_factory=set)
    outgoing: dict[str, set[str]] = field(default_factory=dict)
    incoming: dict[str, set[str]] = field(default_factory=dict)

    def clear(self) -> None:
        self.nodes.clear()
        self.outgoing.clear()
        self.incoming.clear()

    def rebuild_from_vault(self, vault_dir: Path) -> None:
        self.clear()
        for p in Path(vault_dir).glob(f"*{NOTE_SUFFIX}"):
            self.update_note(p.stem, p.read_text(encoding="utf-8", errors="replace"))

    def add_note(self, note_id: str) -> None:
        note_id = sanitize_identifier(note_id)
        if note_id:
            self.nodes.add(note_id)

    def add_link(self, src: str, dst: str) -> None:
        src = sanitize_identifier(src)
        dst = sanitize_identifier(dst)
        if not src or not dst or src == dst:
            return
        self.nodes.update((src, dst))
        self.outgoing.setdefault(src, set()).add(dst)
        self.incoming.setdefault(dst, set()).add(src)

    def update_note(self, src: str, markdown_text: str) -> bool:
        """Replace the outgoing links of `src`. Returns True if they changed."""
        src = sanitize_identifier(src)
        if not src:
            return False
        self.nodes.add(src)

        new_targets = extract_link_targets(markdown_text)
        new_targets.discard(src)

        old_targets = set(self.outgoing.get(src, ()))
        if old_targets == new_targets:
            return False

        for dst in old_targets - new_targets:
            self._drop_incoming(dst, src)

        for dst in new_targets - old_targets:
            self.incoming.setdefault(dst, set()).add(src)
        self.nodes.update(new_targets)

        if new_targets:
            self.outgoing[src] = set(new_targets)
        else:
            self.outgoing.pop(src, None)
        return True

    def remove_note(self, note_id: str) -> None:
        """Forget the note's outgoing links; it stays a node while others link to it."""
        note_id = sanitize_identifier(note_id)
        for dst in self.outgoing.pop(note_id, set()):
            self._drop_incoming(dst, note_id)
        if not self.incoming.get(note_id):
            self.nodes.discard(note_id)

    def rename_note(self, old_id: str, new_id: str, markdown_text: str) -> None:
        self.remove_note(old_id)
        self.update_note(new_id, markdown_text)

    def backlinks_for(self, target: str) -> list[str]:
        target = sanitize_identifier(target)
        return sorted(self.incoming.get(target, set()), key=str.lower)

    def edges(self) -> list[tuple[str, str]]:
        return sorted(
            ((src, dst) for src, dsts in self.outgoing.items() for dst in dsts),
            key=lambda e: (e[0].lower(), e[1].lower()),
        )

    def render(self) -> str:
        """Render the graph in Graphviz DOT format."""
        lines = ["digraph notes {"]
        for node in sorted(self.nodes, key=str.lower):
            lines.append(f'  "{node}";')
        for src, dst in self.edges():
            lines.append(f'  "{src}" -> "{dst}";')
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _drop_incoming(self, dst: str, src: str) -> None:
        inc = self.incoming.get(dst)
        if inc:
            inc.discard(src)
            if not inc:
                self.incoming.pop(dst, None)
