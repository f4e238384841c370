from __future__ import annotations

import html
import re
from urllib.parse import quote

from .names import sanitize_identifier


# [[target]]
# [[target|alias]]
WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")

# code is left verbatim when rewriting links
_RENDER_RE = re.compile(
    r"(?P<code>^(?P<fence>```|~~~)[^\n]*\n.*?^(?P=fence)[ \t]*$"
    r"|(?P<ticks>`+)[^`].*?(?P=ticks))"
    r"|\[\[(?P<inner>[^\]]+)\]\]",
    re.MULTILINE | re.DOTALL,
)


def extract_links(markdown_text: str) -> list[str]:
    """
    Return the trimmed inner text of every [[wikilink]], in document order.

    Duplicates are kept and nothing is canonicalized:
      "See [[Alpha]] and [[ Beta ]]." -> ["Alpha", "Beta"]
    """
    if not markdown_text:
        return []
    return [m.group(1).strip() for m in WIKILINK_RE.finditer(markdown_text)]


def extract_link_targets(markdown_text: str) -> set[str]:
    """
    Parse wikilinks and return the set of canonical note ids they point to.

    Supported:
      [[Note]]
      [[Note|Alias]]
      [[Note#Heading]]
      [[Note^block]]
    """
    targets: set[str] = set()

    for inner in extract_links(markdown_text):
        if not inner:
            continue
        canonical = sanitize_identifier(_extract_base_target(inner))
        if canonical:
            targets.add(canonical)

    return targets


def wikilinks_to_html(markdown_text: str) -> str:
    """
    Convert wikilinks into HTML <a> tags.

    [[Note]]        -> <a href="note://Note">Note</a>
    [[Note|Alias]]  -> <a href="note://Note">Alias</a>

    The label is HTML-escaped; the href uses the canonical id of the target.
    Links inside inline code and fenced code blocks are not rewritten.
    """
    if not markdown_text:
        return markdown_text

    def replacer(match: re.Match) -> str:
        if match.group("code") is not None:
            return match.group(0)
        inner = (match.group("inner") or "").strip()
        if not inner:
            return ""

        target, alias = _split_alias(inner)
        label = alias if alias is not None else target
        base, suffix = _split_suffix(target)

        href = "note://" + quote(sanitize_identifier(base), safe="")

        # heading/block suffixes travel as a fragment, never as part of the id
        if suffix:
            frag = suffix[1:] if suffix.startswith("#") else suffix
            href += "#" + quote(frag, safe="")

        return f'<a href="{href}">{html.escape(label, quote=False)}</a>'

    return _RENDER_RE.sub(replacer, markdown_text)


# ───────────────────────── helpers ─────────────────────────


def _split_alias(raw: str) -> tuple[str, str | None]:
    if "|" in raw:
        target, alias = raw.split("|", 1)
        return target.strip(), alias.strip()
    return raw.strip(), None


def _split_suffix(target: str) -> tuple[str, str]:
    for sep in ("#", "^"):
        if sep in target:
            base, rest = target.split(sep, 1)
            return base.strip(), sep + rest
    return target.strip(), ""


def _extract_base_target(raw: str) -> str:
    target, _ = _split_alias(raw)
    base, _ = _split_suffix(target)
    return base
