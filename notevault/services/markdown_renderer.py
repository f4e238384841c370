from __future__ import annotations

import html
import logging
import re
import xml.etree.ElementTree as etree

import markdown as md
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import ETX, STX

from notevault.core.sanitize import sanitize_rendered_html
from notevault.core.wikilinks import extract_links, wikilinks_to_html
from notevault.settings import APP_NAME

log = logging.getLogger(APP_NAME)

STRIKETHROUGH_RE = r"(~~)(.+?)~~"
TASK_ITEM_RE = re.compile(r"^\[([ xX])\]\s+")
HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}

_HTML_PLACEHOLDER_RE = re.compile(f"{STX}wzxhzdk:\\d+{ETX}")
_ESCAPED_CHAR_RE = re.compile(f"{STX}(\\d+){ETX}")

BASE_CSS = """
    body { font-family: sans-serif; padding: 16px; line-height: 1.5; }
    code, pre { background: #f5f5f5; }
    pre { padding: 12px; overflow-x: auto; }
    a { text-decoration: none; }
    a:hover { text-decoration: underline; }
    li.task-list-item { list-style: none; }
"""


class StrikethroughExtension(Extension):
    """~~text~~ -> <del>text</del>"""

    def extendMarkdown(self, md):
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKETHROUGH_RE, "del"), "strikethrough", 175
        )


class _TaskListProcessor(Treeprocessor):
    def run(self, root):
        for lst in root.iter():
            if lst.tag not in ("ul", "ol"):
                continue
            found = False
            for li in lst:
                if li.tag == "li" and self._convert_item(li):
                    found = True
            if found:
                lst.set("class", "contains-task-list")

    @staticmethod
    def _convert_item(li: etree.Element) -> bool:
        # loose lists wrap the item text in <p>
        target = li
        if not (li.text or "").strip() and len(li) and li[0].tag == "p":
            target = li[0]

        m = TASK_ITEM_RE.match(target.text or "")
        if not m:
            return False

        box = etree.Element("input", {"type": "checkbox", "disabled": "disabled"})
        if m.group(1) in "xX":
            box.set("checked", "checked")
        box.tail = target.text[m.end():]
        target.text = None
        target.insert(0, box)
        li.set("class", "task-list-item")
        return True


class TaskListExtension(Extension):
    """`- [ ] todo` / `- [x] done` -> disabled checkboxes."""

    def extendMarkdown(self, md):
        # after inline processing (20), before prettify (10)
        md.treeprocessors.register(_TaskListProcessor(md), "tasklist", 15)


class _PlainTextCollector(Treeprocessor):
    def run(self, root):
        text = "".join(_iter_plain(root))
        text = _HTML_PLACEHOLDER_RE.sub("", text)
        self.md.plain_text = _ESCAPED_CHAR_RE.sub(lambda m: chr(int(m.group(1))), text)


class PlainTextExtension(Extension):
    def extendMarkdown(self, md):
        md.treeprocessors.register(_PlainTextCollector(md), "plain_text", 15)


def _iter_plain(el: etree.Element):
    if el.tag == "br":
        yield "\n"
    elif el.tag == "code" and el.text:
        # code spans arrive HTML-escaped
        yield html.unescape(el.text)
    elif el.text:
        yield el.text
    for child in el:
        yield from _iter_plain(child)
        if child.tail:
            yield child.tail
    if el.tag in HEADING_TAGS:
        yield "\n"


def default_extensions() -> list:
    return [
        "tables",
        "footnotes",
        "fenced_code",
        StrikethroughExtension(),
        TaskListExtension(),
    ]


EXTENSION_CONFIGS = {
    "tables": {"use_align_attribute": True},
}


def render_html(markdown_text: str) -> str:
    """
    note text -> safe HTML fragment:
      1) convert [[wikilinks]] to <a>
      2) markdown -> HTML
      3) sanitize HTML
    """
    text = wikilinks_to_html(markdown_text or "")
    rendered = md.markdown(
        text,
        extensions=default_extensions(),
        extension_configs=EXTENSION_CONFIGS,
    )
    return sanitize_rendered_html(rendered)


def extract_plain_text(markdown_text: str) -> str:
    """
    Markdown -> plain text.

    Headings end with a newline, line breaks stay newlines, inline code and
    text runs are concatenated and every other construct is dropped:
      "# Title\\nThis is **bold**." -> "Title\\nThis is bold."
    """
    converter = md.Markdown(extensions=[PlainTextExtension()])
    converter.plain_text = ""
    converter.convert(markdown_text or "")
    return converter.plain_text


def wrap_html_page(rendered_html: str, *, css: str = BASE_CSS) -> str:
    """Wrap safe HTML into a full HTML document."""
    return f"""\
<html>
<head>
  <meta charset="utf-8"/>
  <style>{css}</style>
</head>
<body>{rendered_html}</body>
</html>
"""


class MarkdownRenderer:
    """Markdown pipeline used by the note store."""

    def __init__(self, *, css: str = BASE_CSS):
        self.css = css

    def render_html(self, text: str) -> str:
        rendered = render_html(text)
        log.debug("Rendered markdown: in=%d chars out=%d chars", len(text or ""), len(rendered))
        return rendered

    def render_page(self, text: str) -> str:
        return wrap_html_page(self.render_html(text), css=self.css)

    def extract_plain_text(self, text: str) -> str:
        return extract_plain_text(text)

    def extract_links(self, text: str) -> list[str]:
        return extract_links(text)
