from __future__ import annotations

import bleach

ALLOWED_TAGS = [
    "a", "p", "br", "hr", "div", "span",
    "strong", "em", "del", "code", "pre", "blockquote",
    "ul", "ol", "li", "input", "sup",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table", "thead", "tbody", "tr", "th", "td",
]
ALLOWED_ATTRS = {
    "a": ["href", "title", "class"],
    "th": ["align"], "td": ["align"],
    # footnotes
    "div": ["class"], "li": ["id", "class"], "sup": ["id"],
    # task lists
    "input": ["type", "checked", "disabled"],
    "ul": ["class"],
    "code": ["class"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto", "note"]


def sanitize_rendered_html(rendered_html: str) -> str:
    """
    Strip scripts, event handlers and anything outside the allow-list from
    rendered Markdown. The result is safe to inject into a preview surface.
    """
    return bleach.clean(
        rendered_html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
