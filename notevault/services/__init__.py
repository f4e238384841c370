from .markdown_renderer import MarkdownRenderer, extract_plain_text, render_html

__all__ = ["MarkdownRenderer", "extract_plain_text", "render_html"]
