import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from notevault.services.markdown_renderer import (
    MarkdownRenderer,
    extract_plain_text,
    render_html,
)


def test_render_basic():
    out = render_html("# Title\nThis is **bold**.")
    assert "<h1>Title</h1>" in out
    assert "<strong>bold</strong>" in out


def test_render_strips_script():
    out = render_html("# Title\n\n<script>alert('x')</script>\n\nThis is **bold**.")
    assert "<script" not in out
    assert "<h1>Title</h1>" in out


def test_render_strips_event_handlers_and_js_urls():
    out = render_html('<a href="#" onclick="evil()">x</a>\n\n[y](javascript:alert(1))')
    assert "onclick" not in out
    assert "javascript:" not in out


def test_render_extensions():
    text = (
        "~~gone~~\n\n"
        "| a | b |\n|---|---|\n| 1 | 2 |\n\n"
        "Text[^1]\n\n[^1]: Footnote body.\n"
    )
    out = render_html(text)
    assert "<del>gone</del>" in out
    assert "<table>" in out
    assert "<td>1</td>" in out
    assert 'class="footnote"' in out


def test_render_task_list():
    out = render_html("- [ ] todo\n- [x] done\n")
    assert out.count('type="checkbox"') == 2
    assert "checked" in out
    assert "todo" in out
    assert "[x]" not in out


def test_render_wikilinks_as_note_urls():
    out = render_html("Go to [[Other Note]].")
    assert 'href="note://OtherNote"' in out
    assert ">Other Note</a>" in out


def test_render_malformed_input_does_not_fail():
    out = render_html("**unclosed [link](\n\n| broken | table")
    assert isinstance(out, str)
    assert render_html("") == ""


def test_plain_text():
    assert extract_plain_text("# Title\nThis is **bold**.") == "Title\nThis is bold."


def test_plain_text_code_and_breaks():
    assert extract_plain_text("Use `x = 1` now") == "Use x = 1 now"
    assert extract_plain_text("line one  \nline two") == "line one\nline two"
    assert extract_plain_text("soft\nbreak") == "soft\nbreak"


def test_plain_text_keeps_code_verbatim():
    assert extract_plain_text("use `a<b && c`") == "use a<b && c"


def test_wikilink_inside_code_is_not_rendered():
    out = render_html("Use `[[X]]` here")
    assert "<code>[[X]]</code>" in out
    assert "note://" not in out


def test_plain_text_drops_raw_html_and_unescapes():
    assert extract_plain_text("<div>hidden</div>\n\nshown") == "shown"
    assert extract_plain_text(r"a \* b") == "a * b"


def test_renderer_page_wraps_fragment():
    page = MarkdownRenderer().render_page("# Hi")
    assert page.startswith("<html>")
    assert "<h1>Hi</h1>" in page
    assert "<style>" in page
