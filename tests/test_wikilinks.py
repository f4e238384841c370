import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from notevault.core.wikilinks import (
    extract_link_targets,
    extract_links,
    wikilinks_to_html,
)


def test_extract_links_trims():
    assert extract_links("See [[Alpha]] and [[ Beta ]].") == ["Alpha", "Beta"]


def test_extract_links_keeps_order_and_duplicates():
    assert extract_links("[[B]] then [[A]] then [[B]]") == ["B", "A", "B"]


def test_extract_links_empty():
    assert extract_links("") == []
    assert extract_links("no links [here]") == []


def test_extract_targets_basic():
    text = "See [[Note A]] and [[Note B|alias]]"
    assert extract_link_targets(text) == {"NoteA", "NoteB"}


def test_extract_targets_suffixes():
    text = "[[Note#Heading]] [[Note^block]]"
    assert extract_link_targets(text) == {"Note"}


def test_html():
    html_out = wikilinks_to_html("[[Note|Hello]]")
    assert 'href="note://Note"' in html_out
    assert ">Hello<" in html_out


def test_html_heading_fragment_and_escaping():
    html_out = wikilinks_to_html("[[My Note#Part 2|<b>x</b>]]")
    assert 'href="note://MyNote#Part%202"' in html_out
    assert "&lt;b&gt;x&lt;/b&gt;" in html_out


def test_html_leaves_code_untouched():
    assert wikilinks_to_html("Use `[[X]]` or [[Y]]") == 'Use `[[X]]` or <a href="note://Y">Y</a>'

    fenced = "```\n[[X]]\n```\n[[Y]]"
    assert wikilinks_to_html(fenced) == '```\n[[X]]\n```\n<a href="note://Y">Y</a>'
