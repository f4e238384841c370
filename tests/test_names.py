import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from notevault.core.names import (
    derive_canonical_id,
    display_title,
    identifier_from_content,
    normalize_whitespace,
    sanitize_identifier,
)

SAMPLES = [
    "",
    "valid_name",
    "invalid name.txt",
    "  spaced   out \t text \n",
    "123@file!",
    "Ünïcödé – dash",
    "a/b\\c:d",
]


def test_sanitize_identifier():
    assert sanitize_identifier("valid_name") == "valid_name"
    assert sanitize_identifier("invalid name.txt") == "invalidnametxt"
    assert sanitize_identifier("123@file!") == "123file"
    assert sanitize_identifier("hello-world_1") == "hello-world_1"


def test_sanitize_identifier_drops_non_ascii():
    assert sanitize_identifier("Ünïcödé") == "ncd"
    assert sanitize_identifier("!!!") == ""


def test_normalize_whitespace():
    assert normalize_whitespace("   hello    world   ") == "hello world"
    assert normalize_whitespace("singleword") == "singleword"
    assert normalize_whitespace("a\t\n b") == "a b"
    assert normalize_whitespace("") == ""


def test_idempotence():
    for s in SAMPLES:
        once = sanitize_identifier(s)
        assert sanitize_identifier(once) == once
        once = normalize_whitespace(s)
        assert normalize_whitespace(once) == once


def test_content_identifier():
    assert identifier_from_content("Hello world example with [[Link]]") == "Hello-world-example"
    assert identifier_from_content("  two\nwords  ") == "two-words"
    assert identifier_from_content("") == ""


def test_canonical_id_prefers_title():
    assert derive_canonical_id("Project Plan", "body text here") == "ProjectPlan"


def test_canonical_id_falls_back_to_content():
    assert derive_canonical_id("", "Hello world example with [[Link]]") == "Hello-world-example"
    assert derive_canonical_id("???", "a b") == "a-b"
    assert derive_canonical_id(None, "only") == "only"


def test_display_title():
    assert display_title("  My   Note ") == "My Note"
    assert display_title("").startswith("untitled_")
    assert display_title("") != display_title("")


def test_separator_only_identifiers_are_unusable():
    assert identifier_from_content("!!! ??? ...") == ""
    assert identifier_from_content("- -") == ""
    assert derive_canonical_id("---", "real words here") == "real-words-here"
    assert derive_canonical_id("", "!!! ??? ...") == ""
    assert derive_canonical_id("a-b", "x") == "a-b"
