# main.py
"""Command-line entrypoint.

    notevault --base ./vaults vault create Demo
    notevault --base ./vaults note create Demo --content "Hello world example"
    notevault --base ./vaults note render Demo Hello-world-example
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from notevault.commands import CommandResult, CommandSurface
from notevault.logging_setup import install_global_exception_hooks, setup_logging
from notevault.settings import DEFAULT_BASE_PATH
from notevault.vault.manager import StorageRoot
from notevault.vault.notes import NoteWriteResult


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="notevault", description="File-backed Markdown vaults")
    p.add_argument(
        "--base",
        type=Path,
        default=DEFAULT_BASE_PATH,
        help="Directory holding the vaults",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = p.add_subparsers(dest="group", required=True)

    vault = sub.add_parser("vault", help="Vault lifecycle").add_subparsers(dest="command", required=True)
    vault.add_parser("list")
    for name in ("create", "delete", "reindex"):
        vault.add_parser(name).add_argument("name")

    note = sub.add_parser("note", help="Note operations").add_subparsers(dest="command", required=True)
    create = note.add_parser("create")
    create.add_argument("vault")
    create.add_argument("--title", default="")
    create.add_argument("--content", help="Note body; read from stdin when omitted")

    update = note.add_parser("update")
    update.add_argument("vault")
    update.add_argument("note_id")
    update.add_argument("--title", default="")
    update.add_argument("--content", help="Note body; read from stdin when omitted")

    for name in ("read", "delete", "links"):
        cmd = note.add_parser(name)
        cmd.add_argument("vault")
        cmd.add_argument("note_id")

    render = note.add_parser("render")
    render.add_argument("vault")
    render.add_argument("note_id")
    render.add_argument("--page", action="store_true", help="Wrap in a full HTML document")

    rename = note.add_parser("rename")
    rename.add_argument("vault")
    rename.add_argument("note_id")
    rename.add_argument("new_title")

    note.add_parser("list").add_argument("vault")

    search = note.add_parser("search")
    search.add_argument("vault")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=20)

    text = sub.add_parser("text", help="Text helpers").add_subparsers(dest="command", required=True)
    text.add_parser("links").add_argument("--content")
    text.add_parser("plain").add_argument("--content")
    return p


def dispatch(surface: CommandSurface, args: argparse.Namespace) -> CommandResult:
    group, command = args.group, args.command

    if group == "vault":
        if command == "list":
            return surface.list_vaults()
        if command == "create":
            return surface.create_vault(args.name)
        if command == "delete":
            return surface.delete_vault(args.name)
        return surface.reindex_vault(args.name)

    if group == "note":
        if command == "create":
            return surface.create_note(args.vault, args.title, _content(args))
        if command == "update":
            return surface.update_note(args.vault, args.note_id, _content(args), args.title)
        if command == "read":
            return surface.read_note(args.vault, args.note_id)
        if command == "delete":
            return surface.delete_note(args.vault, args.note_id)
        if command == "list":
            return surface.list_notes(args.vault)
        if command == "rename":
            return surface.rename_note(args.vault, args.note_id, args.new_title)
        if command == "render":
            return surface.render_note(args.vault, args.note_id, page=args.page)
        if command == "links":
            read = surface.read_note(args.vault, args.note_id)
            return surface.extract_links(read.value) if read.ok else read
        return surface.search_notes(args.vault, args.query, limit=args.limit)

    if command == "links":
        return surface.extract_links(_content(args))
    return surface.extract_plain_text(_content(args))


def _content(args: argparse.Namespace) -> str:
    if args.content is not None:
        return args.content
    return sys.stdin.read()


def _print_value(value) -> None:
    if value is None:
        return
    if isinstance(value, NoteWriteResult):
        print(value.canonical_id)
    elif isinstance(value, list):
        print(json.dumps(value, ensure_ascii=False))
    else:
        print(value)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log = setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)
    install_global_exception_hooks(log)

    surface = CommandSurface(StorageRoot(args.base))
    try:
        result = dispatch(surface, args)
    finally:
        surface.close()

    if result.warning:
        print(f"warning: {result.warning}", file=sys.stderr)
    if not result.ok:
        print(f"error: {result.error}", file=sys.stderr)
        return 1
    _print_value(result.value)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
