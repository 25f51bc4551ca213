"""CLI: command-line interface for exchanges."""

import argparse
import sys
import urllib.parse

from exchanges.app import App
from exchanges.browser import ClipboardError, SystemClipboard
from exchanges.filters import filter_entries
from exchanges.loader import DatasetError, normalize_type
from exchanges.markup import strip_html
from exchanges.models import ENTRY_TYPES, FilterState
from exchanges.render import TYPE_BADGES, TYPE_LABELS, UNTITLED, copy_text, select_options
from exchanges.router import share_url


def _load(app: App):
    try:
        return app.load()
    except DatasetError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_serve(args, app: App):
    from exchanges.server import start_server

    dataset = _load(app)
    print(f"Loaded {dataset.total} entries from {app.data_path}")
    start_server(app, host=args.host, port=args.port, open_browser=not args.no_browser)


def cmd_search(args, app: App):
    dataset = _load(app)
    state = FilterState(
        search_term=args.term or "",
        selected_section=args.section or "",
        selected_source=args.source or "",
    )
    if args.type:
        state.active_types = {normalize_type(t) for t in args.type}

    filtered = filter_entries(dataset, state)
    shown = filtered[:args.limit] if args.limit else filtered
    for entry in shown:
        badge = TYPE_BADGES.get(entry.type, entry.type)
        topic = strip_html(entry.topic) or UNTITLED
        print(f"#{entry.id:<6} [{badge}] {topic}")
    if not filtered:
        print("No entries match your filters.")
    print(f"Showing {len(shown)} of {dataset.total}")


def cmd_show(args, app: App):
    dataset = _load(app)
    entry = dataset.get(args.id)
    if entry is None:
        print(f"Entry not found: {args.id}", file=sys.stderr)
        sys.exit(1)

    text = copy_text(entry)
    print(text)
    if args.link:
        base = args.base_url or f"http://{app.settings['host']}:{app.settings['port']}/"
        parts = urllib.parse.urlsplit(base)
        print(share_url(f"{parts.scheme}://{parts.netloc}", parts.path or "/", entry.id))
    if args.copy:
        try:
            SystemClipboard().write_text(text)
            print("Copied to clipboard.")
        except ClipboardError as e:
            print(f"Warning: failed to copy: {e}", file=sys.stderr)


def cmd_stats(args, app: App):
    dataset = _load(app)
    for t in ENTRY_TYPES:
        print(f"{TYPE_LABELS[t] + ':':<16}{dataset.stats.get(t, 0)}")
    print(f"{'Total:':<16}{dataset.total}")

    sections = select_options(dataset.sections)
    if sections:
        print(f"\nSections ({len(sections)}):")
        for s in sections:
            print(f"  {s}")
    sources = select_options(dataset.sources)
    if sources:
        print(f"\nSources ({len(sources)}):")
        for s in sources:
            print(f"  {s}")


def main():
    parser = argparse.ArgumentParser(prog="exchanges",
                                     description="Browse Q&A exchanges, quotes and email threads")
    parser.add_argument("--data", help="Path to email-exchanges.json")
    subparsers = parser.add_subparsers(dest="command")

    p_serve = subparsers.add_parser("serve", help="Start the browse server")
    p_serve.add_argument("--host", help="Bind address (default: settings host)")
    p_serve.add_argument("--port", type=int, help="Server port (default: settings port)")
    p_serve.add_argument("--no-browser", action="store_true", help="Do not open a browser")

    p_search = subparsers.add_parser("search", help="List entries matching filters")
    p_search.add_argument("term", nargs="?", help="Search text")
    p_search.add_argument("--type", action="append",
                          help="Entry type (repeatable): qaexchange, standalonequote, emailexchange")
    p_search.add_argument("--section", help="Exact section")
    p_search.add_argument("--source", help="Exact source")
    p_search.add_argument("--limit", type=int, help="Print at most N entries")

    p_show = subparsers.add_parser("show", help="Print an entry as plain text")
    p_show.add_argument("id", type=int, help="Entry id")
    p_show.add_argument("--copy", action="store_true", help="Copy the text to the clipboard")
    p_show.add_argument("--link", action="store_true", help="Print the share link")
    p_show.add_argument("--base-url", help="Base URL for --link (default: the server URL)")

    subparsers.add_parser("stats", help="Show entry counts, sections and sources")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    app = App(data_path=args.data)

    if args.command == "serve":
        cmd_serve(args, app)
    elif args.command == "search":
        cmd_search(args, app)
    elif args.command == "show":
        cmd_show(args, app)
    elif args.command == "stats":
        cmd_stats(args, app)
