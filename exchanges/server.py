"""Web server: the browse page, the raw dataset and a JSON entry API."""

import html
import http.server
import json
import threading
import urllib.parse
from importlib.resources import files

from exchanges.filters import filter_entries
from exchanges.loader import DatasetError, normalize_type
from exchanges.models import ENTRY_TYPES, FilterState
from exchanges.paginator import has_more, page_slice, showing_count
from exchanges.render import (EMPTY_STATE_HTML, TYPE_BADGES, TYPE_LABELS, copy_text,
                              render_card, render_modal, render_options, select_options)
from exchanges.router import share_url


def _load_template(name: str) -> str:
    return files("exchanges.templates").joinpath(name).read_text()


def _fill(template: str, **values) -> str:
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", str(value))
    return template


def render_page(session) -> str:
    """The browse page for a started BrowseSession."""
    view = session.view
    type_filters = "".join(
        f'<label><input type="checkbox" value="{t}"'
        f'{" checked" if view.type_checked.get(t, True) else ""}> '
        f'{html.escape(TYPE_BADGES[t])}'
        f'<span class="type-count" data-type="{t}">{view.type_counts.get(t, 0)}</span></label>'
        for t in ENTRY_TYPES)
    return _fill(
        _load_template("browse.html"),
        body_style="overflow: hidden" if view.scroll_locked else "",
        search_value=html.escape(view.search_value),
        type_filters=type_filters,
        section_options=render_options(view.section_options, view.selected_section, "All topics"),
        source_options=render_options(view.source_options, view.selected_source, "All sources"),
        showing_count=view.showing_count,
        total_count=view.total_count,
        displayed_count=session.state.displayed_count,
        entries=view.list_html(),
        load_more_class="visible" if view.load_more_visible else "",
        modal_class="active" if view.modal_active else "",
        modal_body=view.modal_html if view.modal_active else "",
        debounce_ms=int(session.settings["debounce_ms"]),
        copy_feedback_ms=int(session.settings["copy_feedback_ms"]),
    )


class AppHandler(http.server.BaseHTTPRequestHandler):
    app = None

    def log_message(self, format, *args):
        pass

    def _json_response(self, data, status=200):
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _html_response(self, text, status=200):
        body = text.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _error(self, status, msg):
        self._json_response({"error": msg}, status)

    def _parse_path(self):
        parsed = urllib.parse.urlparse(self.path)
        return parsed.path, urllib.parse.parse_qs(parsed.query, keep_blank_values=True)

    def _origin(self) -> str:
        host = self.headers.get("Host")
        if not host:
            addr, port = self.server.server_address[:2]
            host = f"{addr}:{port}"
        return f"http://{host}"

    def _dataset(self):
        try:
            return self.app.load()
        except DatasetError as e:
            self._error(503, str(e))
            return None

    # ── GET ──────────────────────────────────────────────────────────

    def do_GET(self):
        path, qs = self._parse_path()

        if path in ("/", "/index.html"):
            session = self.app.session(self._origin() + self.path)
            session.start()
            self._html_response(render_page(session))

        elif path == "/email-exchanges.json":
            dataset = self._dataset()
            if dataset is not None:
                self._json_response(dataset.raw)

        elif path == "/api/meta":
            dataset = self._dataset()
            if dataset is None:
                return
            self._json_response({
                "stats": dataset.stats,
                "sections": select_options(dataset.sections),
                "sources": select_options(dataset.sources),
                "types": [{"type": t, "badge": TYPE_BADGES[t], "label": TYPE_LABELS[t]}
                          for t in ENTRY_TYPES],
            })

        elif path == "/api/entries":
            self._handle_entries(qs)

        elif path.startswith("/api/entries/") and path.count("/") == 3:
            try:
                entry_id = int(path.split("/")[3])
            except (ValueError, IndexError):
                self._error(400, "Invalid entry ID")
                return
            self._handle_entry_detail(entry_id)

        else:
            self._error(404, "Not found")

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _filter_state(qs) -> FilterState:
        types = qs.get("type")
        active = set(ENTRY_TYPES) if types is None else {normalize_type(t) for t in types if t}
        return FilterState(
            search_term=qs.get("search", [""])[0],
            active_types=active,
            selected_section=qs.get("section", [""])[0],
            selected_source=qs.get("source", [""])[0],
        )

    def _handle_entries(self, qs):
        try:
            off = max(int(qs.get("offset", [0])[0] or 0), 0)
        except ValueError:
            self._error(400, "offset must be an integer")
            return
        dataset = self._dataset()
        if dataset is None:
            return

        settings = self.app.settings
        state = self._filter_state(qs)
        filtered = filter_entries(dataset, state)
        page = page_slice(filtered, off, settings["page_size"])
        displayed = min(off, len(filtered)) + len(page)
        self._json_response({
            "cards": [{"id": e.id, "html": render_card(e, state.term, settings["highlight_max"])}
                      for e in page],
            "showing": showing_count(filtered, displayed),
            "filtered": len(filtered),
            "total": dataset.total,
            "has_more": has_more(filtered, displayed),
            "placeholder": EMPTY_STATE_HTML if off == 0 and not page else None,
        })

    def _handle_entry_detail(self, entry_id):
        dataset = self._dataset()
        if dataset is None:
            return
        entry = dataset.get(entry_id)
        if entry is None:
            self._error(404, "Entry not found")
            return
        self._json_response({
            "id": entry.id,
            "html": render_modal(entry, self.app.settings["attribution"]),
            "share_url": share_url(self._origin(), "/", entry.id),
            "text": copy_text(entry),
        })


class BrowseServer(http.server.HTTPServer):
    allow_reuse_address = True


def make_server(app, host: str, port: int) -> BrowseServer:
    AppHandler.app = app
    return BrowseServer((host, port), AppHandler)


def start_server(app, host=None, port=None, open_browser=True):
    host = host or app.settings.get("host", "127.0.0.1")
    port = port if port is not None else app.settings.get("port", 8793)

    server = make_server(app, host, port)
    url = f"http://{host}:{server.server_address[1]}"
    print(f"exchanges running at {url}")
    print("Press Ctrl+C to stop")

    if open_browser:
        try:
            import webbrowser
            threading.Timer(0.5, lambda: webbrowser.open(url)).start()
        except Exception:
            pass

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        server.server_close()
