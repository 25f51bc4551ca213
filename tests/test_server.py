"""HTTP integration tests for the browse server."""

import json
import socket
import threading
import urllib.error
import urllib.request

from exchanges.app import App
from exchanges.render import copy_text
from exchanges.server import AppHandler, make_server


def _setup_server(app):
    """Start the handler on an ephemeral port."""
    server = make_server(app, "127.0.0.1", 0)
    port = server.server_address[1]
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    return server, port


def _api(port, path):
    with urllib.request.urlopen(f"http://127.0.0.1:{port}{path}") as resp:
        return json.loads(resp.read())


def _api_status(port, path):
    """Like _api but returns (status_code, parsed_body) without raising."""
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{port}{path}") as resp:
            return resp.status, json.loads(resp.read())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read())


def _page(port, path="/"):
    with urllib.request.urlopen(f"http://127.0.0.1:{port}{path}") as resp:
        assert resp.status == 200
        return resp.read().decode()


# ── Page ───────────────────────────────────────────────────────

def test_get_root(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        body = _page(port)
        assert "<title>exchanges</title>" in body
        assert 'data-id="1"' in body and 'data-id="4"' in body
        assert '<span id="showing-count">4</span>' in body
        assert '<span id="total-count">4</span>' in body
        assert '<option value="Hormones">Hormones</option>' in body
        assert "{{" not in body
    finally:
        server.shutdown()


def test_root_prefills_search(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        body = _page(port, "/?search=milk")
        assert 'value="milk"' in body
        assert 'data-id="3"' in body
        assert 'data-id="1"' not in body
    finally:
        server.shutdown()


def test_root_opens_linked_entry(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        body = _page(port, "/?entry=3")
        assert '<div id="entry-modal" class="active">' in body
        assert '<body style="overflow: hidden">' in body
        assert "Skim or whole?" in body
    finally:
        server.shutdown()


def test_root_with_missing_dataset(tmp_path, capsys):
    server, port = _setup_server(App(data_path=tmp_path / "missing.json"))
    try:
        body = _page(port)
        assert "Failed to load data" in body
    finally:
        server.shutdown()


def test_raw_dataset(data_file, sample_data):
    server, port = _setup_server(App(data_path=data_file))
    try:
        assert _api(port, "/email-exchanges.json") == sample_data
    finally:
        server.shutdown()


# ── API ────────────────────────────────────────────────────────

def test_meta(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        data = _api(port, "/api/meta")
        assert data["stats"]["total"] == 4
        assert data["sections"] == ["Hormones", "Nutrition"]
        assert data["sources"] == ["Email 2012", "Newsletter"]
        assert [t["badge"] for t in data["types"]] == ["Q&A", "Quote", "Email"]
    finally:
        server.shutdown()


def test_entries_listing(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        data = _api(port, "/api/entries")
        assert [c["id"] for c in data["cards"]] == [1, 2, 3, 4]
        assert data["showing"] == 4
        assert data["filtered"] == 4
        assert data["total"] == 4
        assert data["has_more"] is False
        assert data["placeholder"] is None
    finally:
        server.shutdown()


def test_entries_filters(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        data = _api(port, "/api/entries?type=qaexchange&type=standalonequote&section=Nutrition")
        assert [c["id"] for c in data["cards"]] == [2]

        data = _api(port, "/api/entries?type=qa-exchange")
        assert [c["id"] for c in data["cards"]] == [1, 4]

        data = _api(port, "/api/entries?source=Email+2012&search=MILK")
        assert [c["id"] for c in data["cards"]] == [3]
        assert '<span class="highlight">Milk</span>' in data["cards"][0]["html"]
    finally:
        server.shutdown()


def test_entries_no_types_selected(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        data = _api(port, "/api/entries?type=")
        assert data["cards"] == []
        assert data["showing"] == 0
        assert "No entries match" in data["placeholder"]
    finally:
        server.shutdown()


def test_entries_paging(tmp_path, many_data):
    path = tmp_path / "email-exchanges.json"
    path.write_text(json.dumps(many_data))
    server, port = _setup_server(App(data_path=path))
    try:
        first = _api(port, "/api/entries?offset=0")
        assert len(first["cards"]) == 30
        assert first["showing"] == 30
        assert first["has_more"] is True

        second = _api(port, "/api/entries?offset=30")
        assert len(second["cards"]) == 15
        assert second["showing"] == 45
        assert second["has_more"] is False
        assert second["placeholder"] is None
    finally:
        server.shutdown()


def test_entries_bad_offset(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        status, body = _api_status(port, "/api/entries?offset=many")
        assert status == 400
        assert "offset" in body["error"]
    finally:
        server.shutdown()


def test_entry_detail(data_file, dataset):
    server, port = _setup_server(App(data_path=data_file))
    try:
        data = _api(port, "/api/entries/3")
        assert data["id"] == 3
        assert "Question 2" in data["html"]
        assert data["share_url"] == f"http://127.0.0.1:{port}/?entry=3"
        assert data["text"] == copy_text(dataset.get(3))
    finally:
        server.shutdown()


def test_entry_detail_errors(data_file):
    server, port = _setup_server(App(data_path=data_file))
    try:
        status, body = _api_status(port, "/api/entries/99")
        assert status == 404
        assert body["error"] == "Entry not found"

        status, body = _api_status(port, "/api/entries/abc")
        assert status == 400

        status, body = _api_status(port, "/nope")
        assert status == 404
    finally:
        server.shutdown()


def test_api_with_missing_dataset(tmp_path):
    server, port = _setup_server(App(data_path=tmp_path / "missing.json"))
    try:
        status, body = _api_status(port, "/api/entries")
        assert status == 503
        assert "Cannot read" in body["error"]
    finally:
        server.shutdown()


def test_server_socket_allows_address_reuse(data_file):
    server = make_server(App(data_path=data_file), "127.0.0.1", 0)
    try:
        assert AppHandler.app.data_path == data_file
        assert server.socket.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR) != 0
    finally:
        server.server_close()
