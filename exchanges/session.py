"""BrowseSession: owns filter and view state and reacts to input events.

The session is the browse page's controller. It reads the dataset through
a fetch callable, recomputes the filtered list on every filter change,
reveals it page by page, and drives the detail modal, the URL and the
clipboard through the collaborators in exchanges.browser.

Usage:
    session = BrowseSession(lambda: load_dataset(path),
                            location=Location("http://host/?search=milk"))
    session.start()
    session.type_search("thyroid")   # debounced
    session.run_pending()            # runs it once the delay has passed
    session.load_more()
    session.open_entry(42)           # pushes ?entry=42
"""

import sys

from exchanges.browser import ClipboardError, History, Location, MemoryClipboard
from exchanges.config import DEFAULT_SETTINGS
from exchanges.debounce import Debouncer, LoopScheduler
from exchanges.filters import filter_entries
from exchanges.loader import DatasetError
from exchanges.models import ENTRY_TYPES, Entry, FilterState, ViewState
from exchanges.paginator import has_more, page_slice, showing_count
from exchanges.render import (COPY_BUTTONS, EMPTY_STATE_HTML, LOAD_FAILURE_HTML, copy_text,
                              render_card, render_modal, select_options)
from exchanges.router import entry_query, initial_search, parse_entry_id, share_url
from exchanges.view import View


class BrowseSession:
    def __init__(self, fetch, settings=None, location=None, history=None,
                 clipboard=None, scheduler=None):
        self._fetch = fetch
        self.settings = dict(DEFAULT_SETTINGS)
        self.settings.update(settings or {})
        self.history = history or History(location or Location())
        self.location = self.history.location
        self.clipboard = clipboard or MemoryClipboard()
        self.scheduler = scheduler or LoopScheduler()
        self.page_size = int(self.settings["page_size"])

        self.dataset = None
        self.filters = FilterState()
        self.state = ViewState()
        self.view = View()

        self._search_debounce = Debouncer(
            self.scheduler, self.settings["debounce_ms"] / 1000, self.apply_filters)
        self.history.add_listener(self._on_popstate)

    # ── Startup ──────────────────────────────────────────────────────

    def start(self) -> bool:
        """Load the dataset and render the first page; False if loading failed."""
        search = initial_search(self.location.search)
        if search:
            self.filters.search_term = search
            self.view.search_value = search

        try:
            self.dataset = self._fetch()
        except DatasetError as e:
            print(f"Failed to load data: {e}", file=sys.stderr)
            self.view.show_placeholder(LOAD_FAILURE_HTML)
            return False

        self.view.type_counts = {t: self.dataset.stats.get(t, 0) for t in ENTRY_TYPES}
        self.view.total_count = self.dataset.total
        self.view.section_options = select_options(self.dataset.sections)
        self.view.source_options = select_options(self.dataset.sources)

        self.apply_filters()
        self.check_url_for_entry()
        return True

    # ── Filter inputs ────────────────────────────────────────────────

    def type_search(self, value: str):
        """Search box input; filtering runs once typing pauses."""
        self.filters.search_term = value
        self.view.search_value = value
        self._search_debounce.schedule()

    def toggle_type(self, entry_type: str, checked: bool):
        if checked:
            self.filters.active_types.add(entry_type)
        else:
            self.filters.active_types.discard(entry_type)
        self.view.type_checked[entry_type] = checked
        self.apply_filters()

    def select_section(self, value: str):
        self.filters.selected_section = value or ""
        self.view.selected_section = self.filters.selected_section
        self.apply_filters()

    def select_source(self, value: str):
        self.filters.selected_source = value or ""
        self.view.selected_source = self.filters.selected_source
        self.apply_filters()

    def reset_filters(self):
        self.filters = FilterState()
        self.view.search_value = ""
        self.view.type_checked = {t: True for t in ENTRY_TYPES}
        self.view.selected_section = ""
        self.view.selected_source = ""
        self.apply_filters()

    @property
    def search_pending(self) -> bool:
        return self._search_debounce.pending

    def run_pending(self):
        """Run due debounced searches and copy-confirmation reverts on this thread."""
        self.scheduler.run_pending()

    # ── List ─────────────────────────────────────────────────────────

    def apply_filters(self):
        # A direct run supersedes any debounced one still waiting.
        self._search_debounce.cancel()
        if self.dataset is None:
            return
        self.state.filtered_entries = filter_entries(self.dataset, self.filters)
        self.state.displayed_count = 0
        self.view.clear_list()
        self.render_next_page()
        self.update_counts()

    def render_next_page(self) -> int:
        """Append the next page of cards; returns how many were appended."""
        filtered = self.state.filtered_entries
        page = page_slice(filtered, self.state.displayed_count, self.page_size)

        if self.state.displayed_count == 0 and not page:
            self.view.show_placeholder(EMPTY_STATE_HTML)
            return 0

        term = self.filters.term
        max_term = self.settings["highlight_max"]
        for entry in page:
            self.view.append_card(entry.id, render_card(entry, term, max_term))
        self.state.displayed_count += len(page)
        self.view.load_more_visible = has_more(filtered, self.state.displayed_count)
        return len(page)

    def load_more(self) -> int:
        appended = self.render_next_page()
        self.update_counts()
        return appended

    def update_counts(self):
        self.view.showing_count = showing_count(
            self.state.filtered_entries, self.state.displayed_count)

    # ── Detail modal ─────────────────────────────────────────────────

    @property
    def open_entry_id(self) -> int | None:
        return self.state.open_entry_id

    @property
    def current_entry(self) -> Entry | None:
        if self.dataset is None or self.state.open_entry_id is None:
            return None
        return self.dataset.get(self.state.open_entry_id)

    def click_card(self, entry_id: int) -> bool:
        return self.open_entry(entry_id)

    def open_entry(self, entry_id: int, push: bool = True) -> bool:
        entry = self.dataset.get(entry_id) if self.dataset else None
        if entry is None:
            return False
        self.open_modal(entry, push=push)
        return True

    def open_modal(self, entry: Entry, push: bool = True):
        self.view.modal_html = render_modal(entry, self.settings["attribution"])
        self.view.button_labels = dict(COPY_BUTTONS)
        self.state.open_entry_id = entry.id
        if push:
            self.history.push_state({"entryId": entry.id}, entry_query(entry.id))
        self.view.modal_active = True
        self.view.scroll_locked = True

    def close_modal(self, push: bool = True):
        if not self.view.modal_active:
            return
        self.view.modal_active = False
        self.view.scroll_locked = False
        self.state.open_entry_id = None
        if push:
            self.history.push_state(None, self.location.pathname)

    def handle_key(self, key: str):
        if key == "Escape":
            self.close_modal()

    # ── Export ───────────────────────────────────────────────────────

    def share_url(self, entry: Entry | None = None) -> str | None:
        entry = entry or self.current_entry
        if entry is None:
            return None
        return share_url(self.location.origin, self.location.pathname, entry.id)

    def copy_link(self, entry: Entry | None = None) -> bool:
        url = self.share_url(entry)
        if url is None:
            return False
        return self._copy_to_clipboard(url, "copy-link")

    def copy_text(self, entry: Entry | None = None) -> bool:
        entry = entry or self.current_entry
        if entry is None:
            return False
        return self._copy_to_clipboard(copy_text(entry), "copy-text")

    def _copy_to_clipboard(self, text: str, button_id: str) -> bool:
        try:
            self.clipboard.write_text(text)
        except ClipboardError as e:
            print(f"Failed to copy: {e}", file=sys.stderr)
            return False
        self.view.mark_copied(button_id)
        self.scheduler.call_later(self.settings["copy_feedback_ms"] / 1000,
                                  lambda: self.view.unmark_copied(button_id))
        return True

    # ── Router ───────────────────────────────────────────────────────

    def check_url_for_entry(self) -> bool:
        entry_id = parse_entry_id(self.location.search)
        if entry_id is None:
            return False
        return self.open_entry(entry_id, push=False)

    def _on_popstate(self, state):
        if not self.check_url_for_entry():
            self.close_modal(push=False)
