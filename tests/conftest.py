"""Shared test fixtures."""

import copy
import json

import pytest

from exchanges.browser import ClipboardError, Location, MemoryClipboard
from exchanges.loader import parse_dataset
from exchanges.models import ENTRY_TYPES
from exchanges.session import BrowseSession

SAMPLE_DATA = {
    "entries": [
        {"id": 1, "type": "qaexchange", "topic": "Thyroid and <em>light</em>",
         "section": "Hormones", "source": "Email 2012", "category": "health",
         "content": [{"question": "Does light help the thyroid?",
                      "answer": "Red <b>light</b> supports it."}]},
        {"id": 2, "type": "standalonequote", "topic": "On sugar",
         "section": "Nutrition", "source": "Newsletter",
         "content": [{"answer": "Sugar is protective."}]},
        {"id": 3, "type": "emailexchange", "topic": "Milk",
         "section": "Nutrition", "source": "Email 2012",
         "content": [{"question": "Is milk good?", "answer": "Yes, usually."},
                     {"question": "Skim or whole?", "answer": "Depends on &amp; tolerance."}]},
        {"id": 4, "type": "qaexchange",
         "content": [{"answer": "No topic here."}]},
    ],
    "stats": {"qaexchange": 2, "standalonequote": 1, "emailexchange": 1, "total": 4},
    "sections": ["Nutrition", "Hormones", ""],
    "sources": ["Newsletter", "Email 2012"],
}


def make_many(count=45):
    """`count` entries, ids 1..count, cycling through the three types."""
    entries = [
        {"id": i, "type": ENTRY_TYPES[i % 3], "topic": f"Topic {i}",
         "section": "General", "source": "Archive",
         "content": [{"question": f"Question {i}?", "answer": f"Answer {i}."}]}
        for i in range(1, count + 1)
    ]
    return {"entries": entries, "sections": ["General"], "sources": ["Archive"]}


class _ScheduledCall:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler with a hand-driven clock."""

    def __init__(self):
        self.now = 0.0
        self._calls: list[_ScheduledCall] = []

    def call_later(self, delay, callback):
        call = _ScheduledCall(self.now + delay, callback)
        self._calls.append(call)
        return call

    @property
    def pending(self) -> list[_ScheduledCall]:
        return [c for c in self._calls if not c.cancelled]

    def run_pending(self):
        self.advance(0)

    def advance(self, seconds):
        self.now += seconds
        due = sorted((c for c in self._calls if c.when <= self.now + 1e-9),
                     key=lambda c: c.when)
        for call in due:
            self._calls.remove(call)
            if not call.cancelled:
                call.callback()


class FailingClipboard:
    def write_text(self, text):
        raise ClipboardError("permission denied")


@pytest.fixture
def sample_data():
    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture
def dataset(sample_data):
    return parse_dataset(sample_data)


@pytest.fixture
def many_data():
    return make_many(45)


@pytest.fixture
def many_dataset(many_data):
    return parse_dataset(many_data)


@pytest.fixture
def data_file(tmp_path, sample_data):
    """The sample dataset written to tmp_path/email-exchanges.json."""
    path = tmp_path / "email-exchanges.json"
    path.write_text(json.dumps(sample_data))
    return path


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def failing_clipboard():
    return FailingClipboard()


@pytest.fixture
def make_session(dataset, scheduler):
    """Factory for BrowseSessions over the sample dataset (or another one)."""
    def _make(url="http://example.org/browse", data=None, fetch=None, clipboard=None, **settings):
        ds = dataset if data is None else data
        return BrowseSession(fetch or (lambda: ds), settings or None,
                             location=Location(url),
                             clipboard=clipboard or MemoryClipboard(),
                             scheduler=scheduler)
    return _make
