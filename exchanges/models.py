"""Shared data classes: entries, the dataset, filter and view state."""

from dataclasses import dataclass, field

ENTRY_TYPES = ("qaexchange", "standalonequote", "emailexchange")
QUOTE = "standalonequote"


@dataclass(frozen=True)
class ContentItem:
    answer: str
    question: str | None = None


@dataclass(frozen=True)
class Entry:
    id: int
    type: str
    content: tuple[ContentItem, ...] = ()
    topic: str | None = None
    section: str | None = None
    source: str | None = None
    category: str | None = None

    @property
    def is_quote(self) -> bool:
        return self.type == QUOTE


@dataclass
class Dataset:
    entries: list[Entry]
    stats: dict[str, int] = field(default_factory=dict)
    sections: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self._by_id = {e.id: e for e in self.entries}

    def get(self, entry_id: int) -> Entry | None:
        return self._by_id.get(entry_id)

    @property
    def total(self) -> int:
        return self.stats.get("total", len(self.entries))


@dataclass
class FilterState:
    search_term: str = ""
    active_types: set[str] = field(default_factory=lambda: set(ENTRY_TYPES))
    selected_section: str = ""
    selected_source: str = ""

    @property
    def term(self) -> str:
        """The search term as it is compared: trimmed and lower-cased."""
        return self.search_term.strip().lower()


@dataclass
class ViewState:
    filtered_entries: list[Entry] = field(default_factory=list)
    displayed_count: int = 0
    open_entry_id: int | None = None
