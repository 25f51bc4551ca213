"""Filter engine: (dataset, filter state) -> ordered subset of entries."""

from exchanges.markup import strip_html
from exchanges.models import Dataset, Entry, FilterState


def searchable_text(entry: Entry) -> str:
    """Lower-cased visible text of every searchable field of `entry`."""
    parts = [entry.topic, entry.category, entry.source]
    parts.extend(f"{item.question or ''} {item.answer}" for item in entry.content)
    return " ".join(strip_html(p or "") for p in parts).lower()


def matches(entry: Entry, state: FilterState, term: str | None = None) -> bool:
    if entry.type not in state.active_types:
        return False
    if state.selected_section and entry.section != state.selected_section:
        return False
    if state.selected_source and entry.source != state.selected_source:
        return False
    if term is None:
        term = state.term
    if term:
        return term in searchable_text(entry)
    return True


def filter_entries(dataset: Dataset, state: FilterState) -> list[Entry]:
    # An empty active_types set matches nothing.
    term = state.term
    return [e for e in dataset.entries if matches(e, state, term)]
