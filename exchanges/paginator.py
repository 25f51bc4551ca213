"""Fixed-size pages over the filtered entries."""

from exchanges.models import Entry

PAGE_SIZE = 30


def page_slice(entries: list[Entry], displayed_count: int,
               page_size: int = PAGE_SIZE) -> list[Entry]:
    """The next page: up to `page_size` entries starting at `displayed_count`."""
    return entries[displayed_count:displayed_count + page_size]


def has_more(entries: list[Entry], displayed_count: int) -> bool:
    return displayed_count < len(entries)


def showing_count(entries: list[Entry], displayed_count: int) -> int:
    return min(displayed_count, len(entries))
