"""Dataset loading: read the pre-built JSON file into Entry objects."""

import json
import pathlib

from exchanges.models import ENTRY_TYPES, ContentItem, Dataset, Entry


class DatasetError(ValueError):
    """The dataset could not be read or does not have the expected shape."""


def normalize_type(value) -> str:
    """Map `qa-exchange` and friends onto the dataset's `qaexchange` tokens."""
    return str(value or "").replace("-", "").lower()


def load_dataset(path: pathlib.Path | str) -> Dataset:
    path = pathlib.Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DatasetError(f"Cannot read {path}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON in {path}: {e}") from e
    return parse_dataset(data)


def parse_dataset(data: dict) -> Dataset:
    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise DatasetError("Dataset has no 'entries' list")

    entries = []
    seen: set[int] = set()
    for index, raw in enumerate(data["entries"]):
        entry = _parse_entry(raw, index)
        if entry.id in seen:
            raise DatasetError(f"Duplicate entry id {entry.id}")
        seen.add(entry.id)
        entries.append(entry)

    stats = _count_types(entries)
    stats.update({k: v for k, v in (data.get("stats") or {}).items() if isinstance(v, int)})

    sections = data.get("sections")
    if sections is None:
        sections = _distinct(e.section for e in entries)
    sources = data.get("sources")
    if sources is None:
        sources = _distinct(e.source for e in entries)

    return Dataset(entries=entries, stats=stats, sections=list(sections),
                   sources=list(sources), raw=data)


def _parse_entry(raw, index: int) -> Entry:
    if not isinstance(raw, dict):
        raise DatasetError(f"Entry {index} is not an object")
    entry_id = raw.get("id")
    if isinstance(entry_id, bool) or not isinstance(entry_id, int):
        raise DatasetError(f"Entry {index} has no integer id")
    content = raw.get("content")
    if not isinstance(content, list):
        raise DatasetError(f"Entry {entry_id} has no content list")

    items = []
    for item in content:
        if not isinstance(item, dict):
            raise DatasetError(f"Entry {entry_id} has a malformed content item")
        items.append(ContentItem(answer=item.get("answer") or "",
                                 question=item.get("question") or None))

    return Entry(
        id=entry_id,
        type=normalize_type(raw.get("type")),
        content=tuple(items),
        topic=raw.get("topic") or None,
        section=raw.get("section") or None,
        source=raw.get("source") or None,
        category=raw.get("category") or None,
    )


def _count_types(entries: list[Entry]) -> dict[str, int]:
    stats = {t: 0 for t in ENTRY_TYPES}
    for e in entries:
        if e.type in stats:
            stats[e.type] += 1
    stats["total"] = len(entries)
    return stats


def _distinct(values) -> list[str]:
    result = []
    for v in values:
        if v and v not in result:
            result.append(v)
    return result
