"""Markup helpers: visible-text extraction and tag-tolerant highlighting."""

import re
from html.parser import HTMLParser

HIGHLIGHT_MAX_TERM = 50

_TAG = r"<[^>]*>"
_TAGS = f"(?:{_TAG})*"
_TRAILING_TAGS = re.compile(rf"{_TAGS}\Z")
_TAG_NAME = re.compile(r"<(/?)([a-zA-Z][\w-]*)")

_BLOCK_TAGS = {"p", "div", "li", "blockquote", "h1", "h2", "h3", "h4", "tr"}


class _TextCollector(HTMLParser):
    def __init__(self, block_breaks: bool = False):
        super().__init__(convert_charrefs=True)
        self.block_breaks = block_breaks
        self.parts: list[str] = []

    def handle_data(self, data):
        self.parts.append(data)

    def handle_starttag(self, tag, attrs):
        if self.block_breaks and tag == "br":
            self.parts.append("\n")

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if self.block_breaks and tag in _BLOCK_TAGS:
            self.parts.append("\n\n")


def _collect(markup: str, block_breaks: bool) -> str:
    parser = _TextCollector(block_breaks)
    parser.feed(markup)
    parser.close()
    return "".join(parser.parts)


def strip_html(markup: str | None) -> str:
    """Return the visible text of `markup`, tags removed and entities decoded."""
    if not markup:
        return ""
    return _collect(markup, block_breaks=False)


def to_plain_text(markup: str | None) -> str:
    """Like strip_html, but paragraph-level tags and <br> become line breaks."""
    if not markup:
        return ""
    text = _collect(markup, block_breaks=True)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def highlight(text: str | None, term: str | None,
              max_length: int = HIGHLIGHT_MAX_TERM) -> str:
    """Wrap case-insensitive occurrences of `term` in a highlight span.

    A match may span markup: any number of complete tags is allowed after
    each character of the term, and those tags are kept verbatim inside
    the wrapper. Whole tags are consumed before the term is tried, so a
    match never starts inside a tag name or attribute. Long terms and any
    pattern failure leave `text` untouched.
    """
    if not term or not text:
        return text or ""
    if len(term) > max_length:
        return text
    try:
        term_pattern = "".join(re.escape(ch) + _TAGS for ch in term)
        pattern = re.compile(f"({_TAG})|({term_pattern})", re.IGNORECASE)
        return pattern.sub(_wrap_match, text)
    except (re.error, TypeError):
        return text


def _wrap_match(m: re.Match) -> str:
    if m.group(1) is not None:
        return m.group(1)
    matched = m.group(2)
    trailing = _TRAILING_TAGS.search(matched).group(0)
    body = matched[:len(matched) - len(trailing)]

    # Trailing tags stay inside the span only while they close tags opened in it.
    opened = []
    for tag in _TAG_NAME.finditer(body):
        closing, name = tag.group(1), tag.group(2).lower()
        if not closing:
            opened.append(name)
        elif opened and opened[-1] == name:
            opened.pop()
    tags = re.findall(_TAG, trailing)
    kept = 0
    for tag in tags:
        name = _TAG_NAME.match(tag)
        if not (name and name.group(1) and opened and opened[-1] == name.group(2).lower()):
            break
        opened.pop()
        kept += 1
    inside = body + "".join(tags[:kept])
    return f'<span class="highlight">{inside}</span>' + "".join(tags[kept:])
