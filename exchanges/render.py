"""Entry -> markup fragments for cards, the detail modal and placeholders.

Every function here is pure: it returns a string and never touches the
view. Content fields are trusted markup from the pre-built dataset and are
inserted as-is; plain labels (section, source, option values) are escaped.
"""

import html

from exchanges.config import DEFAULT_SETTINGS
from exchanges.markup import HIGHLIGHT_MAX_TERM, highlight, to_plain_text
from exchanges.models import Entry

TYPE_BADGES = {
    "qaexchange": "Q&A",
    "standalonequote": "Quote",
    "emailexchange": "Email",
}

TYPE_LABELS = {
    "qaexchange": "Q&A Exchange",
    "standalonequote": "Quote",
    "emailexchange": "Email Exchange",
}

UNTITLED = "Untitled"

EMPTY_STATE_HTML = (
    '<div class="no-results"><div class="no-results-icon">?</div>'
    '<p class="no-results-text">No entries match your filters. '
    'Try adjusting your search or filters.</p></div>'
)

LOAD_FAILURE_HTML = (
    '<div class="no-results"><div class="no-results-icon">!</div>'
    '<p class="no-results-text">Failed to load data. '
    'Please try refreshing the page.</p></div>'
)

COPY_BUTTONS = {"copy-link": "Share", "copy-text": "Copy Text"}
COPIED_LABEL = "Copied!"


def render_card(entry: Entry, term: str = "", max_term: int = HIGHLIGHT_MAX_TERM) -> str:
    """Compact preview of `entry`, built from its first content item only."""
    def hl(text):
        return highlight(text, term, max_term)

    first = entry.content[0] if entry.content else None
    body = ""
    if entry.is_quote:
        body = f'<div class="entry-quote">{hl(first.answer if first else "")}</div>'
    elif first:
        if first.question:
            body += f'<div class="entry-question">{hl(first.question)}</div>'
        if first.answer:
            body += f'<div class="entry-answer">{hl(first.answer)}</div>'

    meta = ""
    if entry.section:
        meta += f'<span class="entry-meta-tag">Topic: {html.escape(entry.section)}</span>'
    if len(entry.content) > 1:
        meta += f'<span class="entry-meta-tag">{len(entry.content)} items</span>'

    badge = html.escape(TYPE_BADGES.get(entry.type, entry.type))
    return (
        f'<article class="entry-card" data-id="{entry.id}">'
        f'<header class="entry-header">'
        f'<span class="entry-type-badge {html.escape(entry.type)}">{badge}</span>'
        f'<span class="entry-topic">{hl(entry.topic or UNTITLED)}</span>'
        f'</header>'
        f'<div class="entry-body">{body}</div>'
        f'<footer class="entry-meta">{meta}</footer>'
        f'</article>'
    )


def render_modal(entry: Entry, attribution: str = DEFAULT_SETTINGS["attribution"]) -> str:
    """Full detail view of `entry` with its share buttons."""
    signature = f'<p class="modal-attribution">{html.escape(attribution)}</p>'

    if entry.is_quote:
        answer = entry.content[0].answer if entry.content else ""
        content = f'<div class="modal-quote-text">{answer}</div>{signature}'
    else:
        numbered = len(entry.content) > 1
        content = ""
        for index, item in enumerate(entry.content, 1):
            question = ""
            if item.question:
                label = f"Question {index}" if numbered else "Question"
                question = (f'<div class="modal-question">'
                            f'<span class="modal-question-label">{label}</span>'
                            f'{item.question}</div>')
            content += (f'<div class="modal-qa-item">{question}'
                        f'<div class="modal-answer">'
                        f'<span class="modal-answer-label">Answer</span>'
                        f'{item.answer}</div></div>')
        content += signature

    meta = ""
    if entry.section:
        meta += f"<span>Topic: {html.escape(entry.section)}</span>"
    if entry.source:
        meta += f"<span>Source: {html.escape(entry.source)}</span>"

    buttons = "".join(
        f'<button class="share-button" id="{button_id}">{label}</button>'
        for button_id, label in COPY_BUTTONS.items())

    label = html.escape(TYPE_LABELS.get(entry.type, entry.type))
    return (
        f'<div class="modal-header">'
        f'<span class="modal-type {html.escape(entry.type)}">{label}</span>'
        f'<h2 class="modal-topic">{entry.topic or UNTITLED}</h2>'
        f'<div class="modal-meta">{meta}</div>'
        f'</div>'
        f'{content}'
        f'<div class="modal-share">{buttons}</div>'
    )


def copy_text(entry: Entry) -> str:
    """Plain-text export: topic, Q/A pairs separated by dividers, source."""
    text = ""
    if entry.topic:
        text += f"Topic: {to_plain_text(entry.topic)}\n\n"
    last = len(entry.content) - 1
    for i, item in enumerate(entry.content):
        if item.question:
            text += f"Q: {to_plain_text(item.question)}\n\n"
        text += f"A: {to_plain_text(item.answer)}\n"
        if i < last:
            text += "\n---\n\n"
    if entry.source:
        text += f"\nSource: {entry.source}"
    return text


def select_options(values) -> list[str]:
    """Sorted, non-empty option values for a filter select."""
    return sorted(v for v in values if v)


def render_options(values, selected: str = "", placeholder: str = "All") -> str:
    options = [f'<option value="">{html.escape(placeholder)}</option>']
    for value in select_options(values):
        mark = " selected" if value == selected else ""
        v = html.escape(value)
        options.append(f'<option value="{v}"{mark}>{v}</option>')
    return "".join(options)
