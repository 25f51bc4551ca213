"""View: the rendered state of the browse page, without a DOM."""

from dataclasses import dataclass, field

from exchanges.models import ENTRY_TYPES
from exchanges.render import COPIED_LABEL, COPY_BUTTONS


@dataclass
class View:
    # Controls
    search_value: str = ""
    type_checked: dict[str, bool] = field(default_factory=lambda: {t: True for t in ENTRY_TYPES})
    section_options: list[str] = field(default_factory=list)
    source_options: list[str] = field(default_factory=list)
    selected_section: str = ""
    selected_source: str = ""

    # Counters
    type_counts: dict[str, int] = field(default_factory=dict)
    showing_count: int = 0
    total_count: int = 0

    # Entry list
    cards: list[tuple[int, str]] = field(default_factory=list)
    placeholder: str | None = None
    load_more_visible: bool = False

    # Modal
    modal_html: str = ""
    modal_active: bool = False
    scroll_locked: bool = False
    button_labels: dict[str, str] = field(default_factory=lambda: dict(COPY_BUTTONS))

    def clear_list(self):
        self.cards = []
        self.placeholder = None

    def show_placeholder(self, html: str):
        self.cards = []
        self.placeholder = html
        self.load_more_visible = False

    def append_card(self, entry_id: int, html: str):
        self.cards.append((entry_id, html))

    @property
    def card_ids(self) -> list[int]:
        return [entry_id for entry_id, _ in self.cards]

    def list_html(self) -> str:
        if self.placeholder is not None:
            return self.placeholder
        return "".join(html for _, html in self.cards)

    def mark_copied(self, button_id: str):
        self.button_labels[button_id] = COPIED_LABEL

    def unmark_copied(self, button_id: str):
        self.button_labels[button_id] = COPY_BUTTONS[button_id]

    def is_copied(self, button_id: str) -> bool:
        return self.button_labels.get(button_id) == COPIED_LABEL
