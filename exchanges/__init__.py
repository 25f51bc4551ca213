"""exchanges: browse a corpus of Q&A exchanges, quotes and email threads."""

__version__ = "0.1.0"

from exchanges.models import ContentItem, Dataset, Entry, FilterState, ViewState
from exchanges.app import App

__all__ = ["App", "ContentItem", "Dataset", "Entry", "FilterState", "ViewState"]
