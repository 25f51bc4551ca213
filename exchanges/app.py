"""App: central object that wires together the dataset path, settings and sessions."""

import pathlib

from exchanges.browser import History, Location
from exchanges.config import get_data_path, load_settings
from exchanges.loader import load_dataset
from exchanges.models import Dataset


class App:
    """Holds the shared, read-only state of an exchanges process.

    Usage:
        app = App(data_path="/path/to/email-exchanges.json")
        dataset = app.load()          # read once, cached
        session = app.session("http://127.0.0.1:8793/?entry=42")
        session.start()

    For testing:
        app = App(data_path=tmp_path / "email-exchanges.json")
    """

    def __init__(self, data_path: pathlib.Path | str | None = None):
        if data_path is None:
            data_path = get_data_path()
        self.data_path = pathlib.Path(data_path)
        self.settings = load_settings(self.data_path.parent)
        self.dataset: Dataset | None = None

    def load(self) -> Dataset:
        """Load the dataset on first use; raises DatasetError on failure."""
        if self.dataset is None:
            self.dataset = load_dataset(self.data_path)
        return self.dataset

    def session(self, url: str = "http://localhost/", **kwargs):
        """A BrowseSession over this app's dataset, positioned at `url`."""
        from exchanges.session import BrowseSession
        history = kwargs.pop("history", None) or History(Location(url))
        return BrowseSession(self.load, self.settings, history=history, **kwargs)
