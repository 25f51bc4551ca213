"""Browser capabilities the session talks to: location, history, clipboard.

The in-memory implementations are used for server-side rendering and
tests; SystemClipboard backs the CLI's --copy.
"""

import shutil
import subprocess
import urllib.parse


class Location:
    def __init__(self, url: str = "http://localhost/"):
        self.origin = ""
        self.pathname = "/"
        self.search = ""
        self.assign(url)

    def assign(self, url: str):
        href = urllib.parse.urljoin(self.href, url)
        parts = urllib.parse.urlsplit(href)
        self.origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""
        self.pathname = parts.path or "/"
        self.search = f"?{parts.query}" if parts.query else ""

    @property
    def href(self) -> str:
        return f"{self.origin}{self.pathname}{self.search}"


class History:
    """Session history with pushState, back/forward and popstate listeners."""

    def __init__(self, location: Location):
        self.location = location
        self._stack: list[tuple[dict | None, str]] = [(None, location.href)]
        self._index = 0
        self._listeners = []

    def push_state(self, state: dict | None, url: str):
        self.location.assign(url)
        del self._stack[self._index + 1:]
        self._stack.append((state, self.location.href))
        self._index += 1

    @property
    def state(self) -> dict | None:
        return self._stack[self._index][0]

    def __len__(self):
        return len(self._stack)

    def add_listener(self, callback):
        self._listeners.append(callback)

    def back(self):
        self._go(-1)

    def forward(self):
        self._go(1)

    def _go(self, delta: int):
        index = self._index + delta
        if not 0 <= index < len(self._stack):
            return
        self._index = index
        self.location.assign(self._stack[index][1])
        for callback in list(self._listeners):
            callback(self.state)


class ClipboardError(Exception):
    pass


class MemoryClipboard:
    def __init__(self):
        self.text: str | None = None

    def write_text(self, text: str):
        self.text = text


class SystemClipboard:
    """Writes through the first clipboard tool found on PATH."""

    COMMANDS = ["pbcopy", "wl-copy", "xclip -selection clipboard", "xsel --clipboard --input"]

    def _command(self) -> list[str]:
        for cmd in self.COMMANDS:
            if shutil.which(cmd.split()[0]):
                return cmd.split()
        raise ClipboardError("No clipboard tool found (pbcopy, wl-copy, xclip, xsel)")

    def write_text(self, text: str):
        cmd = self._command()
        try:
            subprocess.run(cmd, input=text.encode(), check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise ClipboardError(f"{cmd[0]} failed: {e}") from e
