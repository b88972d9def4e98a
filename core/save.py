"""core/save.py — Persistence backends for the economy snapshot.

The Ledger does not know where its snapshot lives.  It is handed a
``SaveBackend`` and only ever calls ``read()`` once at startup and
``write()`` after mutations.  The snapshot itself is a small JSON
document (see ``logic/ledger.py`` for the schema).

Backends:
    JsonFileSave    a file on disk (default ``saves/game_data.json``)
    MemorySave      an in-memory string, for tests and headless runs

Read failures are reported by raising ``SaveError``; the Ledger turns
that into default state.  Write failures are raised the same way and
the Ledger logs and swallows them.
"""

from __future__ import annotations
import os
from pathlib import Path

from core.tuning import get as _tun


DEFAULT_SAVE_PATH = Path("saves") / "game_data.json"


class SaveError(Exception):
    """A snapshot could not be read from or written to its backend."""


class SaveBackend:
    """Where a snapshot lives.  Subclasses override ``read``/``write``."""

    def read(self) -> str | None:
        """Return the stored document, or None if nothing was ever saved."""
        raise NotImplementedError

    def write(self, text: str) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        return type(self).__name__


class JsonFileSave(SaveBackend):
    """Snapshot stored as a UTF-8 JSON file.

    Writes go to a sibling ``.tmp`` file first and are then renamed
    over the real one, so a crash mid-write leaves the previous save.
    """

    def __init__(self, path: str | Path | None = None):
        if path is None:
            path = _tun("save", "path", str(DEFAULT_SAVE_PATH))
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as ex:
            raise SaveError(f"cannot read {self.path}: {ex}") from ex

    def write(self, text: str) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as ex:
            raise SaveError(f"cannot write {self.path}: {ex}") from ex

    def describe(self) -> str:
        return str(self.path)


class MemorySave(SaveBackend):
    """Keeps the last written document in memory.

    ``fail_writes`` makes every write raise, to exercise the
    best-effort save path.
    """

    def __init__(self, text: str | None = None, *, fail_writes: bool = False):
        self.text = text
        self.fail_writes = fail_writes
        self.writes = 0

    def read(self) -> str | None:
        return self.text

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise SaveError("memory backend rejected the write")
        self.text = text
        self.writes += 1

    def describe(self) -> str:
        return "<memory>"
