"""core/tuning.py — Data-driven tuning constants.

Every gameplay number that is not part of the variant table lives in
``data/tuning.toml`` and is read once at startup.  Any system can pull
a value with an in-code default::

    from core.tuning import get
    duration = get("feedback", "travel_duration", 0.5)

Call ``reload()`` to re-read the file (F5 in the game window).
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib


_data: dict = {}
_path: Path | None = None


def default_path() -> Path:
    """``data/tuning.toml`` relative to the project root."""
    return Path(__file__).resolve().parent.parent / "data" / "tuning.toml"


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*.

    A missing or unreadable file leaves every value at its in-code
    default; it is never fatal.
    """
    global _data, _path

    path = default_path() if path is None else Path(path)
    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
        return

    try:
        with open(path, "rb") as f:
            _data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as ex:
        print(f"[TUNING] Could not read {path}: {ex} — using defaults")
        _data = {}
        return

    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk."""
    load(_path)


def override(section_path: str, key: str, value) -> None:
    """Set a single value in memory (used by tests and the debug keys)."""
    node = _data
    for part in section_path.split("."):
        node = node.setdefault(part, {})
    node[key] = value


def get(section_path: str, key: str, default=None):
    """Read a tuning value.

    *section_path* uses dot-notation for nested tables, e.g.
    ``"feedback"`` looks up ``[feedback]``.

    >>> get("feedback", "capacity", 50)
    50
    """
    node = section(section_path)
    return node.get(key, default)


def section(section_path: str) -> dict:
    """Return an entire section dict (shallow copy), or empty dict."""
    node = _data
    for part in section_path.split("."):
        if not isinstance(node, dict):
            return {}
        node = node.get(part)
        if node is None:
            return {}
    if isinstance(node, dict):
        return dict(node)
    return {}


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
