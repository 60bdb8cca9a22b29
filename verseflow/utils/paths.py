"""Locating bundled data: the default config file and Bible text.

Both live next to the package in a source checkout, but the app may be
launched from anywhere, so lookups try the working directory first and
then the repository root and the package directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def search_roots() -> List[Path]:
    """Directories searched for data, most specific first."""
    here = Path(__file__).resolve()
    # cwd, repo root (verseflow/utils/../..), package dir (verseflow/utils/..)
    return [Path.cwd(), here.parents[2], here.parents[1]]


def _candidates(name: str) -> Iterable[Path]:
    for root in search_roots():
        yield root / name


def find_data_file(filename: str) -> Path:
    """Return the first existing file called *filename* in :func:`search_roots`.

    :raises FileNotFoundError: If no root contains the file.
    """
    for candidate in _candidates(filename):
        if candidate.is_file():
            return candidate
    tried = ", ".join(str(p) for p in _candidates(filename))
    raise FileNotFoundError(f"Could not find data file {filename!r}. Tried: {tried}")


def find_data_dir(dirname: str) -> Path:
    """Like :func:`find_data_file` for a directory.

    Falls back to ``dirname`` relative to the working directory so a
    missing directory is reported by whoever opens a file in it.
    """
    for candidate in _candidates(dirname):
        if candidate.is_dir():
            return candidate
    return Path(dirname)


__all__ = ["find_data_dir", "find_data_file", "search_roots"]
