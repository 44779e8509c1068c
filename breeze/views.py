"""Resolution of view names to template files."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from .config.model import DEFAULT_EXTENSIONS


class ViewFinder:
    """
    Maps a view name to a template file.

    Tries ``<views_path>/<name><ext>`` for each extension in order and returns
    the first existing file.
    """

    def __init__(self, views_path: Path | str, extensions: Iterable[str] = DEFAULT_EXTENSIONS):
        self.views_path = Path(views_path)
        self.extensions = tuple(extensions)

    def candidates(self, name: str) -> list[Path]:
        return [self.views_path / f"{name}{ext}" for ext in self.extensions]

    def find(self, name: str) -> Optional[Path]:
        for candidate in self.candidates(name):
            if candidate.is_file():
                return candidate
        return None

    def not_found_message(self, name: str) -> str:
        return f"View [{name}] not found in {self.views_path}"


__all__ = ["ViewFinder"]
