"""
Content-addressed disk cache of parsed template trees.

Entries live under ``<root>/trees/<fp[:2]>/<fp[2:4]>/<fp>.json`` and are
written atomically (temp file + replace), so concurrent processes never
observe a partial entry.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..template.nodes import TemplateNode
from ..template.serialize import node_from_dict, node_to_dict

logger = logging.getLogger(__name__)

CACHE_VERSION = 1


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _norm_bool(x: object) -> bool:
    if isinstance(x, bool):
        return x
    if x is None:
        return False
    s = str(x).strip().lower()
    return s not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class DiskSnapshot:
    enabled: bool
    path: Path
    exists: bool
    size_bytes: int
    entries: int


class DiskTreeCache:
    """
    Content-addressed disk tier for compiled template trees.

    One JSON file per content fingerprint:
      <root>/trees/<fp[:2]>/<fp[2:4]>/<fp>.json
    holding {"v", "fingerprint", "created_at", "tree"}.
    Any error is best-effort (logged, never raised): the in-memory cache stays
    authoritative.
    """

    def __init__(self, root: Path, *, enabled: Optional[bool] = None):
        # ENV wins over the constructor flag, then enabled by default
        env = os.environ.get("BREEZE_CACHE", None)
        if env is not None:
            self.enabled = _norm_bool(env)
        elif enabled is not None:
            self.enabled = bool(enabled)
        else:
            self.enabled = True
        self.dir = Path(root)
        if self.enabled:
            try:
                _ensure_dir(self.dir)
            except OSError as e:
                logger.debug("Disk cache disabled, cannot create %s: %s", self.dir, e)
                self.enabled = False

    def _entry_path(self, fingerprint: str) -> Path:
        # two prefix levels so a single directory never holds thousands of files
        return self.dir / "trees" / fingerprint[:2] / fingerprint[2:4] / f"{fingerprint}.json"

    def get(self, fingerprint: str) -> Optional[TemplateNode]:
        """Returns the stored tree for a fingerprint, or None on miss or any failure."""
        if not self.enabled:
            return None
        path = self._entry_path(fingerprint)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug("Disk cache read failed for %s: %s", path, e)
            return None
        try:
            if data.get("v") != CACHE_VERSION or data.get("fingerprint") != fingerprint:
                return None
            return node_from_dict(data["tree"])
        except (AttributeError, KeyError, ValueError) as e:
            logger.debug("Disk cache entry %s is corrupt: %s", path, e)
            return None

    def put(self, fingerprint: str, tree: TemplateNode) -> None:
        if not self.enabled:
            return
        path = self._entry_path(fingerprint)
        try:
            payload = {
                "v": CACHE_VERSION,
                "fingerprint": fingerprint,
                "created_at": datetime.now(timezone.utc).isoformat(),
                "tree": node_to_dict(tree),
            }
            _ensure_dir(path.parent)
            # per-writer temp name: concurrent misses may store the same fingerprint
            tmp = path.parent / f"{path.name}.{os.getpid()}.{threading.get_ident()}.tmp"
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            tmp.replace(path)
        except (OSError, ValueError) as e:
            logger.debug("Disk cache write failed for %s: %s", path, e)

    # --------------------------- MAINTENANCE --------------------------- #
    def purge_all(self) -> bool:
        """Removes every stored tree."""
        try:
            if self.dir.exists():
                shutil.rmtree(self.dir / "trees", ignore_errors=True)
            self.dir.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.debug("Disk cache purge failed: %s", e)
            return False

    def snapshot(self) -> DiskSnapshot:
        """Best-effort snapshot of the disk tier."""
        size = 0
        entries = 0
        trees = self.dir / "trees"
        try:
            if trees.exists():
                for p in trees.rglob("*.json"):
                    try:
                        entries += 1
                        size += p.stat().st_size
                    except OSError:
                        pass
        except OSError:
            pass
        return DiskSnapshot(
            enabled=bool(self.enabled),
            path=self.dir,
            exists=self.dir.exists(),
            size_bytes=size,
            entries=entries,
        )


__all__ = ["DiskTreeCache", "DiskSnapshot", "CACHE_VERSION"]
