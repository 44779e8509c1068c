from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """
    Version of the installed distribution.
    Does not import other modules of the package (avoids cycles).
    """
    for dist in ("breeze-views",):
        try:
            return metadata.version(dist)
        except metadata.PackageNotFoundError:
            continue
    return "0.0.0"

__all__ = ["tool_version"]
