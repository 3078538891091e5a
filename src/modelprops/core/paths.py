"""Base path resolution for file properties."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class PathResolver(Protocol):
    """Resolve the base directory that relative upload paths live under."""

    def base_path(self) -> Path: ...


class BasePathResolver:
    """Resolve paths against a fixed base directory.

    An empty base path resolves to the current working directory at
    call time.
    """

    def __init__(self, base_path: str | Path = "") -> None:
        self._base_path = Path(base_path) if str(base_path) else None

    def base_path(self) -> Path:
        return self._base_path if self._base_path is not None else Path.cwd()

    def __repr__(self) -> str:
        return f"BasePathResolver({str(self._base_path or '')!r})"
