"""UTF-8 text and YAML file helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

PathLike = Path | str


def _as_path(path: PathLike) -> Path:
    return path if isinstance(path, Path) else Path(path)


def read_text(path: PathLike, errors: str = "strict") -> str:
    """Read *path* as UTF-8 text."""
    return _as_path(path).read_text(encoding="utf-8", errors=errors)


def write_text(path: PathLike, text: str) -> None:
    """Write *text* to *path* as UTF-8, creating parent directories."""
    p = _as_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def read_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``safe_load``. An empty file yields ``None``."""
    return yaml.safe_load(read_text(path))

