"""Read and save the C sources shown in the editor."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def read_source(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def save_source(path: str, text: str) -> None:
    """Write ``text`` next to ``path`` and move it into place."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=target.name + ".", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_path, target)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
