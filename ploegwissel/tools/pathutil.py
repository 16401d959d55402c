from __future__ import annotations

import re
from pathlib import Path


def sanitize_filename(name: str) -> str:
    """Make an export/report name safe to write, keeping the usual case untouched.

    ``ploegwissel_2026-10-18_Nacht.json`` passes through as is; separators and
    control characters from hand-edited dates become ``_``.
    """
    name = re.sub(r"[:\\/\n\r\t]", "_", name)
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"[^\w.()-]", "", name)
    return name[:200] or "ploegwissel"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
