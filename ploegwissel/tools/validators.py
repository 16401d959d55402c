from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

from ploegwissel.core.errors import InvalidLogoType


LOGO_MIME_TYPES = ("image/png", "image/jpeg", "image/webp", "image/svg+xml")


def validate_logo_type(mime_type: str | None) -> str:
    if mime_type not in LOGO_MIME_TYPES:
        raise InvalidLogoType(mime_type)
    return mime_type


def encode_logo(payload: bytes, mime_type: str | None) -> str:
    """Return the logo as a base64 ``data:`` URL, rejecting unsupported types."""
    mime = validate_logo_type(mime_type)
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def guess_mime_type(path: Path) -> str | None:
    if path.suffix.lower() == ".webp":
        return "image/webp"
    mime, _ = mimetypes.guess_type(path.name)
    return mime


def load_logo_file(path: Path) -> str:
    mime = validate_logo_type(guess_mime_type(path))
    return encode_logo(path.read_bytes(), mime)
