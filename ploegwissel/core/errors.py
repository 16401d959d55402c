from __future__ import annotations

from typing import Sequence


class ChecklistError(Exception):
    """Base class for every condition raised by the checklist core."""


class InvalidPath(ChecklistError):
    def __init__(self, path: Sequence[str] | str, reason: str = "") -> None:
        self.path = path if isinstance(path, str) else ".".join(str(p) for p in path)
        msg = f"Invalid field path '{self.path}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class UnknownKey(ChecklistError):
    def __init__(self, path: str, key: str) -> None:
        self.path = path
        self.key = key
        super().__init__(f"Unknown key '{key}' for mapping '{path}'")


class InvalidValue(ChecklistError):
    def __init__(self, path: str, value: object, reason: str) -> None:
        self.path = path
        self.value = value
        super().__init__(f"Invalid value {value!r} for '{path}': {reason}")


class InvalidLogoType(ChecklistError):
    def __init__(self, mime_type: str | None) -> None:
        self.mime_type = mime_type
        super().__init__(f"Upload een PNG/JPG/WEBP/SVG logo (kreeg: {mime_type or 'onbekend'}).")


class PersistenceReadError(ChecklistError):
    """Stored content for a slot could not be read or parsed."""

    def __init__(self, slot: str, cause: Exception | str) -> None:
        self.slot = slot
        self.cause = cause
        super().__init__(f"Could not read slot '{slot}': {cause}")


class PersistenceWriteError(ChecklistError):
    """The store refused a write (full, locked, unavailable)."""

    def __init__(self, slot: str, cause: Exception | str) -> None:
        self.slot = slot
        self.cause = cause
        super().__init__(f"Could not write slot '{slot}': {cause}")


class PresentationBlocked(ChecklistError):
    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        msg = "Printweergave kon niet worden geopend. Sta het openen van het rapport toe en probeer opnieuw."
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
