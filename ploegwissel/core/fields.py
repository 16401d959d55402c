from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Tuple

from .document import PROCESS_STATES, SHIFTS, Document, wire_name


NOTES_MAX = 2000
COMPANY_NAME_MAX = 80


class FieldKind(Enum):
    TEXT = "text"
    BOOL = "bool"
    TRI = "tri"


class Field(Enum):
    """Every scalar leaf of a document, addressed by section and attribute."""

    META_DATE = ("meta", "date", FieldKind.TEXT, 10)
    META_TIME = ("meta", "time", FieldKind.TEXT, 5)
    META_SHIFT = ("meta", "shift", FieldKind.TEXT, 20)
    META_OPERATOR = ("meta", "operator", FieldKind.TEXT, 60)
    META_LEADER = ("meta", "leader", FieldKind.TEXT, 60)

    PROD_PRODUCT = ("prod", "product", FieldKind.TEXT, 80)
    PROD_BATCH = ("prod", "batch", FieldKind.TEXT, 40)
    PROD_STATUS = ("prod", "status", FieldKind.TEXT, 40)
    PROD_STABLE = ("prod", "stable", FieldKind.TRI, None)
    PROD_NOTES = ("prod", "notes", FieldKind.TEXT, NOTES_MAX)

    TECH_HAS_ISSUE = ("tech", "has_issue", FieldKind.TRI, None)
    TECH_ISSUE_NOTES = ("tech", "issue_notes", FieldKind.TEXT, NOTES_MAX)

    QA_SAMPLE_TAKEN = ("qa", "sample_taken", FieldKind.BOOL, None)
    QA_SAMPLE_SENT = ("qa", "sample_sent", FieldKind.BOOL, None)
    QA_DEVIATION = ("qa", "deviation", FieldKind.TRI, None)
    QA_BLOCKED = ("qa", "blocked", FieldKind.TRI, None)
    QA_NOTES = ("qa", "notes", FieldKind.TEXT, NOTES_MAX)

    HYG_CIP = ("hyg", "cip", FieldKind.BOOL, None)
    HYG_MANUAL = ("hyg", "manual", FieldKind.BOOL, None)
    HYG_CLEAN_AREA = ("hyg", "clean_area", FieldKind.BOOL, None)
    HYG_OPEN_TASKS = ("hyg", "open_tasks", FieldKind.TRI, None)
    HYG_OPEN_NOTES = ("hyg", "open_notes", FieldKind.TEXT, NOTES_MAX)

    SAFE_INCIDENT = ("safe", "incident", FieldKind.TRI, None)
    SAFE_INCIDENT_NOTES = ("safe", "incident_notes", FieldKind.TEXT, NOTES_MAX)
    SAFE_RISK = ("safe", "risk", FieldKind.TRI, None)

    PLAN_ACTIONS = ("plan", "actions", FieldKind.TEXT, NOTES_MAX)

    SIGN_FROM_NAME = ("sign", "from_name", FieldKind.TEXT, 60)
    SIGN_FROM_SIGN = ("sign", "from_sign", FieldKind.TEXT, 120)
    SIGN_TO_NAME = ("sign", "to_name", FieldKind.TEXT, 60)
    SIGN_TO_SIGN = ("sign", "to_sign", FieldKind.TEXT, 120)
    SIGN_HANDOVER_DONE = ("sign", "handover_done", FieldKind.BOOL, None)

    def __init__(self, section: str, attr: str, kind: FieldKind, max_length: int | None) -> None:
        self.section = section
        self.attr = attr
        self.kind = kind
        self.max_length = max_length

    @property
    def path(self) -> str:
        return f"{self.section}.{wire_name(self.attr)}"

    @property
    def choices(self) -> Tuple[str, ...] | None:
        return _CHOICES.get(self)

    def get(self, doc: Document) -> Any:
        return getattr(getattr(doc, self.section), self.attr)

    @classmethod
    def lookup(cls, path: str) -> "Field | None":
        return _BY_PATH.get(path)


class MapField(Enum):
    """Fixed-key boolean mappings; only their values ever change."""

    TECH_OK = ("tech", "ok")
    PLAN_ITEMS = ("plan", "items")

    def __init__(self, section: str, attr: str) -> None:
        self.section = section
        self.attr = attr

    @property
    def path(self) -> str:
        return f"{self.section}.{self.attr}"

    def get(self, doc: Document) -> Dict[str, bool]:
        return getattr(getattr(doc, self.section), self.attr)

    @classmethod
    def lookup(cls, path: str) -> "MapField | None":
        return _MAPS_BY_PATH.get(path)


_CHOICES = {Field.META_SHIFT: SHIFTS, Field.PROD_STATUS: PROCESS_STATES}
_BY_PATH = {f.path: f for f in Field}
_MAPS_BY_PATH = {m.path: m for m in MapField}


def clamp_text(value: str, max_length: int | None = NOTES_MAX) -> str:
    if max_length is None:
        return value
    return value[:max_length]
