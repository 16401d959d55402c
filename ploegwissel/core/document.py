from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional

from .errors import PersistenceReadError


SHIFTS = ("Ochtend", "Middag", "Nacht")
PROCESS_STATES = ("Opstart", "In productie", "Reiniging (CIP)", "Stilstand", "Onderhoud")
TECH_SUBSYSTEMS = ("Spray dryer", "Indamper", "Zeef", "Verpakking", "Silos", "Utilities")
PLAN_ITEMS = ("Productie loopt door", "Batchwissel gepland", "Reiniging gepland", "Onderhoud gepland")
DEFAULT_COMPANY_NAME = "Zuivelfabriek – Melkpoeders"


class TriState(Enum):
    """Yes/no answer that may still be open. Serialized as null/true/false."""

    UNDETERMINED = None
    YES = True
    NO = False

    @classmethod
    def coerce(cls, value: Any) -> "TriState":
        if isinstance(value, TriState):
            return value
        if value is None or isinstance(value, bool):
            return cls(value)
        raise ValueError(f"expected null, true or false, got {value!r}")

    @property
    def answered(self) -> bool:
        return self is not TriState.UNDETERMINED


def wire_name(attr: str) -> str:
    head, *rest = attr.split("_")
    return head + "".join(part.title() for part in rest)


def _coerce_like(default: Any, raw: Any) -> Any:
    if isinstance(default, TriState):
        return TriState.coerce(raw)
    if isinstance(default, bool):
        if not isinstance(raw, bool):
            raise TypeError(f"expected a boolean, got {raw!r}")
        return raw
    if isinstance(default, str):
        if not isinstance(raw, str):
            raise TypeError(f"expected a string, got {raw!r}")
        return raw
    if isinstance(default, dict):
        if not isinstance(raw, Mapping):
            raise TypeError(f"expected an object, got {raw!r}")
        out: Dict[str, bool] = {}
        for key, value in raw.items():
            if not isinstance(value, bool):
                raise TypeError(f"expected a boolean for '{key}', got {value!r}")
            out[str(key)] = value
        return out
    raise TypeError(f"unsupported field type {type(default).__name__}")


class _Section:
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, TriState):
                value = value.value
            elif isinstance(value, dict):
                value = dict(value)
            out[wire_name(f.name)] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional["_Section"] = None):
        """Build a section from its wire form.

        Fields missing from ``data`` are copied from ``base`` (the dataclass
        defaults when omitted); mapping contents are taken as stored, so no
        keys are added or dropped.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        defaults = base if base is not None else cls()
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            key = wire_name(f.name)
            default = getattr(defaults, f.name)
            if key in data:
                kwargs[f.name] = _coerce_like(default, data[key])
            else:
                kwargs[f.name] = copy.deepcopy(default)
        return cls(**kwargs)


@dataclass
class Meta(_Section):
    date: str = ""
    time: str = ""
    shift: str = "Ochtend"
    operator: str = ""
    leader: str = ""


@dataclass
class Production(_Section):
    product: str = ""
    batch: str = ""
    status: str = "In productie"
    stable: TriState = TriState.UNDETERMINED
    notes: str = ""


@dataclass
class Technical(_Section):
    ok: Dict[str, bool] = field(default_factory=lambda: dict.fromkeys(TECH_SUBSYSTEMS, False))
    has_issue: TriState = TriState.UNDETERMINED
    issue_notes: str = ""


@dataclass
class Quality(_Section):
    sample_taken: bool = False
    sample_sent: bool = False
    deviation: TriState = TriState.UNDETERMINED
    blocked: TriState = TriState.UNDETERMINED
    notes: str = ""


@dataclass
class Hygiene(_Section):
    cip: bool = False
    manual: bool = False
    clean_area: bool = False
    open_tasks: TriState = TriState.UNDETERMINED
    open_notes: str = ""


@dataclass
class Safety(_Section):
    incident: TriState = TriState.UNDETERMINED
    incident_notes: str = ""
    risk: TriState = TriState.UNDETERMINED


@dataclass
class Planning(_Section):
    items: Dict[str, bool] = field(default_factory=lambda: dict.fromkeys(PLAN_ITEMS, False))
    actions: str = ""


@dataclass
class SignOff(_Section):
    from_name: str = ""
    from_sign: str = ""
    to_name: str = ""
    to_sign: str = ""
    handover_done: bool = False


@dataclass
class Document:
    """One snapshot of the shift-handover checklist."""

    meta: Meta = field(default_factory=Meta)
    prod: Production = field(default_factory=Production)
    tech: Technical = field(default_factory=Technical)
    qa: Quality = field(default_factory=Quality)
    hyg: Hygiene = field(default_factory=Hygiene)
    safe: Safety = field(default_factory=Safety)
    plan: Planning = field(default_factory=Planning)
    sign: SignOff = field(default_factory=SignOff)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name).to_dict() for name in SECTION_TYPES}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        return merge_loaded(cls(), data)

    def copy(self) -> "Document":
        return copy.deepcopy(self)


SECTION_TYPES = {
    "meta": Meta,
    "prod": Production,
    "tech": Technical,
    "qa": Quality,
    "hyg": Hygiene,
    "safe": Safety,
    "plan": Planning,
    "sign": SignOff,
}


def create_default(
    now: datetime | None = None,
    tech_subsystems: Iterable[str] = TECH_SUBSYSTEMS,
    plan_items: Iterable[str] = PLAN_ITEMS,
) -> Document:
    now = now or datetime.now()
    return Document(
        meta=Meta(date=now.strftime("%Y-%m-%d"), time=now.strftime("%H:%M")),
        tech=Technical(ok=dict.fromkeys(tech_subsystems, False)),
        plan=Planning(items=dict.fromkeys(plan_items, False)),
    )


def merge_loaded(defaults: Document, persisted: Mapping[str, Any]) -> Document:
    """Overlay persisted sections on ``defaults``, one whole section at a time.

    A section present in ``persisted`` replaces the default section; there is
    no per-field reconciliation, so a subsystem added to ``TECH_SUBSYSTEMS``
    only shows up for stored documents once their ``tech`` section is reset.
    Fields missing inside a stored section are taken from ``defaults``.
    """
    if not isinstance(persisted, Mapping):
        raise PersistenceReadError("document", f"expected an object, got {type(persisted).__name__}")
    merged = copy.deepcopy(defaults)
    for name, section_type in SECTION_TYPES.items():
        if name not in persisted:
            continue
        try:
            setattr(merged, name, section_type.from_dict(persisted[name], getattr(defaults, name)))
        except (TypeError, ValueError) as exc:
            raise PersistenceReadError("document", f"section '{name}': {exc}") from exc
    return merged
