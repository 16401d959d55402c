from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterator, List, Tuple

from ploegwissel.core.document import Document


@dataclass(frozen=True)
class Completion:
    done: int
    total: int
    pct: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


Indicator = Tuple[str, Callable[[Document], bool]]

FIXED_INDICATORS: List[Indicator] = [
    ("meta.shift", lambda d: bool(d.meta.shift)),
    ("meta.operator", lambda d: bool(d.meta.operator)),
    ("meta.leader", lambda d: bool(d.meta.leader)),
    ("prod.product", lambda d: bool(d.prod.product)),
    ("prod.batch", lambda d: bool(d.prod.batch)),
    ("prod.status", lambda d: bool(d.prod.status)),
    ("prod.stable", lambda d: d.prod.stable.answered),
]

TRAILING_INDICATORS: List[Indicator] = [
    ("tech.hasIssue", lambda d: d.tech.has_issue.answered),
    ("qa.deviation", lambda d: d.qa.deviation.answered),
    ("qa.blocked", lambda d: d.qa.blocked.answered),
    ("hyg.cleaning", lambda d: d.hyg.cip or d.hyg.manual or d.hyg.clean_area),
    ("hyg.openTasks", lambda d: d.hyg.open_tasks.answered),
    ("safe.incident", lambda d: d.safe.incident.answered),
    ("safe.risk", lambda d: d.safe.risk.answered),
    ("sign.fromName", lambda d: bool(d.sign.from_name)),
    ("sign.toName", lambda d: bool(d.sign.to_name)),
    ("sign.handoverDone", lambda d: d.sign.handover_done),
]


def indicators(doc: Document) -> Iterator[Tuple[str, bool]]:
    """Yield (name, satisfied) for every required indicator, in checklist order."""
    for name, check in FIXED_INDICATORS:
        yield name, check(doc)
    for key, ok in doc.tech.ok.items():
        yield f"tech.ok.{key}", bool(ok)
    for name, check in TRAILING_INDICATORS:
        yield name, check(doc)


def score(doc: Document) -> Completion:
    total = 0
    done = 0
    for _, satisfied in indicators(doc):
        total += 1
        if satisfied:
            done += 1
    # half up, not banker's rounding
    pct = math.floor(100 * done / total + 0.5) if total else 0
    return Completion(done=done, total=total, pct=pct)


def open_items(doc: Document) -> List[str]:
    return [name for name, satisfied in indicators(doc) if not satisfied]
