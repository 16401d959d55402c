from __future__ import annotations

import json
from typing import Tuple

from ploegwissel.core.document import Document


def export_filename(doc: Document) -> str:
    return f"ploegwissel_{doc.meta.date}_{doc.meta.shift}.json"


def export_snapshot(doc: Document, company_name: str) -> Tuple[bytes, str]:
    """Serialize ``doc`` for archiving as ``{"companyName": ..., "data": ...}``.

    The filename depends only on the document's own date and shift, so
    exporting the same checklist twice yields the same name.
    """
    payload = {"companyName": company_name, "data": doc.to_dict()}
    data = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
    return data, export_filename(doc)


def load_snapshot(data: bytes | str) -> Tuple[str, Document]:
    payload = json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
    if not isinstance(payload, dict) or "data" not in payload:
        raise ValueError("not a checklist export: missing 'data'")
    return str(payload.get("companyName", "")), Document.from_dict(payload["data"])
