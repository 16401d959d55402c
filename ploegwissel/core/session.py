from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

from .document import DEFAULT_COMPANY_NAME, Document, create_default
from .errors import PresentationBlocked
from .fields import COMPANY_NAME_MAX, clamp_text
from .mutation import PathLike, set_field, toggle_map_entry
from .persistence import PersistenceGateway
from ploegwissel.modules.export import export_snapshot
from ploegwissel.modules.scoring import Completion, score
from ploegwissel.tools import validators
from ploegwissel.tools.report_html import render
from ploegwissel.tools.report_sink import ReportSink


logger = logging.getLogger(__name__)


class ChecklistSession:
    """Holds the current snapshot for one operator surface and saves each change.

    Every edit goes through the pure mutation functions; the session only swaps
    its reference to the newest snapshot and schedules a debounced save.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        sink: Optional[ReportSink] = None,
        clock: Callable[[], datetime] = datetime.now,
        default_company_name: str = DEFAULT_COMPANY_NAME,
    ) -> None:
        self.gateway = gateway
        self.sink = sink
        self.clock = clock
        self.default_company_name = default_company_name
        self.document: Document = create_default(clock())
        self.company_name = default_company_name
        self.logo_image: Optional[str] = None

    def start(self) -> "ChecklistSession":
        loaded = self.gateway.load()
        if loaded.document is not None:
            self.document = loaded.document
        if loaded.company_name is not None:
            self.company_name = loaded.company_name
        if loaded.logo_image is not None:
            self.logo_image = loaded.logo_image
        return self

    def _changed(self) -> None:
        self.gateway.schedule_save(self.document, self.company_name)

    def update(self, path: PathLike, value: Any) -> Document:
        self.document = set_field(self.document, path, value)
        self._changed()
        return self.document

    def toggle(self, path: PathLike, key: str) -> Document:
        self.document = toggle_map_entry(self.document, path, key)
        self._changed()
        return self.document

    def set_company_name(self, name: str) -> str:
        self.company_name = clamp_text(name, COMPANY_NAME_MAX)
        self._changed()
        return self.company_name

    def upload_logo(self, payload: bytes, mime_type: str | None) -> str:
        encoded = validators.encode_logo(payload, mime_type)
        self.logo_image = encoded
        self.gateway.save_logo(encoded)
        return encoded

    def upload_logo_file(self, path: Path) -> str:
        encoded = validators.load_logo_file(path)
        self.logo_image = encoded
        self.gateway.save_logo(encoded)
        return encoded

    def reset(self, save: bool = True) -> Document:
        self.document = create_default(self.clock())
        if save:
            self._changed()
        return self.document

    def hard_clear(self) -> Document:
        self.gateway.clear_all()
        self.logo_image = None
        self.company_name = self.default_company_name
        logger.info("Cleared stored checklist, company name and logo")
        return self.reset(save=False)

    @property
    def completion(self) -> Completion:
        return score(self.document)

    def print_report(self) -> Path:
        if self.sink is None:
            raise PresentationBlocked("geen printweergave ingesteld")
        artifact = render(self.document, self.company_name, self.logo_image)
        return self.sink.deliver(artifact)

    def export(self) -> Tuple[bytes, str]:
        return export_snapshot(self.document, self.company_name)

    def flush(self) -> None:
        self.gateway.flush()
