from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Protocol

from ploegwissel.core.errors import PresentationBlocked
from ploegwissel.tools.pathutil import ensure_dir, sanitize_filename
from ploegwissel.tools.report_html import PrintableArtifact


logger = logging.getLogger(__name__)


class ReportSink(Protocol):
    def deliver(self, artifact: PrintableArtifact) -> Path: ...


@dataclass
class BrowserReportSink:
    """Write the artifact to ``reports_dir`` and open it for printing.

    Raises ``PresentationBlocked`` when the file cannot be written or the
    browser refuses to open it. There is no retry and no fallback surface.
    """

    reports_dir: Path
    open_browser: bool = True
    opener: Callable[[str], bool] = webbrowser.open

    def deliver(self, artifact: PrintableArtifact) -> Path:
        target = Path(self.reports_dir) / sanitize_filename(f"{artifact.title}.html")
        try:
            ensure_dir(target.parent)
            target.write_text(artifact.html, encoding="utf-8")
        except OSError as exc:
            raise PresentationBlocked(f"kan {target} niet schrijven: {exc}") from exc
        if self.open_browser:
            if not self.opener(target.resolve().as_uri()):
                raise PresentationBlocked("geen browser beschikbaar")
            logger.info("Opened report %s", target)
        return target


@dataclass
class MemoryReportSink:
    delivered: List[PrintableArtifact] = field(default_factory=list)
    blocked: bool = False

    def deliver(self, artifact: PrintableArtifact) -> Path:
        if self.blocked:
            raise PresentationBlocked("weergave niet beschikbaar")
        self.delivered.append(artifact)
        return Path(f"{artifact.title}.html")
