from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

from ploegwissel.core.document import DEFAULT_COMPANY_NAME


logger = logging.getLogger(__name__)

SETTINGS_FILE = "ploegwissel.settings.json"

DEFAULTS: Dict[str, Any] = {
    "store": {"path": ".ploegwissel/store.db"},
    "autosave": {"debounceMs": 400},
    "reports": {"dir": "reports", "openBrowser": True},
    "company": {"defaultName": DEFAULT_COMPANY_NAME},
    "logging": {"level": "WARNING"},
}


def load_settings(cwd: Path | None = None) -> Dict[str, Any]:
    cwd = cwd or Path.cwd()
    cfg_path = cwd / SETTINGS_FILE
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings must be a JSON object")
            return _merge(copy.deepcopy(DEFAULTS), data)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring %s: %s", cfg_path, exc)
            return copy.deepcopy(DEFAULTS)
    return copy.deepcopy(DEFAULTS)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def resolve_path(settings: Dict[str, Any], section: str, key: str, cwd: Path | None = None) -> Path:
    path = Path(settings[section][key]).expanduser()
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    return path
