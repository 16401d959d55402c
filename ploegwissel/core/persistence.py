"""Persistence gateway: versioned slots, load-on-start and debounced saves.

Every failure in here is logged and swallowed. The in-memory document stays
authoritative; the store is best effort.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

from .document import Document, create_default, merge_loaded
from .errors import PersistenceReadError, PersistenceWriteError
from .store import KeyValueStore


logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"
DOCUMENT_KEY = f"ploegwissel_checklist_{SCHEMA_VERSION}"
LOGO_KEY = f"ploegwissel_logo_{SCHEMA_VERSION}"
COMPANY_KEY = f"ploegwissel_company_{SCHEMA_VERSION}"

DEFAULT_DEBOUNCE_SECONDS = 0.4


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable: ...


class TimerScheduler:
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable:
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer


@dataclass
class LoadedState:
    document: Optional[Document] = None
    company_name: Optional[str] = None
    logo_image: Optional[str] = None


class PersistenceGateway:
    def __init__(
        self,
        store: KeyValueStore,
        scheduler: Optional[Scheduler] = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        defaults: Callable[[], Document] = create_default,
        on_saved: Optional[Callable[[datetime], None]] = None,
        on_error: Optional[Callable[[PersistenceWriteError], None]] = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler or TimerScheduler()
        self.debounce = debounce
        self.defaults = defaults
        self.on_saved = on_saved
        self.on_error = on_error
        self._lock = threading.Lock()
        # held across every store write or delete, so writes land in order
        self._write_lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[Cancellable] = None
        self._pending_write: Optional[Callable[[], None]] = None

    # Loading

    def _read(self, slot: str) -> Optional[str]:
        try:
            return self.store.get(slot)
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s", PersistenceReadError(slot, exc))
            return None

    def load(self) -> LoadedState:
        state = LoadedState()
        raw = self._read(DOCUMENT_KEY)
        if raw:
            try:
                state.document = merge_loaded(self.defaults(), json.loads(raw))
            except (ValueError, PersistenceReadError) as exc:
                err = exc if isinstance(exc, PersistenceReadError) else PersistenceReadError(DOCUMENT_KEY, exc)
                logger.warning("Ignoring stored checklist: %s", err)
        company = self._read(COMPANY_KEY)
        if company:
            state.company_name = company
        logo = self._read(LOGO_KEY)
        if logo:
            state.logo_image = logo
        logger.debug(
            "Loaded state (document=%s, company=%s, logo=%s)",
            state.document is not None,
            state.company_name is not None,
            state.logo_image is not None,
        )
        return state

    # Saving

    def _write(self, slot: str, value: str) -> bool:
        try:
            self.store.set(slot, value)
            return True
        except Exception as exc:  # noqa: BLE001
            self._report(PersistenceWriteError(slot, exc))
            return False

    def _report(self, err: PersistenceWriteError) -> None:
        logger.warning("%s", err)
        if self.on_error:
            self.on_error(err)

    def _save(self, document: Document, company_name: str) -> bool:
        ok = self._write(DOCUMENT_KEY, json.dumps(document.to_dict(), ensure_ascii=False))
        ok = self._write(COMPANY_KEY, company_name) and ok
        if ok:
            logger.debug("Saved checklist %s %s", document.meta.date, document.meta.shift)
            if self.on_saved:
                self.on_saved(datetime.now())
        return ok

    def save_now(self, document: Document, company_name: str) -> bool:
        with self._write_lock:
            return self._save(document, company_name)

    def schedule_save(self, document: Document, company_name: str) -> None:
        """Write ``document`` once no further call arrives within the quiet window.

        A call made while a save is pending cancels it and restarts the timer,
        so a burst of edits produces a single write of the latest state. A
        write that has already started is dropped once it gets the store if a
        newer save was scheduled or the slots were cleared in the meantime.
        """

        def write() -> None:
            with self._lock:
                if self._pending_write is not write:
                    return
                self._pending = None
                self._pending_write = None
            with self._write_lock:
                if self._generation != generation:
                    logger.debug("Dropped superseded save")
                    return
                self._save(document, company_name)

        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None:
                self._pending.cancel()
            self._pending_write = write
            self._pending = self.scheduler.call_later(self.debounce, write)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel_pending(self) -> None:
        with self._lock:
            self._generation += 1
            if self._pending is not None:
                self._pending.cancel()
            self._pending = None
            self._pending_write = None

    def flush(self) -> None:
        with self._lock:
            write = self._pending_write
            if self._pending is not None:
                self._pending.cancel()
        if write is not None:
            write()

    def save_logo(self, encoded_image: str) -> bool:
        with self._write_lock:
            return self._write(LOGO_KEY, encoded_image)

    def clear_all(self) -> None:
        self.cancel_pending()
        with self._write_lock:
            for slot in (DOCUMENT_KEY, LOGO_KEY, COMPANY_KEY):
                try:
                    self.store.delete(slot)
                except Exception as exc:  # noqa: BLE001
                    self._report(PersistenceWriteError(slot, exc))
