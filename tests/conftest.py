from __future__ import annotations

from datetime import datetime

import pytest

from ploegwissel.core.document import create_default
from ploegwissel.core.persistence import PersistenceGateway
from helpers import ManualScheduler, RecordingStore


FIXED_NOW = datetime(2026, 10, 18, 6, 5)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def doc(now):
    return create_default(now)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def gateway(store, scheduler, now) -> PersistenceGateway:
    return PersistenceGateway(store, scheduler=scheduler, defaults=lambda: create_default(now))
