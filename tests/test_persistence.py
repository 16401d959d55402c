import json
import threading

from ploegwissel.core.mutation import set_field
from ploegwissel.core.persistence import (
    COMPANY_KEY,
    DOCUMENT_KEY,
    LOGO_KEY,
    PersistenceGateway,
    TimerScheduler,
)

from helpers import BlockingStore, BrokenStore


def _document_writes(store):
    return [value for key, value in store.writes if key == DOCUMENT_KEY]


def test_slot_names_carry_schema_version():
    assert DOCUMENT_KEY == "ploegwissel_checklist_v1"
    assert LOGO_KEY == "ploegwissel_logo_v1"
    assert COMPANY_KEY == "ploegwissel_company_v1"


def test_load_from_empty_store(gateway):
    state = gateway.load()
    assert state.document is None
    assert state.company_name is None
    assert state.logo_image is None


def test_load_merges_stored_sections_over_defaults(gateway, store, doc):
    store.set(DOCUMENT_KEY, json.dumps({"meta": {"date": "2026-10-17", "time": "22:00", "shift": "Nacht"}}))
    store.set(COMPANY_KEY, "Melkpoeder BV")
    store.set(LOGO_KEY, "data:image/png;base64,AAAA")
    state = gateway.load()
    assert state.document.meta.shift == "Nacht"
    assert state.document.tech == doc.tech
    assert state.company_name == "Melkpoeder BV"
    assert state.logo_image == "data:image/png;base64,AAAA"


def test_corrupt_document_slot_is_treated_as_absent(gateway, store):
    store.set(DOCUMENT_KEY, "{not json")
    store.set(COMPANY_KEY, "Melkpoeder BV")
    state = gateway.load()
    assert state.document is None
    assert state.company_name == "Melkpoeder BV"


def test_wrongly_typed_document_is_treated_as_absent(gateway, store):
    store.set(DOCUMENT_KEY, json.dumps({"prod": {"stable": "ja"}}))
    assert gateway.load().document is None


def test_unreadable_store_fails_open(scheduler):
    state = PersistenceGateway(BrokenStore(), scheduler=scheduler).load()
    assert state.document is None and state.company_name is None and state.logo_image is None


def test_burst_of_saves_produces_one_write_of_the_latest_state(gateway, store, scheduler, doc):
    for i in range(5):
        doc = set_field(doc, "meta.operator", f"operator {i}")
        gateway.schedule_save(doc, "Melkpoeder BV")
        scheduler.advance(0.02)
    assert _document_writes(store) == []
    scheduler.advance(0.3)
    assert _document_writes(store) == []
    scheduler.advance(0.1)
    writes = _document_writes(store)
    assert len(writes) == 1
    assert json.loads(writes[0])["meta"]["operator"] == "operator 4"
    assert store.get(COMPANY_KEY) == "Melkpoeder BV"
    assert not gateway.has_pending


def test_saves_separated_by_the_quiet_window_each_write(gateway, store, scheduler, doc):
    gateway.schedule_save(doc, "A")
    scheduler.advance(0.5)
    gateway.schedule_save(set_field(doc, "meta.leader", "Anja"), "A")
    scheduler.advance(0.5)
    assert len(_document_writes(store)) == 2


def test_only_one_save_is_outstanding(gateway, scheduler, doc):
    for _ in range(3):
        gateway.schedule_save(doc, "A")
    assert len(scheduler.pending) == 1


def test_flush_writes_pending_state_once(gateway, store, scheduler, doc):
    gateway.schedule_save(set_field(doc, "prod.batch", "MP-7"), "A")
    gateway.flush()
    assert len(_document_writes(store)) == 1
    scheduler.advance(1)
    assert len(_document_writes(store)) == 1


def test_write_failures_are_swallowed_and_reported(scheduler, doc):
    errors = []
    gateway = PersistenceGateway(BrokenStore(), scheduler=scheduler, on_error=errors.append)
    gateway.schedule_save(doc, "A")
    scheduler.advance(1)
    assert {e.slot for e in errors} == {DOCUMENT_KEY, COMPANY_KEY}
    assert gateway.save_logo("data:image/png;base64,AAAA") is False
    gateway.clear_all()


def test_on_saved_receives_timestamp(store, scheduler, doc):
    saved = []
    gateway = PersistenceGateway(store, scheduler=scheduler, on_saved=saved.append)
    gateway.schedule_save(doc, "A")
    scheduler.advance(1)
    assert len(saved) == 1


def test_clear_all_cancels_pending_save_and_deletes_slots(gateway, store, scheduler, doc):
    gateway.save_now(doc, "A")
    gateway.save_logo("data:image/png;base64,AAAA")
    gateway.schedule_save(set_field(doc, "meta.operator", "Jan"), "A")
    gateway.clear_all()
    scheduler.advance(1)
    assert store.data == {}


def test_timer_scheduler_runs_the_write(store, doc):
    done = threading.Event()
    gateway = PersistenceGateway(store, scheduler=TimerScheduler(), debounce=0.01, on_saved=lambda _: done.set())
    gateway.schedule_save(doc, "A")
    assert done.wait(timeout=5)
    assert json.loads(store.get(DOCUMENT_KEY)) == doc.to_dict()


def _operator(store):
    raw = store.get(DOCUMENT_KEY)
    return json.loads(raw)["meta"]["operator"] if raw else None


def test_clear_all_waits_for_an_in_flight_write(doc):
    store = BlockingStore()
    gateway = PersistenceGateway(store, scheduler=TimerScheduler(), debounce=0.01)
    gateway.schedule_save(set_field(doc, "meta.operator", "OLD"), "A")
    assert store.entered.wait(timeout=5)

    clearing = threading.Thread(target=gateway.clear_all)
    clearing.start()
    clearing.join(timeout=0.05)
    assert clearing.is_alive()

    store.release.set()
    clearing.join(timeout=5)
    assert not clearing.is_alive()
    assert store.data == {}


def test_flush_of_newer_state_lands_after_an_in_flight_write(doc):
    store = BlockingStore()
    gateway = PersistenceGateway(store, scheduler=TimerScheduler(), debounce=0.01)
    gateway.schedule_save(set_field(doc, "meta.operator", "OLD"), "A")
    assert store.entered.wait(timeout=5)

    gateway.debounce = 60
    gateway.schedule_save(set_field(doc, "meta.operator", "NEW"), "A")
    flushing = threading.Thread(target=gateway.flush)
    flushing.start()
    store.release.set()
    flushing.join(timeout=5)
    assert not flushing.is_alive()
    assert _operator(store) == "NEW"
    assert not gateway.has_pending


def test_cancelled_write_that_fires_anyway_writes_nothing(gateway, store, scheduler, doc):
    gateway.schedule_save(set_field(doc, "meta.operator", "OLD"), "A")
    stale = scheduler.pending[0].fn
    gateway.clear_all()
    stale()
    assert store.writes == []
