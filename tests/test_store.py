from ploegwissel.core.store import MemoryKeyValueStore, SqliteKeyValueStore


def test_sqlite_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.db"
    store = SqliteKeyValueStore(path)
    assert store.get("ploegwissel_checklist_v1") is None
    store.set("ploegwissel_checklist_v1", '{"meta": {}}')
    store.set("ploegwissel_checklist_v1", '{"prod": {}}')
    assert SqliteKeyValueStore(path).get("ploegwissel_checklist_v1") == '{"prod": {}}'


def test_sqlite_store_delete(tmp_path):
    store = SqliteKeyValueStore(tmp_path / "store.db")
    store.set("ploegwissel_company_v1", "Melkpoeder BV")
    store.delete("ploegwissel_company_v1")
    store.delete("ploegwissel_company_v1")
    assert store.get("ploegwissel_company_v1") is None


def test_memory_store():
    store = MemoryKeyValueStore()
    store.set("a", "1")
    assert store.get("a") == "1"
    store.delete("a")
    assert store.data == {}
