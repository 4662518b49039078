import pytest

from daostore.core.persistence.backend import SQLitePersistenceBackend
from daostore.core.persistence.config import PersistenceConfig, PersistenceMode
from daostore.core.persistence.kv_store import MemoryKeyValueStore
from daostore.core.persistence.registry import PersistenceRegistry
from daostore.core.serialization import JsonSerializer
from daostore.datastructures.dao_types import DaoPayload
from daostore.governance.service import GovernanceService


@pytest.mark.asyncio
async def test_memory_kv_store_lists_in_key_order() -> None:
    store = MemoryKeyValueStore()
    await store.put("b", b"2")
    await store.put("a", b"1")
    await store.put("c", b"3")
    assert await store.list_prefix("") == [("a", b"1"), ("b", b"2"), ("c", b"3")]

    await store.delete_many(["a", "c", "missing"])
    assert await store.list_prefix("") == [("b", b"2")]


@pytest.mark.asyncio
async def test_sqlite_kv_store_roundtrip(tmp_path) -> None:
    backend = SQLitePersistenceBackend(db_path=tmp_path / "kv.sqlite")
    await backend.open()
    store = backend.key_value_store("test")
    await store.put("alpha", b"beta")
    assert await store.get("alpha") == b"beta"
    await store.put("alpha", b"gamma")
    assert await store.get("alpha") == b"gamma"
    await store.delete("alpha")
    assert await store.get("alpha") is None
    await backend.close()


@pytest.mark.asyncio
async def test_sqlite_delete_many_and_prefix_scan(tmp_path) -> None:
    backend = SQLitePersistenceBackend(db_path=tmp_path / "kv.sqlite")
    await backend.open()
    store = backend.key_value_store("scan")
    other = backend.key_value_store("other")
    for key in ("p_2", "p_1", "q_1", "p%x"):
        await store.put(key, key.encode())
    await other.put("p_1", b"elsewhere")

    assert [key for key, _ in await store.list_prefix("p_")] == ["p_1", "p_2"]
    assert [key for key, _ in await store.list_prefix("")] == [
        "p%x",
        "p_1",
        "p_2",
        "q_1",
    ]

    await store.delete_many(["p_1", "p_2"])
    await store.delete_many([])
    assert [key for key, _ in await store.list_prefix("")] == ["p%x", "q_1"]
    # namespaces are isolated
    assert await other.get("p_1") == b"elsewhere"
    await backend.close()


@pytest.mark.asyncio
async def test_sqlite_backend_requires_open(tmp_path) -> None:
    backend = SQLitePersistenceBackend(db_path=tmp_path / "closed.sqlite")
    store = backend.key_value_store("test")
    with pytest.raises(RuntimeError, match="not opened"):
        await store.get("anything")


@pytest.mark.asyncio
async def test_registry_requires_open() -> None:
    registry = PersistenceRegistry(PersistenceConfig())
    with pytest.raises(RuntimeError, match="must be awaited"):
        registry.key_value_store("daos")


@pytest.mark.asyncio
async def test_registry_close_closes_its_stores(tmp_path) -> None:
    registry = PersistenceRegistry(
        PersistenceConfig(mode=PersistenceMode.SQLITE, data_dir=tmp_path)
    )
    await registry.open()
    store = registry.key_value_store("daos")
    await store.put("k", b"v")

    await registry.close()

    with pytest.raises(RuntimeError, match="not opened"):
        await store.get("k")


def test_json_serializer_roundtrips_record_dicts() -> None:
    serializer = JsonSerializer()
    record = {"id": "d1", "members": ["alice", "bob"], "updated_at": None}
    assert serializer.deserialize(serializer.serialize(record)) == record


def test_json_serializer_rejects_sets() -> None:
    with pytest.raises(TypeError):
        JsonSerializer().serialize({"members": {"alice"}})


@pytest.mark.asyncio
async def test_governance_records_survive_sqlite_reopen(tmp_path) -> None:
    config = PersistenceConfig(mode=PersistenceMode.SQLITE, data_dir=tmp_path)

    registry = PersistenceRegistry(config)
    await registry.open()
    service = GovernanceService.from_registry(registry)
    created = (
        await service.daos.create_dao("alice", DaoPayload(name="Guild", short_desc="x"))
    ).unwrap()
    await service.daos.add_member_to_dao("alice", created.id, "bob")
    await registry.close()

    reopened = PersistenceRegistry(config)
    await reopened.open()
    restarted = GovernanceService.from_registry(reopened)
    fetched = (await restarted.daos.get_dao("bob", created.id)).unwrap()
    assert fetched.members == ("alice", "bob")
    assert fetched.created_at == created.created_at
    assert fetched.updated_at is None
    await reopened.close()
