"""Tests for the in-process document store."""

from datetime import timedelta

import pytest

from conftest import FROZEN_NOW
from healthsync.core.exceptions import NotFoundException
from healthsync.store import MEDICATIONS, USERS, XP_HISTORY, Mutation
from healthsync.store.base import split_path


@pytest.mark.asyncio
async def test_set_get_and_merge(store):
    """Test set_document with and without merge."""
    await store.set_document(USERS, "u1", {"name": "Ann", "xp": 5})
    await store.set_document(USERS, "u1", {"xp": 7}, merge=True)

    assert await store.get_document(USERS, "u1") == {"id": "u1", "name": "Ann", "xp": 7}

    await store.set_document(USERS, "u1", {"xp": 9})
    assert await store.get_document(USERS, "u1") == {"id": "u1", "xp": 9}


@pytest.mark.asyncio
async def test_returned_documents_are_copies(store):
    """Test returned documents are copies."""
    await store.set_document(USERS, "u1", {"tags": ["a"]})

    document = await store.get_document(USERS, "u1")
    document["tags"].append("b")

    assert (await store.get_document(USERS, "u1"))["tags"] == ["a"]


@pytest.mark.asyncio
async def test_update_missing_document(store):
    """Test update missing document."""
    with pytest.raises(NotFoundException):
        await store.update_fields(USERS, "ghost", {"xp": 1})


@pytest.mark.asyncio
async def test_add_and_delete(store):
    """Test adding and deleting documents."""
    doc_id = await store.add_document(MEDICATIONS, {"userId": "u1"})

    assert (await store.get_document(MEDICATIONS, doc_id))["userId"] == "u1"

    await store.delete_document(MEDICATIONS, doc_id)
    await store.delete_document(MEDICATIONS, doc_id)
    assert await store.get_document(MEDICATIONS, doc_id) is None


@pytest.mark.asyncio
async def test_query_orders_and_limits(store):
    """Test query orders and limits."""
    for offset in (3, 1, 2):
        await store.add_document(
            MEDICATIONS,
            {
                "userId": "u1",
                "name": f"med-{offset}",
                "createdAt": FROZEN_NOW - timedelta(days=offset),
            },
        )
    await store.add_document(MEDICATIONS, {"userId": "u1", "name": "undated"})
    await store.add_document(MEDICATIONS, {"userId": "u2", "name": "other", "createdAt": FROZEN_NOW})

    newest_first = await store.query_by_field(
        MEDICATIONS, "userId", "u1", order_by="createdAt", descending=True, limit=2
    )
    everything = await store.query_by_field(MEDICATIONS, "userId", "u1")

    assert [doc["name"] for doc in newest_first] == ["med-1", "med-2"]
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_query_lower_bound_on_order_field(store):
    """Test that min_value drops documents ordered before it."""
    for offset in (0, 2, 5, 9):
        await store.add_document(
            XP_HISTORY,
            {"userId": "u1", "points": offset, "timestamp": FROZEN_NOW - timedelta(days=offset)},
        )

    recent = await store.query_by_field(
        XP_HISTORY,
        "userId",
        "u1",
        order_by="timestamp",
        min_value=FROZEN_NOW - timedelta(days=5),
    )

    assert [doc["points"] for doc in recent] == [5, 2, 0]


@pytest.mark.asyncio
async def test_transact_applies_updates_and_appends(store):
    """Test transact applies updates and appends."""
    await store.set_document(USERS, "u1", {"xp": 10})

    def apply(document):
        return Mutation(
            result=document["xp"] + 5,
            updates={"xp": document["xp"] + 5},
            appends=[(XP_HISTORY, {"userId": "u1", "points": 5})],
        )

    result = await store.transact(USERS, "u1", apply)

    assert result == 15
    assert (await store.get_document(USERS, "u1"))["xp"] == 15
    assert len(await store.query_by_field(XP_HISTORY, "userId", "u1")) == 1


@pytest.mark.asyncio
async def test_empty_mutation_writes_nothing(store):
    """Test empty mutation writes nothing."""
    await store.set_document(USERS, "u1", {"xp": 10})
    writes = store.write_count

    result = await store.transact(USERS, "u1", lambda document: Mutation(result="unchanged"))

    assert result == "unchanged"
    assert store.write_count == writes


@pytest.mark.asyncio
async def test_failing_mutator_writes_nothing(store):
    """Test failing mutator writes nothing."""
    await store.set_document(USERS, "u1", {"xp": 10})
    writes = store.write_count

    def apply(document):
        raise NotFoundException("nope")

    with pytest.raises(NotFoundException):
        await store.transact(USERS, "u1", apply)

    assert store.write_count == writes


@pytest.mark.asyncio
async def test_collection_subscription(store):
    """Test collection subscription."""
    snapshots = []
    unsubscribe = store.subscribe(USERS, snapshots.append)

    await store.set_document(USERS, "u1", {"xp": 1})
    await store.set_document(USERS, "u2", {"xp": 2})
    unsubscribe()
    await store.set_document(USERS, "u3", {"xp": 3})

    # initial state, then one full snapshot per write
    assert [len(snapshot) for snapshot in snapshots] == [0, 1, 2]


@pytest.mark.asyncio
async def test_document_subscription(store):
    """Test document subscription."""
    snapshots = []
    store.subscribe(f"{USERS}/u1", snapshots.append)

    await store.set_document(USERS, "u1", {"xp": 1})
    await store.set_document(USERS, "u2", {"xp": 2})
    await store.delete_document(USERS, "u1")

    assert snapshots == [[], [{"id": "u1", "xp": 1}], []]


@pytest.mark.asyncio
async def test_subscription_errors_go_to_error_callback(store):
    """Test subscription errors go to error callback."""
    errors = []

    def explode(documents):
        if documents:
            raise RuntimeError("listener failed")

    store.subscribe(USERS, explode, errors.append)
    await store.set_document(USERS, "u1", {"xp": 1})

    assert len(errors) == 1
    assert str(errors[0]) == "listener failed"


def test_split_path():
    """Test split path."""
    assert split_path("users") == ("users", None)
    assert split_path("/users/u1") == ("users", "u1")
    with pytest.raises(ValueError):
        split_path("users/u1/history")
    with pytest.raises(ValueError):
        split_path("")


@pytest.mark.asyncio
async def test_ping(store):
    """Test ping endpoint."""
    assert await store.ping() is True
