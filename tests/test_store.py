import pytest

from reportcards.errors import StoreError


def test_find_with_list_filter(store, school):
    rows = store.insert("classes", [
        {"school_id": school["id"], "name": name} for name in ("JHS 1", "JHS 2", "JHS 3")
    ])

    found = store.find("classes", {"id": [rows[0]["id"], rows[2]["id"]]})

    assert [row["name"] for row in found] == ["JHS 1", "JHS 3"]


def test_find_one_returns_none_when_missing(store):
    assert store.find_one("schools", {"id": 42}) is None


def test_update_and_delete_return_counts(store, school):
    store.insert("classes", [
        {"school_id": school["id"], "name": "A"},
        {"school_id": school["id"], "name": "B"},
    ])

    assert store.update("classes", {"name": "B"}, {"name": "C"}) == 1
    assert store.delete("classes", {"name": ["A", "Z"]}) == 1
    assert [row["name"] for row in store.find("classes")] == ["C"]


def test_transaction_rolls_back_every_write(store, school):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert("classes", {"school_id": school["id"], "name": "JHS 1"})
            store.insert("classes", {"school_id": school["id"], "name": "JHS 2"})
            raise RuntimeError("stop")

    assert store.find("classes") == []


def test_nested_transaction_commits_once(store, school):
    with store.transaction():
        store.insert("classes", {"school_id": school["id"], "name": "JHS 1"})
        with store.transaction():
            store.insert("classes", {"school_id": school["id"], "name": "JHS 2"})

    store.session.rollback()

    assert len(store.find("classes")) == 2


def test_unknown_collection_or_column(store):
    with pytest.raises(StoreError):
        store.find("teachers")

    with pytest.raises(StoreError):
        store.find("schools", {"colour": "blue"})
