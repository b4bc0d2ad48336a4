from datetime import datetime, timezone

from events_service_api.app.core.db import Collection, generate_object_id, get_cursor, init_db
from events_service_api.app.core.validation import is_object_id


def test_generated_ids_are_object_ids():
    ids = {generate_object_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(is_object_id(doc_id) and doc_id == doc_id.lower() for doc_id in ids)


def test_init_db_is_repeatable(database):
    init_db()
    with get_cursor() as cursor:
        row = cursor.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
    assert row["version"] == 2


def test_insert_and_find_one(database):
    things = Collection("things")
    doc_id = things.insert_one({"name": "lamp", "at": datetime(2024, 1, 1, tzinfo=timezone.utc)})

    doc = things.find_one(doc_id)
    assert doc == {"_id": doc_id, "name": "lamp", "at": "2024-01-01T00:00:00+00:00"}
    assert things.find_one(generate_object_id()) is None


def test_collections_are_isolated(database):
    doc_id = Collection("things").insert_one({"name": "lamp"})
    assert Collection("other").find_one(doc_id) is None
    assert Collection("other").find() == []


def test_find_filters_on_equality_in_insertion_order(database):
    things = Collection("things")
    first = things.insert_one({"kind": "a", "n": 1})
    things.insert_one({"kind": "b", "n": 2})
    third = things.insert_one({"kind": "a", "n": 3})

    assert [doc["_id"] for doc in things.find({"kind": "a"})] == [first, third]
    assert len(things.find()) == 3
    assert things.find({"kind": "z"}) == []
    assert things.find_first({"kind": "a"})["n"] == 1


def test_update_one_sets_fields(database):
    things = Collection("things")
    doc_id = things.insert_one({"name": "lamp", "watts": 40})

    assert things.update_one(doc_id, {"watts": 60, "colour": "red"}) is True
    assert things.find_one(doc_id) == {"_id": doc_id, "name": "lamp", "watts": 60, "colour": "red"}
    assert things.update_one(generate_object_id(), {"watts": 1}) is False


def test_delete_one(database):
    things = Collection("things")
    doc_id = things.insert_one({"name": "lamp"})

    assert things.delete_one(doc_id) is True
    assert things.delete_one(doc_id) is False
    assert things.find_one(doc_id) is None
