import json

import pytest
from fastapi.testclient import TestClient

from json_records.api import app, get_app_settings, get_collection_store, get_dispatcher
from json_records.config import Settings
from json_records.records import IntentDispatcher, RecordMutator, bind_mutator
from json_records.storage import JSONCollectionStore


@pytest.fixture
def store(tmp_path):
    return JSONCollectionStore(tmp_path / "data.json")


def _wire(store, await_persistence=True):
    dispatcher = bind_mutator(IntentDispatcher(), RecordMutator(store))
    settings = Settings(data_file=str(store.path), await_persistence=await_persistence)
    app.dependency_overrides[get_collection_store] = lambda: store
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_app_settings] = lambda: settings
    return dispatcher


@pytest.fixture
def client(store):
    dispatcher = _wire(store)
    yield TestClient(app)
    app.dependency_overrides.clear()
    dispatcher.shutdown()


def test_read_before_any_write_returns_empty_collection(client, store):
    response = client.get("/data")

    assert response.status_code == 200
    assert response.json() == []
    assert store.path.exists()


def test_create_returns_record_with_numeric_id(client):
    response = client.post("/data", json={"name": "X"})

    assert response.status_code == 201
    payload = response.json()
    assert payload["message"] == "Data Saved"
    assert payload["data"]["name"] == "X"
    assert isinstance(payload["data"]["id"], int)

    collection = client.get("/data").json()
    assert payload["data"] in collection


def test_generated_id_overrides_body_id(client):
    payload = client.post("/data", json={"id": 1, "name": "X"}).json()

    assert payload["data"]["id"] != 1


def test_rapid_creates_receive_distinct_ids(client):
    first = client.post("/data", json={"name": "A"}).json()["data"]["id"]
    second = client.post("/data", json={"name": "B"}).json()["data"]["id"]

    assert first != second
    assert len(client.get("/data").json()) == 2


def test_update_replaces_matching_record(client):
    created = client.post("/data", json={"name": "Laptop", "price": 1000}).json()["data"]

    response = client.put(f"/data/{created['id']}", json={"name": "Laptop", "price": 900})

    assert response.status_code == 200
    assert response.json() == {
        "message": "Data updated",
        "data": {"name": "Laptop", "price": 900, "id": created["id"]},
    }
    assert client.get(f"/data/{created['id']}").json() == {
        "name": "Laptop",
        "price": 900,
        "id": created["id"],
    }


def test_update_of_unknown_id_is_acknowledged_without_change(client, store):
    store.write_all([{"id": 1, "name": "Keep"}])

    response = client.put("/data/999999", json={"name": "Ghost"})

    assert response.status_code == 200
    assert response.json()["data"] == {"name": "Ghost", "id": 999999}
    assert client.get("/data").json() == [{"id": 1, "name": "Keep"}]


def test_update_matches_loosely_but_delete_strictly(client, store):
    store.write_all([{"id": "5", "name": "Stringly"}])

    client.put("/data/5", json={"name": "Numeric"})
    assert client.get("/data").json() == [{"name": "Numeric", "id": 5}]

    store.write_all([{"id": "5", "name": "Stringly"}])
    response = client.delete("/data/5")

    assert response.status_code == 204
    assert client.get("/data").json() == [{"id": "5", "name": "Stringly"}]


def test_delete_removes_record(client):
    created = client.post("/data", json={"name": "Mouse"}).json()["data"]

    response = client.delete(f"/data/{created['id']}")

    assert response.status_code == 204
    assert response.content == b""
    assert client.get("/data").json() == []


def test_delete_of_unknown_id_leaves_collection_unchanged(client, store):
    store.write_all([{"id": 1, "name": "Keep"}])

    response = client.delete("/data/999999")

    assert response.status_code == 204
    assert store.read_all() == [{"id": 1, "name": "Keep"}]


def test_get_by_id_reports_missing_record(client):
    response = client.get("/data/123")

    assert response.status_code == 404
    assert response.json() == {"message": "Record not found"}


def test_unparseable_path_id_falls_back_to_zero(client, store):
    store.write_all([{"id": 0, "name": "Zero"}])

    assert client.get("/data/abc").json() == {"id": 0, "name": "Zero"}


def test_corrupt_data_file_reads_as_empty(client, store):
    store.path.write_text("{oops", encoding="utf-8")

    response = client.get("/data")

    assert response.status_code == 200
    assert response.json() == []


def test_optimistic_response_precedes_persistence(store):
    dispatcher = _wire(store, await_persistence=False)
    try:
        client = TestClient(app)
        response = client.post("/data", json={"name": "Queued"})
        assert response.status_code == 201

        dispatcher.drain(timeout=5)
        saved = json.loads(store.path.read_text(encoding="utf-8"))
        assert saved == [response.json()["data"]]
    finally:
        app.dependency_overrides.clear()
        dispatcher.shutdown()


def test_empty_path_id_addresses_record_zero(client, store):
    store.write_all([{"id": 0, "name": "Zero"}, {"id": 1, "name": "One"}])

    assert client.get("/data/").json() == {"id": 0, "name": "Zero"}

    response = client.put("/data/", json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["data"] == {"name": "Renamed", "id": 0}

    response = client.delete("/data/")
    assert response.status_code == 204
    assert store.read_all() == [{"id": 1, "name": "One"}]


def test_extra_path_segments_use_the_first_as_id(client, store):
    store.write_all([{"id": 5, "name": "Five"}])

    assert client.get("/data/5/details").json() == {"id": 5, "name": "Five"}
