"""Projects CRUD — create/read/update/delete against a live (SQLite) table.

Invariants:
    - POST → 201, body {id, name}, Location /api/test/{id}
    - Created id is immediately readable with the same name
    - Unknown or deleted ids → 404 on GET/PUT/DELETE
    - Expected-absent outcomes never produce an error report
"""

import pytest


async def test_create_get_delete_scenario(client, reports):
    res = await client.post("/api/test", json={"name": "Alpha"})
    assert res.status_code == 201
    assert res.json() == {"id": 1, "name": "Alpha"}
    assert res.headers["location"] == "/api/test/1"

    res = await client.get("/api/test/1")
    assert res.status_code == 200
    assert res.json() == {"id": 1, "name": "Alpha"}

    res = await client.delete("/api/test/1")
    assert res.status_code == 204
    assert res.content == b""

    res = await client.get("/api/test/1")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    assert reports["requests"] == []


async def test_create_with_trailing_slash(client):
    res = await client.post("/api/test/", json={"name": "Slash"})
    assert res.status_code == 201


@pytest.mark.parametrize("name", ["Beta", "with spaces", "ünïcødé", "x" * 500])
async def test_created_id_is_readable(client, name):
    created = (await client.post("/api/test", json={"name": name})).json()
    res = await client.get(f"/api/test/{created['id']}")
    assert res.json() == {"id": created["id"], "name": name}


async def test_client_sent_id_is_ignored(client):
    await client.post("/api/test", json={"name": "First"})
    res = await client.post("/api/test", json={"id": 99, "name": "Second"})
    assert res.json()["id"] == 2


async def test_list_is_ordered_by_id(client):
    for name in ("c", "a", "b"):
        await client.post("/api/test", json={"name": name})

    res = await client.get("/api/test")
    assert res.status_code == 200
    assert res.json() == [
        {"id": 1, "name": "c"},
        {"id": 2, "name": "a"},
        {"id": 3, "name": "b"},
    ]


async def test_list_empty_table(client):
    res = await client.get("/api/test")
    assert res.status_code == 200
    assert res.json() == []


async def test_update_changes_name(client):
    await client.post("/api/test", json={"name": "Old"})

    res = await client.put("/api/test/1", json={"name": "New"})
    assert res.status_code == 204
    assert res.content == b""

    assert (await client.get("/api/test/1")).json()["name"] == "New"


@pytest.mark.parametrize("method", ["get", "delete"])
async def test_unknown_id_is_404(client, reports, method):
    res = await getattr(client, method)("/api/test/424242")
    assert res.status_code == 404
    assert reports["requests"] == []


async def test_update_unknown_id_is_404(client):
    res = await client.put("/api/test/424242", json={"name": "Nobody"})
    assert res.status_code == 404


async def test_deleted_id_stays_gone(client):
    await client.post("/api/test", json={"name": "Temp"})
    assert (await client.delete("/api/test/1")).status_code == 204

    assert (await client.delete("/api/test/1")).status_code == 404
    assert (await client.put("/api/test/1", json={"name": "Back"})).status_code == 404


@pytest.mark.parametrize("body", [{}, {"name": ""}, {"name": None}])
async def test_invalid_body_is_400(client, reports, body):
    res = await client.post("/api/test", json=body)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert res.json()["error"]["category"] == "validation"
    assert reports["requests"] == []


async def test_non_integer_id_is_400(client):
    res = await client.get("/api/test/abc")
    assert res.status_code == 400


@pytest.mark.parametrize("project_id", ["99999999999999999999", "2147483648", "-2147483649"])
@pytest.mark.parametrize("method", ["get", "put", "delete"])
async def test_out_of_range_id_is_400_and_not_reported(client, reports, method, project_id):
    kwargs = {"json": {"name": "x"}} if method == "put" else {}
    res = await client.request(method.upper(), f"/api/test/{project_id}", **kwargs)

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert res.json()["error"]["category"] == "validation"
    assert reports["requests"] == []


async def test_largest_int32_id_is_plain_not_found(client, reports):
    res = await client.get("/api/test/2147483647")
    assert res.status_code == 404
    assert reports["requests"] == []
