"""
FlagArchive Backend: Entity API Tests
=====================================

What:  End-to-end tests through HTTP, the service and a real SQLite database.
Why:   Confirms the error-kind → status mapping and that every request runs
       in its own committed (or rolled back) transaction.
"""

import pytest


async def create(client, **body):
    return await client.post("/entities", json=body)


class TestEntityLifecycle:

    @pytest.mark.asyncio
    async def test_japan_scenario(self, test_client):
        response = await create(test_client, name="Japan", unique_id="JP")
        assert response.status_code == 201
        assert response.json()["id"] == 1

        response = await create(test_client, name="Japan2", unique_id="JP")
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

        response = await test_client.get("/entities/1")
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 1
        assert body["name"] == "Japan"
        assert body["unique_id"] == "JP"

        response = await test_client.patch("/entities/1", json={"name": "Japan Updated"})
        assert response.status_code == 200
        assert response.json()["name"] == "Japan Updated"
        assert response.json()["unique_id"] == "JP"

        response = await test_client.delete("/entities/1")
        assert response.status_code == 204
        assert response.content == b""

        response = await test_client.get("/entities/1")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_conflict_leaves_single_record(self, test_client):
        await create(test_client, name="Japan", unique_id="JP")
        await create(test_client, name="Japan2", unique_id="JP")

        response = await test_client.get("/entities")

        assert response.json()["total_count"] == 1
        assert response.json()["items"][0]["name"] == "Japan"

    @pytest.mark.asyncio
    async def test_distinct_keys_get_distinct_ids(self, test_client):
        first = await create(test_client, name="Japan", unique_id="JP")
        second = await create(test_client, name="France", unique_id="FR")

        assert first.status_code == second.status_code == 201
        assert first.json()["id"] != second.json()["id"]

    @pytest.mark.asyncio
    async def test_delete_twice_is_not_found_twice(self, test_client):
        await create(test_client, name="Japan", unique_id="JP")

        assert (await test_client.delete("/entities/1")).status_code == 204
        assert (await test_client.delete("/entities/1")).status_code == 404
        assert (await test_client.delete("/entities/1")).status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found_everywhere(self, test_client):
        assert (await test_client.get("/entities/77")).status_code == 404
        assert (await test_client.patch("/entities/77", json={"name": "x"})).status_code == 404
        assert (await test_client.delete("/entities/77")).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("entity_id", [2**31, 2**63])
    async def test_unstorable_id_is_not_found_everywhere(self, test_client, entity_id):
        await create(test_client, name="Japan", unique_id="JP")
        path = f"/entities/{entity_id}"

        for response in (
            await test_client.get(path),
            await test_client.patch(path, json={"name": "x"}),
            await test_client.delete(path),
        ):
            assert response.status_code == 404
            assert response.json()["error"] == "not_found"

        assert (await test_client.get("/entities/1")).json()["name"] == "Japan"


class TestEntityInput:

    @pytest.mark.asyncio
    async def test_missing_fields_are_bad_input(self, test_client):
        response = await create(test_client, category="country")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "bad_input"
        assert {v["field"] for v in body["details"]["violations"]} == {"name", "unique_id"}

    @pytest.mark.asyncio
    async def test_undecodable_body_is_bad_input(self, test_client):
        response = await test_client.post("/entities", json={"name": ["not", "a", "string"]})

        assert response.status_code == 400
        assert response.json()["error"] == "bad_input"
        assert response.json()["details"]["violations"][0]["field"] == "name"

    @pytest.mark.asyncio
    async def test_unique_id_cannot_be_patched(self, test_client):
        await create(test_client, name="Japan", unique_id="JP")

        response = await test_client.patch(
            "/entities/1", json={"unique_id": "JPN", "name": "Nippon"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["violations"][0]["field"] == "unique_id"
        body = (await test_client.get("/entities/1")).json()
        assert body["unique_id"] == "JP"
        assert body["name"] == "Japan"

    @pytest.mark.asyncio
    async def test_fetched_representation_can_be_patched_back(self, test_client):
        created = await create(
            test_client, name="Japan", unique_id="JP", category="country"
        )

        response = await test_client.patch("/entities/1", json=created.json())

        assert response.status_code == 200
        assert response.json() == created.json()

        edited = {**created.json(), "name": "Nippon"}
        response = await test_client.patch("/entities/1", json=edited)
        assert response.status_code == 200
        assert response.json() == edited

    @pytest.mark.asyncio
    async def test_id_in_body_must_match_path(self, test_client):
        await create(test_client, name="Japan", unique_id="JP")

        response = await test_client.patch("/entities/1", json={"id": 2, "name": "x"})

        assert response.status_code == 400
        assert response.json()["details"]["violations"][0]["field"] == "id"

    @pytest.mark.asyncio
    async def test_patch_null_clears_optional_field(self, test_client):
        await create(test_client, name="Japan", unique_id="JP", description="Hinomaru")

        response = await test_client.patch("/entities/1", json={"description": None})

        assert response.status_code == 200
        assert response.json()["description"] is None
        assert response.json()["name"] == "Japan"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/entities/5", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"


class TestEntityListing:

    @pytest.mark.asyncio
    async def test_pagination(self, test_client):
        for i in range(5):
            await create(test_client, name=f"Flag {i}", unique_id=f"F{i}")

        first = await test_client.get("/entities", params={"page": 0, "size": 2})
        last = await test_client.get("/entities", params={"page": 2, "size": 2})

        assert first.headers["X-Total-Count"] == "5"
        assert [e["unique_id"] for e in first.json()["items"]] == ["F0", "F1"]
        assert first.json()["has_more"] is True
        assert [e["unique_id"] for e in last.json()["items"]] == ["F4"]
        assert last.json()["has_more"] is False

    @pytest.mark.asyncio
    async def test_huge_page_size_is_clamped(self, test_client):
        response = await test_client.get("/entities", params={"size": 10000})

        assert response.status_code == 200
        assert response.json()["size"] == 100

    @pytest.mark.asyncio
    async def test_page_far_past_the_end_is_empty(self, test_client):
        await create(test_client, name="Japan", unique_id="JP")

        response = await test_client.get(
            "/entities", params={"page": 10**18, "size": 100}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["total_count"] == 1
        assert body["has_more"] is False
        assert response.headers["X-Total-Count"] == "1"

    @pytest.mark.asyncio
    async def test_negative_page_is_bad_input(self, test_client):
        response = await test_client.get("/entities", params={"page": -1})

        assert response.status_code == 400
