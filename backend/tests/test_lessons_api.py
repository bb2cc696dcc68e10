"""
LessonShop Backend - Lesson Endpoint Tests
============================================

What:  GET /lessons, GET /search and PUT /lessons/{id} through the full app.
How:   HTTPX AsyncClient over ASGITransport against a seeded SQLite store.

What we test:
    ✅ /lessons returns exactly the stored set
    ✅ /search is case-insensitive on subject OR location
    ✅ /search treats regex and SQL wildcard characters literally
    ✅ blank/absent q equals /lessons
    ✅ PUT: empty body 400, unknown id 404, partial merge, no-op count 0
    ✅ store failure maps to a generic 500
"""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import SAMPLE_LESSONS, fetch_lesson
from lessonshop.database import DocumentStore
from lessonshop.main import create_app


def _by_id(documents):
    return {doc["id"]: doc for doc in documents}


class TestListLessons:

    @pytest.mark.asyncio
    async def test_returns_every_stored_lesson(self, test_client):
        response = await test_client.get("/lessons")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == len(SAMPLE_LESSONS)
        assert _by_id(body) == {doc["id"]: doc for doc in SAMPLE_LESSONS}

    @pytest.mark.asyncio
    async def test_extra_fields_are_flattened(self, test_client):
        body = _by_id((await test_client.get("/lessons")).json())
        assert body[3]["level"] == "beginner"
        assert "attributes" not in body[3]

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_array(self, settings, store):
        app = create_app(settings=settings, store=store)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/lessons")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_store_error_returns_500(self, settings):
        # Schema never created: every query fails with "no such table"
        broken = DocumentStore(settings.store_url)
        app = create_app(settings=settings, store=broken)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/lessons")
        await broken.dispose()

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "no such table" not in body["message"]


class TestSearchLessons:

    @pytest.mark.asyncio
    async def test_matches_subject_case_insensitively(self, test_client):
        response = await test_client.get("/search", params={"q": "mAtH"})

        assert response.status_code == 200
        assert [doc["id"] for doc in response.json()] == [1]

    @pytest.mark.asyncio
    async def test_non_ascii_letters_match_in_stored_case(self, test_client):
        await test_client.put("/lessons/2", json={"location": "Zürich"})

        response = await test_client.get("/search", params={"q": "ZüRICH"})

        # ASCII letters fold on every store; "ü" is matched as stored
        assert [doc["id"] for doc in response.json()] == [2]

    @pytest.mark.asyncio
    async def test_matches_location(self, test_client):
        response = await test_client.get("/search", params={"q": "oxf"})
        assert [doc["id"] for doc in response.json()] == [2]

    @pytest.mark.asyncio
    async def test_matches_either_field(self, test_client):
        # "advANced" is a subject hit, "St. AlbANs" a location hit
        response = await test_client.get("/search", params={"q": "AN"})
        assert {doc["id"] for doc in response.json()} == {3, 4}

    @pytest.mark.asyncio
    async def test_query_is_trimmed(self, test_client):
        response = await test_client.get("/search", params={"q": "  english  "})
        assert [doc["id"] for doc in response.json()] == [2]

    @pytest.mark.asyncio
    async def test_dot_is_literal(self, test_client):
        """'.' only matches lessons that literally contain a dot (St. Albans)."""
        response = await test_client.get("/search", params={"q": "."})

        ids = {doc["id"] for doc in response.json()}
        assert ids == {3}
        assert 1 not in ids

    @pytest.mark.asyncio
    async def test_dot_star_matches_nothing(self, test_client):
        response = await test_client.get("/search", params={"q": ".*"})
        assert response.json() == []

    @pytest.mark.parametrize("query", ["%", "_", "^M", "h$", "a|e", "*", "\\", "{1}", "?"])
    @pytest.mark.asyncio
    async def test_metacharacters_never_act_as_operators(self, test_client, query):
        response = await test_client.get("/search", params={"q": query})

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_brackets_and_plus_match_literally(self, test_client):
        plus = await test_client.get("/search", params={"q": "c++"})
        brackets = await test_client.get("/search", params={"q": "[2]"})
        parens = await test_client.get("/search", params={"q": "(advanced)"})

        assert [doc["id"] for doc in plus.json()] == [4]
        assert [doc["id"] for doc in brackets.json()] == [4]
        assert [doc["id"] for doc in parens.json()] == [4]

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
    @pytest.mark.asyncio
    async def test_blank_query_equals_list(self, test_client, params):
        everything = (await test_client.get("/lessons")).json()
        response = await test_client.get("/search", params=params)

        assert response.status_code == 200
        assert _by_id(response.json()) == _by_id(everything)


class TestUpdateLesson:

    @pytest.mark.asyncio
    async def test_partial_update_changes_only_named_field(self, test_client, seeded_store):
        before = await fetch_lesson(seeded_store, 3)

        response = await test_client.put("/lessons/3", json={"spaces": 3})

        assert response.status_code == 200
        assert response.json() == {"message": "Lesson updated successfully", "updatedCount": 1}
        after = await fetch_lesson(seeded_store, 3)
        assert after["spaces"] == 3
        assert {k: v for k, v in after.items() if k != "spaces"} == \
            {k: v for k, v in before.items() if k != "spaces"}

    @pytest.mark.asyncio
    async def test_empty_body_rejected_and_lesson_untouched(self, test_client, seeded_store):
        before = await fetch_lesson(seeded_store, 1)

        response = await test_client.put("/lessons/1", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert await fetch_lesson(seeded_store, 1) == before

    @pytest.mark.asyncio
    async def test_missing_body_rejected(self, test_client):
        response = await test_client.put("/lessons/1")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_lesson_returns_404(self, test_client):
        response = await test_client.put("/lessons/999", json={"spaces": 1})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_non_numeric_id_returns_400(self, test_client):
        response = await test_client.put("/lessons/Math", json={"spaces": 1})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_noop_update_reports_zero(self, test_client):
        response = await test_client.put("/lessons/2", json={"spaces": 5, "subject": "English"})

        assert response.status_code == 200
        assert response.json()["updatedCount"] == 0

    @pytest.mark.asyncio
    async def test_unknown_fields_are_merged(self, test_client, seeded_store):
        response = await test_client.put("/lessons/5", json={"tutor": "Ms Smith"})

        assert response.json()["updatedCount"] == 1
        after = await fetch_lesson(seeded_store, 5)
        assert after["tutor"] == "Ms Smith"
        assert after["subject"] == "Art"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self, test_client, seeded_store):
        response = await test_client.put("/lessons/1", json={"spaces": "lots"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "spaces"
        assert (await fetch_lesson(seeded_store, 1))["spaces"] == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body, field", [({"spaces": True}, "spaces"), ({"price": False}, "price")])
    async def test_boolean_numbers_rejected(self, test_client, seeded_store, body, field):
        response = await test_client.put("/lessons/1", json=body)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == field
        stored = await fetch_lesson(seeded_store, 1)
        assert (stored["spaces"], stored["price"]) == (5, 100)

    @pytest.mark.asyncio
    async def test_changing_id_rejected(self, test_client):
        response = await test_client.put("/lessons/1", json={"id": 42})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_same_id_as_string_accepted(self, test_client, seeded_store):
        response = await test_client.put("/lessons/1", json={"id": "1", "spaces": 3})

        assert response.status_code == 200
        assert response.json()["updatedCount"] == 1
        assert (await fetch_lesson(seeded_store, 1))["spaces"] == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["one", True, 1.5])
    async def test_non_integer_id_rejected(self, test_client, bad_id):
        response = await test_client.put("/lessons/1", json={"id": bad_id, "spaces": 3})

        assert response.status_code == 400
        assert response.json()["message"] == "Lesson id must be an integer"
