"""
DevCamper API — Course Endpoint Tests
======================================

What:  Course CRUD through both the flat and the bootcamp-scoped routes,
       ownership checks, and the bootcamp's derived `averageCost`.
"""

import uuid

import pytest

from devcamper.services.course_service import round_up_to_ten
from helpers import CAMBRIDGE_ADDRESS, bootcamp_payload, course_payload

BOOTCAMPS = "/api/v1/bootcamps"
COURSES = "/api/v1/courses"


async def setup_bootcamp(client, headers, **kwargs) -> str:
    response = await client.post(BOOTCAMPS, json=bootcamp_payload(**kwargs), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


async def add_course(client, headers, bootcamp_id, **kwargs) -> dict:
    response = await client.post(
        f"{BOOTCAMPS}/{bootcamp_id}/courses", json=course_payload(**kwargs), headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def average_cost(client, bootcamp_id):
    return (await client.get(f"{BOOTCAMPS}/{bootcamp_id}")).json()["data"]["averageCost"]


class TestRoundUpToTen:

    @pytest.mark.parametrize(
        "value, expected",
        [(11277.5, 11280), (12555, 12560), (10000, 10000), (0.1, 10), (0, 0)],
    )
    def test_rounding(self, value, expected):
        assert round_up_to_ten(value) == expected


class TestCreateCourse:

    @pytest.mark.asyncio
    async def test_owner_adds_course(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers)

        course = await add_course(client, headers, bootcamp_id)

        assert course["bootcamp"] == bootcamp_id
        assert course["user"] == str(publisher.id)
        assert course["minimumSkill"] == "beginner"
        assert course["scholarshipAvailable"] is True

    @pytest.mark.asyncio
    async def test_flat_route_takes_bootcamp_from_body(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers)

        response = await client.post(
            COURSES, json=course_payload(bootcamp=bootcamp_id), headers=headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["bootcamp"] == bootcamp_id

    @pytest.mark.asyncio
    async def test_flat_route_requires_bootcamp(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        response = await client.post(COURSES, json=course_payload(), headers=auth_headers(publisher))
        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a bootcamp id"

    @pytest.mark.asyncio
    async def test_unknown_bootcamp_not_found(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        response = await client.post(
            f"{BOOTCAMPS}/{uuid.uuid4()}/courses",
            json=course_payload(),
            headers=auth_headers(publisher),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_cannot_add_course(self, client, make_user, auth_headers):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        bootcamp_id = await setup_bootcamp(client, auth_headers(owner))

        response = await client.post(
            f"{BOOTCAMPS}/{bootcamp_id}/courses",
            json=course_payload(),
            headers=auth_headers(other),
        )
        assert response.status_code == 403
        assert (await client.get(f"{BOOTCAMPS}/{bootcamp_id}/courses")).json()["count"] == 0

    @pytest.mark.asyncio
    async def test_invalid_skill_level(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers)

        response = await client.post(
            f"{BOOTCAMPS}/{bootcamp_id}/courses",
            json=course_payload(minimumSkill="wizard"),
            headers=headers,
        )
        assert response.status_code == 400


class TestAverageCost:

    @pytest.mark.asyncio
    async def test_tracks_course_writes(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers)

        first = await add_course(client, headers, bootcamp_id, tuition=10000)
        second = await add_course(client, headers, bootcamp_id, title="Back End", tuition=12555)
        assert await average_cost(client, bootcamp_id) == 11280

        await client.put(f"{COURSES}/{first['id']}", json={"tuition": 12000}, headers=headers)
        assert await average_cost(client, bootcamp_id) == 12280

        await client.delete(f"{COURSES}/{first['id']}", headers=headers)
        assert await average_cost(client, bootcamp_id) == 12560

        await client.delete(f"{COURSES}/{second['id']}", headers=headers)
        assert await average_cost(client, bootcamp_id) is None


class TestReadCourses:

    @pytest.mark.asyncio
    async def test_get_includes_bootcamp_summary(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers, name="Summary Camp")
        course = await add_course(client, headers, bootcamp_id)

        data = (await client.get(f"{COURSES}/{course['id']}")).json()["data"]

        assert data["bootcamp"]["id"] == bootcamp_id
        assert data["bootcamp"]["name"] == "Summary Camp"
        assert set(data["bootcamp"]) == {"id", "name", "description"}

    @pytest.mark.asyncio
    async def test_scoped_listing(self, client, make_user, auth_headers):
        admin = await make_user("admin")
        headers = auth_headers(admin)
        camp_a = await setup_bootcamp(client, headers, name="Camp A")
        camp_b = await setup_bootcamp(client, headers, name="Camp B", address=CAMBRIDGE_ADDRESS)
        await add_course(client, headers, camp_a, title="A1")
        await add_course(client, headers, camp_a, title="A2")
        await add_course(client, headers, camp_b, title="B1")

        scoped = (await client.get(f"{BOOTCAMPS}/{camp_a}/courses")).json()
        flat = (await client.get(COURSES)).json()

        assert scoped["count"] == 2
        assert {c["title"] for c in scoped["data"]} == {"A1", "A2"}
        assert flat["count"] == 3
        assert all(c["bootcamp"]["id"] in (camp_a, camp_b) for c in flat["data"])

    @pytest.mark.asyncio
    async def test_listing_filters(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        bootcamp_id = await setup_bootcamp(client, headers)
        await add_course(client, headers, bootcamp_id, title="Cheap", tuition=1000)
        await add_course(client, headers, bootcamp_id, title="Pricey", tuition=9000)

        response = await client.get(
            COURSES, params={"tuition[lt]": "5000", "select": "title,tuition"}
        )

        data = response.json()["data"]
        assert [c["title"] for c in data] == ["Cheap"]
        assert set(data[0]) == {"id", "title", "tuition", "bootcamp"}

    @pytest.mark.asyncio
    async def test_malformed_scope_id_is_bad_request(self, client):
        response = await client.get(f"{BOOTCAMPS}/not-a-uuid/courses")
        assert response.status_code == 400


class TestUpdateDeleteCourse:

    @pytest.mark.asyncio
    async def test_non_owner_update_forbidden_and_unchanged(self, client, make_user, auth_headers):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        owner_headers = auth_headers(owner)
        bootcamp_id = await setup_bootcamp(client, owner_headers)
        course = await add_course(client, owner_headers, bootcamp_id)

        response = await client.put(
            f"{COURSES}/{course['id']}", json={"tuition": 1}, headers=auth_headers(other)
        )

        assert response.status_code == 403
        after = (await client.get(f"{COURSES}/{course['id']}")).json()["data"]
        assert after["tuition"] == course["tuition"]

    @pytest.mark.asyncio
    async def test_non_owner_delete_forbidden(self, client, make_user, auth_headers):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        owner_headers = auth_headers(owner)
        bootcamp_id = await setup_bootcamp(client, owner_headers)
        course = await add_course(client, owner_headers, bootcamp_id)

        response = await client.delete(f"{COURSES}/{course['id']}", headers=auth_headers(other))

        assert response.status_code == 403
        assert (await client.get(f"{COURSES}/{course['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_missing_course_not_found(self, client, make_user, auth_headers):
        publisher = await make_user("publisher")
        response = await client.delete(f"{COURSES}/{uuid.uuid4()}", headers=auth_headers(publisher))
        assert response.status_code == 404
