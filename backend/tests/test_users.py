"""
DevCamper API — Admin User Management Tests
============================================
"""

import uuid

import pytest

from devcamper.models.bootcamp import Bootcamp
from helpers import bootcamp_payload, course_payload, review_payload

USERS = "/api/v1/users"


class TestUserAdministration:

    @pytest.mark.asyncio
    async def test_create_list_get_update(self, client, make_user, auth_headers):
        headers = auth_headers(await make_user("admin"))

        created = await client.post(
            USERS,
            json={"name": "Kevin Smith", "email": "kevin@example.com", "password": "123456"},
            headers=headers,
        )
        assert created.status_code == 201
        user = created.json()["data"]
        assert user["role"] == "user"
        assert "password" not in user

        listing = await client.get(USERS, params={"role": "user"}, headers=headers)
        assert [u["email"] for u in listing.json()["data"]] == ["kevin@example.com"]

        fetched = await client.get(f"{USERS}/{user['id']}", headers=headers)
        assert fetched.json()["data"] == user

        updated = await client.put(
            f"{USERS}/{user['id']}", json={"role": "publisher"}, headers=headers
        )
        assert updated.json()["data"]["role"] == "publisher"

    @pytest.mark.asyncio
    async def test_admin_may_create_admin(self, client, make_user, auth_headers):
        headers = auth_headers(await make_user("admin"))
        response = await client.post(
            USERS,
            json={"name": "Root", "email": "root@example.com", "password": "123456", "role": "admin"},
            headers=headers,
        )
        assert response.json()["data"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_create_rejects_mismatched_confirmation(self, client, make_user, auth_headers):
        headers = auth_headers(await make_user("admin"))
        response = await client.post(
            USERS,
            json={
                "name": "Kevin Smith",
                "email": "kevin@example.com",
                "password": "123456",
                "passwordConfirm": "1234567",
            },
            headers=headers,
        )
        assert response.status_code == 400
        assert "Passwords do not match" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client, make_user, auth_headers):
        await make_user(email="dup@example.com")
        headers = auth_headers(await make_user("admin"))

        response = await client.post(
            USERS,
            json={"name": "Dup", "email": "dup@example.com", "password": "123456"},
            headers=headers,
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_missing_user_not_found(self, client, make_user, auth_headers):
        headers = auth_headers(await make_user("admin"))
        response = await client.get(f"{USERS}/{uuid.uuid4()}", headers=headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, client, make_user, auth_headers):
        user = await make_user("user")
        response = await client.get(f"{USERS}/{user.id}", headers=auth_headers(user))
        assert response.status_code == 403


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_removes_reviews_and_recomputes_rating(
        self, client, make_user, auth_headers
    ):
        admin = auth_headers(await make_user("admin"))
        publisher = auth_headers(await make_user("publisher"))
        reviewer = await make_user("user")
        bootcamp_id = (
            await client.post("/api/v1/bootcamps", json=bootcamp_payload(), headers=publisher)
        ).json()["data"]["id"]
        review = (
            await client.post(
                f"/api/v1/bootcamps/{bootcamp_id}/reviews",
                json=review_payload(rating=9),
                headers=auth_headers(reviewer),
            )
        ).json()["data"]

        response = await client.delete(f"{USERS}/{reviewer.id}", headers=admin)

        assert response.status_code == 200
        assert (await client.get(f"{USERS}/{reviewer.id}", headers=admin)).status_code == 404
        assert (await client.get(f"/api/v1/reviews/{review['id']}")).status_code == 404
        bootcamp = (await client.get(f"/api/v1/bootcamps/{bootcamp_id}")).json()["data"]
        assert bootcamp["averageRating"] is None

    @pytest.mark.asyncio
    async def test_owner_of_bootcamp_cannot_be_deleted(self, client, make_user, auth_headers):
        admin = auth_headers(await make_user("admin"))
        publisher = await make_user("publisher")
        publisher_headers = auth_headers(publisher)
        bootcamp_id = (
            await client.post("/api/v1/bootcamps", json=bootcamp_payload(), headers=publisher_headers)
        ).json()["data"]["id"]
        await client.post(
            f"/api/v1/bootcamps/{bootcamp_id}/courses",
            json=course_payload(),
            headers=publisher_headers,
        )

        response = await client.delete(f"{USERS}/{publisher.id}", headers=admin)

        assert response.status_code == 409
        assert (await client.get(f"/api/v1/bootcamps/{bootcamp_id}")).status_code == 200


class TestRoleChange:

    @pytest.mark.asyncio
    async def test_demoting_admin_with_several_bootcamps_conflicts(
        self, client, make_user, auth_headers
    ):
        owner = await make_user("admin")
        owner_headers = auth_headers(owner)
        for name in ("Camp One", "Camp Two"):
            response = await client.post(
                "/api/v1/bootcamps", json=bootcamp_payload(name=name), headers=owner_headers
            )
            assert response.status_code == 201
        admin = auth_headers(await make_user("admin"))

        response = await client.put(f"{USERS}/{owner.id}", json={"role": "publisher"}, headers=admin)

        assert response.status_code == 409
        fetched = (await client.get(f"{USERS}/{owner.id}", headers=admin)).json()["data"]
        assert fetched["role"] == "admin"
        owned = await client.get("/api/v1/bootcamps", params={"user": str(owner.id)})
        assert owned.json()["count"] == 2

    @pytest.mark.asyncio
    async def test_demoted_owner_is_held_to_one_bootcamp(
        self, client, db_session, make_user, auth_headers
    ):
        owner = await make_user("admin")
        owner_headers = auth_headers(owner)
        created = await client.post(
            "/api/v1/bootcamps", json=bootcamp_payload(name="Camp One"), headers=owner_headers
        )
        admin = auth_headers(await make_user("admin"))

        response = await client.put(f"{USERS}/{owner.id}", json={"role": "publisher"}, headers=admin)

        assert response.status_code == 200
        bootcamp = await db_session.get(Bootcamp, uuid.UUID(created.json()["data"]["id"]))
        assert bootcamp.exclusive_owner_id == owner.id
        second = await client.post(
            "/api/v1/bootcamps", json=bootcamp_payload(name="Camp Two"), headers=owner_headers
        )
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_promoted_publisher_may_own_many(
        self, client, db_session, make_user, auth_headers
    ):
        publisher = await make_user("publisher")
        headers = auth_headers(publisher)
        created = await client.post(
            "/api/v1/bootcamps", json=bootcamp_payload(name="Camp One"), headers=headers
        )
        admin = auth_headers(await make_user("admin"))

        response = await client.put(f"{USERS}/{publisher.id}", json={"role": "admin"}, headers=admin)

        assert response.status_code == 200
        bootcamp = await db_session.get(Bootcamp, uuid.UUID(created.json()["data"]["id"]))
        assert bootcamp.exclusive_owner_id is None
        second = await client.post(
            "/api/v1/bootcamps", json=bootcamp_payload(name="Camp Two"), headers=headers
        )
        assert second.status_code == 201
