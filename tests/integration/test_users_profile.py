"""Integration tests for the authenticated profile endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from tests.conftest import API_USERS, bearer, image_upload, login, record_view, subscribe
from vidtube.infrastructure.persistence.models import VideoModel


@pytest_asyncio.fixture
async def ann(user_factory):
    return await user_factory(username="ann", email="ann@x.com", fullname="Ann Lee")


@pytest_asyncio.fixture
async def ann_headers(client: AsyncClient, ann):
    response = await login(client, username="ann")
    assert response.status_code == 200
    return bearer(response.json()["data"]["accessToken"])


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_current_user(self, client: AsyncClient, ann, ann_headers):
        response = await client.get(f"{API_USERS}/current-user", headers=ann_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == ann.id
        assert data["username"] == "ann"
        assert "passwordHash" not in data

    @pytest.mark.asyncio
    async def test_current_user_from_cookie(self, client: AsyncClient, ann):
        access = (await login(client, username="ann")).json()["data"]["accessToken"]

        response = await client.get(
            f"{API_USERS}/current-user",
            headers={"Cookie": f"accessToken={access}"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_no_token(self, client: AsyncClient):
        """Protected endpoints without a token return 401 Unauthenticated."""
        response = await client.get(f"{API_USERS}/current-user")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Unauthenticated",
            "message": "Unauthorized request",
            "status": 401,
        }
        assert response.headers["www-authenticate"] == "Bearer"


class TestUpdateAccount:
    @pytest.mark.asyncio
    async def test_update_account(self, client: AsyncClient, ann_headers):
        response = await client.patch(
            f"{API_USERS}/update-account",
            json={"fullname": "Ann Q. Lee", "email": "annq@x.com"},
            headers=ann_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["fullname"] == "Ann Q. Lee"
        assert response.json()["data"]["email"] == "annq@x.com"

    @pytest.mark.asyncio
    async def test_update_account_missing_field(self, client: AsyncClient, ann_headers):
        response = await client.patch(
            f"{API_USERS}/update-account",
            json={"fullname": "Ann"},
            headers=ann_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_update_account_email_conflict(self, client: AsyncClient, user_factory, ann_headers):
        await user_factory(username="bob", email="bob@x.com")

        response = await client.patch(
            f"{API_USERS}/update-account",
            json={"fullname": "Ann", "email": "BOB@x.com"},
            headers=ann_headers,
        )

        assert response.status_code == 409


class TestImages:
    @pytest.mark.asyncio
    async def test_update_avatar(self, client: AsyncClient, ann, ann_headers):
        response = await client.patch(
            f"{API_USERS}/update-avatar",
            files={"avatar": image_upload("new-avatar.png")},
            headers=ann_headers,
        )

        assert response.status_code == 200
        avatar = response.json()["data"]["avatar"]
        assert avatar.startswith("http://test/media/")
        assert avatar != "http://test/media/avatar.png"

    @pytest.mark.asyncio
    async def test_update_avatar_missing_file(self, client: AsyncClient, ann_headers):
        response = await client.patch(f"{API_USERS}/update-avatar", headers=ann_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Avatar file is missing"

    @pytest.mark.asyncio
    async def test_update_cover(self, client: AsyncClient, ann_headers):
        response = await client.patch(
            f"{API_USERS}/update-cover",
            files={"coverImage": image_upload("cover.png")},
            headers=ann_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["coverImage"].startswith("http://test/media/")

    @pytest.mark.asyncio
    async def test_update_cover_missing_file(self, client: AsyncClient, ann_headers):
        response = await client.patch(f"{API_USERS}/update-cover", headers=ann_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cover image file is missing"


class TestChannel:
    @pytest.mark.asyncio
    async def test_channel_profile(self, client: AsyncClient, db_session, user_factory, ann, ann_headers):
        channel = await user_factory(username="chan")
        other = await user_factory(username="other")
        await subscribe(db_session, ann.id, channel.id)
        await subscribe(db_session, other.id, channel.id)
        await subscribe(db_session, channel.id, other.id)
        await db_session.commit()

        response = await client.get(f"{API_USERS}/channel/CHAN", headers=ann_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "chan"
        assert data["subscribersCount"] == 2
        assert data["channelsSubscribedToCount"] == 1
        assert data["isSubscribed"] is True

    @pytest.mark.asyncio
    async def test_unknown_channel(self, client: AsyncClient, ann_headers):
        response = await client.get(f"{API_USERS}/channel/nobody", headers=ann_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Channel does not exist"


class TestWatchHistory:
    @pytest.mark.asyncio
    async def test_watch_history(self, client: AsyncClient, db_session, user_factory, ann, ann_headers):
        owner = await user_factory(username="owner", fullname="Video Owner")
        video = VideoModel(
            owner_id=owner.id,
            title="Intro",
            video_file="http://test/media/intro.mp4",
            thumbnail="http://test/media/intro.png",
            duration=12.5,
        )
        db_session.add(video)
        await db_session.flush()
        await record_view(db_session, ann.id, video.id)
        await db_session.commit()

        response = await client.get(f"{API_USERS}/history", headers=ann_headers)

        assert response.status_code == 200
        items = response.json()["data"]
        assert len(items) == 1
        assert items[0]["title"] == "Intro"
        assert items[0]["videoFile"] == "http://test/media/intro.mp4"
        assert items[0]["owner"] == {
            "username": "owner",
            "fullname": "Video Owner",
            "avatar": "http://test/media/avatar.png",
        }

    @pytest.mark.asyncio
    async def test_empty_history(self, client: AsyncClient, ann_headers):
        response = await client.get(f"{API_USERS}/history", headers=ann_headers)

        assert response.status_code == 200
        assert response.json()["data"] == []


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    assert (await client.get("/health")).json()["status"] == "healthy"
    assert (await client.get("/live")).json()["status"] == "alive"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["x-correlation-id"] == "abc-123"
