"""Integration tests for session, image asset and video endpoints.

Tests:
- Session lookup, deletion and 404 envelopes for unknown sessions
- Render and export reflect the session's image statuses
- Image generation only accepts prompts that occur in the session content
- Stored assets are served and deleted through GridFS (mocked)
- Video generation returns MP4 bytes
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient

from teeshot.models import ContentRequest, GeneratedContent, ImageState, ImageStatus

COVER_PROMPT = "golfer in winter clothes on a frosty fairway"
CARD1_PROMPT = "layered golf outfit flat lay"


@pytest_asyncio.fixture
async def session(fresh_session_store, card_content: str):
    return await fresh_session_store.create_session(
        GeneratedContent(content=card_content, model="gpt-4o"),
        ContentRequest(format="INSTAGRAM-CARD", keyword="골프", category="시즌 팁"),
    )


def assert_error(response, status_code: int, code: str) -> None:
    assert response.status_code == status_code
    body = response.json()
    assert body["data"] is None
    assert body["error"]["code"] == code


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_get_session(self, client: AsyncClient, session):
        response = await client.get(f"/api/sessions/{session.session_id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["session_id"] == session.session_id
        assert data["format"] == "card"
        assert data["image_prompts"][:2] == [COVER_PROMPT, CARD1_PROMPT]

    @pytest.mark.asyncio
    async def test_unknown_session(self, client: AsyncClient):
        response = await client.get("/api/sessions/does-not-exist")
        assert_error(response, 404, "SESSION_NOT_FOUND")
        assert "does-not-exist" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_delete_session(self, client: AsyncClient, session):
        response = await client.delete(f"/api/sessions/{session.session_id}")
        assert response.json() == {"data": {"deleted": True}, "error": None}

        assert_error(await client.get(f"/api/sessions/{session.session_id}"), 404, "SESSION_NOT_FOUND")
        assert_error(await client.delete(f"/api/sessions/{session.session_id}"), 404, "SESSION_NOT_FOUND")


class TestRenderAndExport:
    @pytest.mark.asyncio
    async def test_render_uses_request_keyword(self, client: AsyncClient, session):
        response = await client.get(f"/api/sessions/{session.session_id}/render")

        data = response.json()["data"]
        assert data["format"] == "card"
        title = data["descriptors"][0]
        assert title["kind"] == "heading"
        assert [s["text"] for s in title["spans"] if s["highlight"]] == ["골프"]

    @pytest.mark.asyncio
    async def test_render_keyword_override(self, client: AsyncClient, session):
        response = await client.get(f"/api/sessions/{session.session_id}/render", params={"keyword": "겨울"})

        title = response.json()["data"]["descriptors"][0]
        assert [s["text"] for s in title["spans"] if s["highlight"]] == ["겨울"]

    @pytest.mark.asyncio
    async def test_render_reflects_image_status(self, client: AsyncClient, session):
        session.images.mark_ready(CARD1_PROMPT, "data:image/jpeg;base64,AAAA", "https://cdn/card1.jpeg")
        session.images.mark_failed(COVER_PROMPT, "이미지 생성 실패")

        response = await client.get(f"/api/sessions/{session.session_id}/render")

        slots = {
            d["prompt"]: d for d in response.json()["data"]["descriptors"] if d["kind"] == "image_slot"
        }
        assert slots[CARD1_PROMPT]["state"] == "ready"
        assert slots[CARD1_PROMPT]["local_url"] == "data:image/jpeg;base64,AAAA"
        assert slots[COVER_PROMPT]["state"] == "failed"
        assert slots[COVER_PROMPT]["error"] == "이미지 생성 실패"
        assert slots[COVER_PROMPT]["cover"] is True

    @pytest.mark.asyncio
    async def test_export_only_uses_remote_urls(self, client: AsyncClient, session):
        session.images.mark_ready(CARD1_PROMPT, "data:image/jpeg;base64,AAAA", "https://cdn/card1.jpeg")
        session.images.mark_ready(COVER_PROMPT, "data:image/jpeg;base64,BBBB")

        response = await client.get(f"/api/sessions/{session.session_id}/export")

        data = response.json()["data"]
        assert data["exportable"] is True
        assert data["row"][1] == "시즌 팁"
        assert data["row"][5] == ""
        assert data["row"][9] == "https://cdn/card1.jpeg"


class TestSessionImages:
    @pytest.mark.asyncio
    async def test_list_images(self, client: AsyncClient, session):
        response = await client.get(f"/api/sessions/{session.session_id}/images")

        data = response.json()["data"]
        assert data["session_id"] == session.session_id
        assert [e["prompt"] for e in data["images"]][:2] == [COVER_PROMPT, CARD1_PROMPT]
        assert all(e["status"]["state"] == "idle" for e in data["images"])

    @pytest.mark.asyncio
    async def test_generate_image(self, client: AsyncClient, session):
        status = ImageStatus(state=ImageState.ready, local_url="data:image/jpeg;base64,AAAA")
        mock = AsyncMock(return_value=status)

        with patch("teeshot.services.image_service.generate_image", new=mock):
            response = await client.post(
                f"/api/sessions/{session.session_id}/images",
                json={"prompt": f"📸 이미지 프롬프트: {COVER_PROMPT} (표지용)"},
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["prompt"] == COVER_PROMPT
        assert data["status"]["state"] == "ready"
        assert mock.call_args[0][1] == COVER_PROMPT

    @pytest.mark.asyncio
    async def test_generate_image_rejects_foreign_prompt(self, client: AsyncClient, session):
        mock = AsyncMock()

        with patch("teeshot.services.image_service.generate_image", new=mock):
            response = await client.post(
                f"/api/sessions/{session.session_id}/images",
                json={"prompt": "a prompt that is not in the content"},
            )

        assert_error(response, 400, "VALIDATION_ERROR")
        mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_generate_image_unknown_session(self, client: AsyncClient):
        response = await client.post("/api/sessions/nope/images", json={"prompt": COVER_PROMPT})
        assert_error(response, 404, "SESSION_NOT_FOUND")

    @pytest.mark.asyncio
    async def test_generate_all(self, client: AsyncClient, session):
        async def fake_generate_all(target):
            target.images.mark_ready(COVER_PROMPT, "data:image/jpeg;base64,AAAA", "https://cdn/cover.jpeg")
            return {COVER_PROMPT: target.images.get(COVER_PROMPT)}

        with patch("teeshot.services.image_service.generate_all_images", new=AsyncMock(side_effect=fake_generate_all)):
            response = await client.post(f"/api/sessions/{session.session_id}/images/generate-all")

        images = response.json()["data"]["images"]
        assert images == [
            {
                "prompt": COVER_PROMPT,
                "status": {
                    "state": "ready",
                    "local_url": "data:image/jpeg;base64,AAAA",
                    "remote_url": "https://cdn/cover.jpeg",
                    "error": None,
                    "token": 0,
                },
            }
        ]


class TestImageAssets:
    @pytest.mark.asyncio
    async def test_serve_image(self, client: AsyncClient):
        found = AsyncMock(return_value=(b"\xff\xd8jpeg", "image/jpeg", {}))

        with patch("teeshot.services.asset_store.get_image", new=found):
            response = await client.get("/api/images/assets/abc/content")

        assert response.status_code == 200
        assert response.content == b"\xff\xd8jpeg"
        assert response.headers["content-type"] == "image/jpeg"
        assert "max-age" in response.headers["cache-control"]

    @pytest.mark.asyncio
    async def test_missing_image(self, client: AsyncClient):
        with patch("teeshot.services.asset_store.get_image", new=AsyncMock(return_value=None)):
            response = await client.get("/api/images/assets/abc/content")
        assert_error(response, 404, "IMAGE_NOT_FOUND")

    @pytest.mark.asyncio
    async def test_delete_image(self, client: AsyncClient):
        with patch("teeshot.services.asset_store.delete_image", new=AsyncMock(side_effect=[True, False])):
            first = await client.delete("/api/images/assets/abc")
            second = await client.delete("/api/images/assets/abc")

        assert first.json() == {"data": {"deleted": True}, "error": None}
        assert_error(second, 404, "IMAGE_NOT_FOUND")


class TestVideos:
    @pytest.mark.asyncio
    async def test_generate_video(self, client: AsyncClient):
        mock = AsyncMock(return_value=b"mp4")

        with patch("teeshot.services.video_service.generate_video", new=mock):
            response = await client.post(
                "/api/videos/generate",
                json={"prompt": "golfer swing at sunset", "aspect_ratio": "16:9"},
            )

        assert response.status_code == 200
        assert response.content == b"mp4"
        assert response.headers["content-type"] == "video/mp4"
        assert mock.call_args.kwargs == {"aspect_ratio": "16:9", "resolution": "720p"}

    @pytest.mark.asyncio
    async def test_invalid_aspect_ratio(self, client: AsyncClient):
        response = await client.post("/api/videos/generate", json={"prompt": "x", "aspect_ratio": "4:3"})
        assert response.status_code == 422
