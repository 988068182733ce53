"""Unit tests for session image generation.

The asset store is patched; GridFS is not available under mongomock_motor.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from teeshot.llm import ImageResult, RateLimitError
from teeshot.models import ContentRequest, GeneratedContent, ImageState
from teeshot.services import image_service
from teeshot.services.session_store import SessionStore

CARD_PROMPTS = [
    "golfer in winter clothes on a frosty fairway",
    "layered golf outfit flat lay",
    "golf balls on snow",
]


@pytest_asyncio.fixture
async def session(card_content):
    store = SessionStore()
    return await store.create_session(
        GeneratedContent(content=card_content),
        ContentRequest(format="INSTAGRAM-CARD"),
    )


def create_image_client(png: bytes, side_effect=None) -> MagicMock:
    client = MagicMock()
    result = ImageResult(data=png, model="gpt-image-1", provider="openai", latency_ms=10)
    client.generate_image = AsyncMock(side_effect=side_effect, return_value=result)
    return client


def stored(url: str = "https://cdn.example.com/a.jpeg"):
    return patch.object(image_service.asset_store, "store_image", new=AsyncMock(return_value=("abc", url)))


class TestSessionImagePrompts:
    @pytest.mark.asyncio
    async def test_prompts_in_content_order(self, session):
        assert image_service.session_image_prompts(session) == CARD_PROMPTS


class TestGenerateImage:
    @pytest.mark.asyncio
    async def test_success_marks_ready(self, session, test_image_png):
        client = create_image_client(test_image_png)

        with stored() as mock_store:
            status = await image_service.generate_image(session, CARD_PROMPTS[1], client=client)

        assert status.state is ImageState.ready
        assert status.local_url.startswith("data:image/jpeg;base64,")
        assert status.remote_url == "https://cdn.example.com/a.jpeg"
        assert session.images.is_ready(CARD_PROMPTS[1])

        request = client.generate_image.call_args[0][0]
        assert request.prompt == CARD_PROMPTS[1]
        assert request.model == image_service.IMAGE_MODEL
        content, prompt = mock_store.call_args[0]
        assert content[:2] == b"\xff\xd8"
        assert prompt == CARD_PROMPTS[1]
        assert mock_store.call_args.kwargs["metadata"] == {"session_id": session.session_id}

    @pytest.mark.asyncio
    async def test_provider_failure_marks_failed(self, session, test_image_png):
        client = create_image_client(test_image_png, side_effect=RateLimitError("busy"))

        with stored() as mock_store:
            status = await image_service.generate_image(session, CARD_PROMPTS[0], client=client)

        assert status.state is ImageState.failed
        assert "한도" in status.error
        mock_store.assert_not_called()

    @pytest.mark.asyncio
    async def test_undecodable_image_marks_failed(self, session):
        client = create_image_client(b"not an image")

        with stored():
            status = await image_service.generate_image(session, CARD_PROMPTS[0], client=client)

        assert status.state is ImageState.failed

    @pytest.mark.asyncio
    async def test_upload_failure_keeps_local_image(self, session, test_image_png):
        client = create_image_client(test_image_png)
        failing = AsyncMock(side_effect=ConnectionError("gridfs down"))

        with patch.object(image_service.asset_store, "store_image", new=failing):
            status = await image_service.generate_image(session, CARD_PROMPTS[0], client=client)

        assert status.state is ImageState.ready
        assert status.local_url is not None
        assert status.remote_url is None

    @pytest.mark.asyncio
    async def test_superseded_result_is_discarded(self, session, test_image_png):
        client = create_image_client(test_image_png)
        prompt = CARD_PROMPTS[0]

        async def retry_meanwhile(*args, **kwargs):
            session.images.mark_pending(prompt)
            return ("abc", "https://cdn.example.com/old.jpeg")

        with patch.object(image_service.asset_store, "store_image", new=AsyncMock(side_effect=retry_meanwhile)):
            status = await image_service.generate_image(session, prompt, client=client)

        assert status.state is ImageState.pending


class TestGenerateAllImages:
    @pytest.mark.asyncio
    async def test_generates_outstanding_prompts_only(self, session, test_image_png):
        session.images.mark_ready(CARD_PROMPTS[0], "data:image/jpeg;base64,AAAA", "https://cdn.example.com/cover.jpeg")
        client = create_image_client(test_image_png)

        with stored():
            statuses = await image_service.generate_all_images(session, client=client)

        assert list(statuses) == CARD_PROMPTS
        assert all(s.state is ImageState.ready for s in statuses.values())
        assert statuses[CARD_PROMPTS[0]].remote_url == "https://cdn.example.com/cover.jpeg"
        sent = [call[0][0].prompt for call in client.generate_image.call_args_list]
        assert sent == CARD_PROMPTS[1:]

    @pytest.mark.asyncio
    async def test_all_marked_pending_before_first_request(self, session, test_image_png):
        seen = []

        async def record(request):
            seen.append({p: session.images.get(p).state for p in CARD_PROMPTS})
            raise RateLimitError("busy")

        client = MagicMock()
        client.generate_image = AsyncMock(side_effect=record)

        with stored():
            statuses = await image_service.generate_all_images(session, client=client)

        assert all(state is ImageState.pending for state in seen[0].values())
        assert all(s.state is ImageState.failed for s in statuses.values())

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_prompt_and_continues(self, session):
        client = MagicMock()
        client.generate_image = AsyncMock(side_effect=RuntimeError("sdk parse error"))

        with stored():
            statuses = await image_service.generate_all_images(session, client=client)

        assert client.generate_image.call_count == len(CARD_PROMPTS)
        assert [s.state for s in statuses.values()] == [ImageState.failed] * 3
        assert "sdk parse error" in statuses[CARD_PROMPTS[0]].error

    @pytest.mark.asyncio
    async def test_cancelled_batch_leaves_nothing_pending(self, session, test_image_png):
        result = ImageResult(data=test_image_png, model="gpt-image-1", provider="openai", latency_ms=10)
        client = MagicMock()
        client.generate_image = AsyncMock(side_effect=[result, asyncio.CancelledError()])

        with stored():
            with pytest.raises(asyncio.CancelledError):
                await image_service.generate_all_images(session, client=client)

        states = [session.images.get(p).state for p in CARD_PROMPTS]
        assert states == [ImageState.ready, ImageState.failed, ImageState.failed]
        assert session.images.get(CARD_PROMPTS[2]).error == image_service.INTERRUPTED_MESSAGE
