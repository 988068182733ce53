"""Pytest fixtures for testing."""

import io
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient
from PIL import Image

from teeshot.api.main import app
from teeshot.db import mongo
from teeshot.services import session_store


CARD_CONTENT = """제목: 겨울 골프 라운드 준비 체크리스트
📸 이미지 프롬프트: golfer in winter clothes on a frosty fairway (표지용)
[Card 1] 레이어드 착용
💡 소제목: 얇게 여러 겹
기능성 이너웨어를 먼저 입으세요.
바람막이는 필수입니다.
📸 이미지 프롬프트: layered golf outfit flat lay
🔎 출처: 골프다이제스트
[Card 2] 공 선택
💡 소제목: 저압축 볼
추운 날에는 반발력이 떨어집니다.
📸 이미지 프롬프트: golf balls on snow
🔎 출처: 자체 정보
✍️ 포스팅 글
겨울에도 골프는 계속됩니다!
준비만 잘하면 충분히 즐길 수 있어요.
🔑 핵심키워드: 겨울골프, 방한
#골프 #겨울 #라운드
🔎 참고자료
- 골프다이제스트 https://golfdigest.example.com/winter
후속 제안: 봄 시즌 준비, 실내 연습법"""

BLOG_CONTENT = """✅ 1. 제목 드라이버 비거리 늘리는 3가지 방법
✍️ 인트로
드라이버 비거리는 모든 골퍼의 고민입니다.
- 해결책: 그립과 궤도 점검
📌 목차
1. 그립
2. 스윙 궤도
📚 본문
🔹 1. 그립 점검 – 기본부터
그립 압력을 일정하게 유지하세요.
📸 이미지 프롬프트: close up of golf grip
🔹 2. 스윙 궤도
인사이드 아웃 궤도를 연습하세요.
📸 이미지 프롬프트: golfer swing path diagram
🟧 핵심 요약
그립과 궤도가 핵심입니다.
🟪 결론
꾸준한 연습이 답입니다.
🔎 참고자료
- 골프 레슨 https://lesson.example.com
🟫 태그
#드라이버 #비거리"""

BANNER_CONTENT = """🅰️ 헤드라인: 가을 골프 페스타
🅱️ 서브헤드라인: 전 품목 최대 50% 할인
🎨 스타일: 미니멀
📐 비율: 1:1
🖼️ 디자인 컨셉: 단풍 든 페어웨이
📸 이미지 프롬프트: autumn golf course with red maple leaves
📋 가이드라인: 헤드라인은 상단 중앙"""


@pytest.fixture
def card_content() -> str:
    return CARD_CONTENT


@pytest.fixture
def blog_content() -> str:
    return BLOG_CONTENT


@pytest.fixture
def banner_content() -> str:
    return BANNER_CONTENT


def create_test_image(
    width: int = 64,
    height: int = 64,
    format: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    """Create a test image in memory."""
    color = (255, 0, 0, 128) if mode == "RGBA" else "red"
    img = Image.new(mode, (width, height), color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def test_image_png() -> bytes:
    return create_test_image()


@pytest.fixture(autouse=True)
def fresh_session_store(monkeypatch: pytest.MonkeyPatch) -> session_store.SessionStore:
    """Give every test its own session store singleton."""
    store = session_store.SessionStore()
    monkeypatch.setattr(session_store, "_default_store", store)
    return store


@pytest_asyncio.fixture
async def mock_db() -> AsyncGenerator[Any, None]:
    """Provide a mock MongoDB database for testing."""
    mock_client = AsyncMongoMockClient()
    mock_database = mock_client["test_teeshot"]

    # Replace the real client with mock
    mongo.set_client(mock_client)

    yield mock_database

    mongo.set_client(None)


@pytest_asyncio.fixture
async def client(mock_db: Any) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
