"""Unit tests for reference page fetching."""

import httpx
import pytest

from teeshot.services.reference_fetcher import (
    MAX_TEXT_CHARS,
    extract_main_region,
    fetch_reference_text,
    html_to_text,
)

ARTICLE_TEXT = "겨울철 라운드에서는 체온 유지가 가장 중요합니다. 얇은 옷을 여러 겹 입고 손난로를 챙기세요."

ARTICLE_HTML = f"""<html><head><style>body {{ color: red; }}</style>
<script>var tracking = 1;</script></head>
<body><nav>메뉴 홈 뉴스</nav>
<article><h1>겨울 골프</h1><p>{ARTICLE_TEXT}</p><!-- ad slot --></article>
<footer>저작권</footer></body></html>"""


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestExtraction:
    def test_prefers_main_over_article(self):
        html = "<main>main text</main><article>article text</article>"
        assert extract_main_region(html) == "main text"

    def test_content_class_div(self):
        html = '<div class="post-content">본문</div><div>other</div>'
        assert extract_main_region(html) == "본문"

    def test_whole_document_fallback(self):
        assert extract_main_region("<p>plain</p>") == "<p>plain</p>"

    def test_html_to_text(self):
        text = html_to_text(
            "<style>p{}</style><script>x()</script><noscript>enable js</noscript>"
            "<p>골프&nbsp;레슨 &amp; 팁</p>\n\n<!-- c --><b>끝</b>"
        )
        assert text == "골프 레슨 팁 끝"


class TestFetchReferenceText:
    @pytest.mark.asyncio
    async def test_extracts_article_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Mozilla" in request.headers["user-agent"]
            return httpx.Response(200, text=ARTICLE_HTML)

        async with mock_client(handler) as client:
            text = await fetch_reference_text("https://golf.example.com/winter", client=client)

        assert text == f"겨울 골프 {ARTICLE_TEXT}"
        assert "메뉴" not in text
        assert "tracking" not in text

    @pytest.mark.asyncio
    async def test_text_is_capped(self):
        body = "가" * (MAX_TEXT_CHARS + 500)

        async with mock_client(lambda request: httpx.Response(200, text=f"<p>{body}</p>")) as client:
            text = await fetch_reference_text("https://golf.example.com/long", client=client)

        assert len(text) == MAX_TEXT_CHARS

    @pytest.mark.asyncio
    async def test_short_page_returns_preview_note(self):
        html = "<div id='app'></div><script>render()</script>"

        async with mock_client(lambda request: httpx.Response(200, text=html)) as client:
            text = await fetch_reference_text("https://spa.example.com", client=client)

        assert text.startswith("URL: https://spa.example.com\n\n")
        assert "동적으로 로드되는 콘텐츠" in text
        assert "<div id='app'></div>" in text
        assert "render()" not in text

    @pytest.mark.asyncio
    async def test_http_error_returns_note(self):
        async with mock_client(lambda request: httpx.Response(404, text="missing")) as client:
            text = await fetch_reference_text("https://golf.example.com/gone", client=client)

        assert text.startswith("URL 내용을 가져오는 중 오류가 발생했습니다:")
        assert text.endswith("URL: https://golf.example.com/gone")

    @pytest.mark.asyncio
    async def test_connection_error_returns_note(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_client(handler) as client:
            text = await fetch_reference_text("https://down.example.com", client=client)

        assert "connection refused" in text
