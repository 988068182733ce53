"""Unit tests for API view assembly."""

import pytest

from teeshot.content import ContentFormat
from teeshot.models import ContentRequest, GeneratedContent, ImageState
from teeshot.services.presentation import export_view, parse_view, session_view, statuses_from_urls
from teeshot.services.session_store import SessionStore


class TestStatusesFromUrls:
    def test_ready_with_remote_url(self):
        statuses = statuses_from_urls({"green": "https://cdn/green", "empty": ""})
        assert statuses.get("green").state is ImageState.ready
        assert statuses.get("green").remote_url == "https://cdn/green"
        assert "empty" not in statuses


class TestParseView:
    def test_card_view(self, card_content):
        view = parse_view(card_content, keyword="골프")

        assert view.format is ContentFormat.card
        assert view.suggestions == ["봄 시즌 준비", "실내 연습법"]
        assert view.image_prompts[0] == "golfer in winter clothes on a frosty fairway"
        assert view.descriptors[0].kind == "heading"
        assert any(span.highlight for span in view.descriptors[0].spans)

    def test_hint_and_explicit_format(self):
        assert parse_view("제목: 퍼팅", hint="ETC-BANNER").format is ContentFormat.banner
        assert parse_view("제목: 퍼팅", fmt=ContentFormat.blog).format is ContentFormat.blog

    def test_empty_content(self):
        view = parse_view("")
        assert view.format is ContentFormat.default
        assert view.segments == []
        assert view.descriptors == []


class TestExportView:
    def test_card_export(self, card_content):
        statuses = statuses_from_urls({"layered golf outfit flat lay": "https://cdn/card1.jpeg"})

        view = export_view(card_content, statuses=statuses, category="필드 팁")

        assert view.format is ContentFormat.card
        assert view.exportable is True
        assert len(view.row) == 63
        assert view.row[9] == "https://cdn/card1.jpeg"
        assert view.tsv.split("\t")[1] == "필드 팁"

    def test_banner_is_not_exportable(self, banner_content):
        view = export_view(banner_content)
        assert view.format is ContentFormat.banner
        assert view.exportable is False
        assert view.row is not None

    def test_empty_content(self):
        view = export_view("   ")
        assert view.row is None
        assert view.tsv is None


class TestSessionView:
    @pytest.mark.asyncio
    async def test_session_view(self, blog_content):
        session = await SessionStore().create_session(
            GeneratedContent(content=blog_content, suggestions=["퍼팅"], model="gpt-4o"),
            ContentRequest(format="NAVER-BLOG/BAND"),
        )
        prompts = ["close up of golf grip", "golfer swing path diagram"]

        view = session_view(session, prompts)

        assert view.session_id == session.session_id
        assert view.format is ContentFormat.blog
        assert view.model == "gpt-4o"
        assert list(view.images) == prompts
        assert all(s.state is ImageState.idle for s in view.images.values())
