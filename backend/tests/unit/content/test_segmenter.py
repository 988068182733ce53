"""Unit tests for the line classifier and section segmenter.

Tests cover:
- Line classification priority
- Card, blog, banner and short-form segmentation
- Segment boundaries (no content bleeding into the next segment)
- Totality and idempotence
"""

import pytest

from teeshot.content import (
    BannerFieldKind,
    ContentFormat,
    MarkerKind,
    classify_line,
    collect_image_prompts,
    parse_content,
    segment,
)
from teeshot.content.segmenter import classify_banner_line
from teeshot.content.segments import (
    BannerFieldSegment,
    BlogSectionSegment,
    CardSegment,
    HashtagLineSegment,
    ImagePromptSegment,
    KeywordsSegment,
    MarkerHeadingSegment,
    ParagraphSegment,
    PostingTextSegment,
    TextBlockSegment,
    TitleSegment,
)

WINTER_CARD = (
    "제목: 겨울 라운드 팁\n"
    "[Card 1]\n"
    "💡 소제목: 보온\n"
    "추운 날씨엔 보온이 핵심\n"
    "📸 이미지 프롬프트: 겨울 골프 보온 장비\n"
    "#골프 #겨울"
)


class TestClassifyLine:
    """Marker priority for the card/blog/default tables."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("후속 제안: 봄, 여름", MarkerKind.suggestions),
            ("✍️ 포스팅 글", MarkerKind.posting),
            ("🔑 핵심키워드: 퍼팅", MarkerKind.keywords),
            ("🔎 참고자료", MarkerKind.references),
            ("🔎 출처: 골프다이제스트", MarkerKind.source),
            ("제목: 퍼팅 루틴", MarkerKind.title),
            ("제목(15자 이내): 퍼팅", MarkerKind.title),
            ("[Card 3] 마무리", MarkerKind.card),
            ("[Scene 2] 셋업", MarkerKind.card),
            ("💡 소제목: 보온", MarkerKind.subtitle),
            ("📸 이미지 프롬프트: green", MarkerKind.image_prompt),
            ("📸 대표 이미지", MarkerKind.cover_header),
            ("#골프 #겨울", MarkerKind.hashtags),
            ("✍️ 인트로", MarkerKind.intro),
            ("[목차]", MarkerKind.toc),
            ("📌 목차", MarkerKind.toc),
            ("📚 본문", MarkerKind.body),
            ("[섹션 1 제목] 그립", MarkerKind.section),
            ("🔹 2. 스윙 궤도", MarkerKind.section),
            ("🟧 핵심 요약", MarkerKind.summary),
            ("🟪 결론", MarkerKind.conclusion),
            ("🟫 태그", MarkerKind.tags),
            ("핵심 메시지: 보온", MarkerKind.card_meta),
            ("✅ 오늘의 팁", MarkerKind.closing),
            ("🎬 엔딩 컷", MarkerKind.scene_heading),
            ("그냥 본문 한 줄", MarkerKind.content),
        ],
    )
    def test_marker_kinds(self, line, expected):
        assert classify_line(line, ContentFormat.card) is expected

    def test_blog_title_step_only_in_blog(self):
        line = "✅ 1. 제목 드라이버 비거리"
        assert classify_line(line, ContentFormat.blog) is MarkerKind.title
        assert classify_line(line, ContentFormat.card) is MarkerKind.closing

    def test_check_mark_opens_intro_only_in_blog(self):
        assert classify_line("✔️ 문제", ContentFormat.blog) is MarkerKind.intro
        assert classify_line("✔️ 문제", ContentFormat.card) is MarkerKind.content

    def test_conclusion_word_excludes_references(self):
        assert classify_line("결론", ContentFormat.blog) is MarkerKind.conclusion
        assert classify_line("결론 참고 사항", ContentFormat.blog) is MarkerKind.content

    def test_diamond_without_number_is_content(self):
        assert classify_line("🔹 포인트", ContentFormat.blog) is MarkerKind.content


class TestClassifyBannerLine:
    def test_subheadline_before_headline(self):
        kind, field_kind, rest = classify_banner_line("🅱️ 서브헤드라인: 최대 50%")
        assert kind is MarkerKind.banner_field
        assert field_kind is BannerFieldKind.subheadline
        assert rest == "최대 50%"

    def test_headline(self):
        _, field_kind, rest = classify_banner_line("헤드라인: 오픈!!")
        assert field_kind is BannerFieldKind.headline
        assert rest == "오픈!!"

    def test_generic_section_marker_is_content_in_banner(self):
        kind, field_kind, _ = classify_banner_line("[섹션 1 제목] 행사")
        assert kind is MarkerKind.content
        assert field_kind is None


class TestCardSegmentation:
    def test_winter_card_example(self):
        segments = segment(WINTER_CARD, ContentFormat.card)

        assert len(segments) == 3
        title, card, hashtags = segments
        assert isinstance(title, TitleSegment)
        assert title.text == "겨울 라운드 팁"
        assert isinstance(card, CardSegment)
        assert card.index == 1
        assert card.subtitle == "보온"
        assert card.body_lines == ["추운 날씨엔 보온이 핵심"]
        assert card.image_prompt == "겨울 골프 보온 장비"
        assert isinstance(hashtags, HashtagLineSegment)
        assert hashtags.tags == ["골프", "겨울"]

    def test_full_card_content(self, card_content):
        fmt, segments = parse_content(card_content)

        assert fmt is ContentFormat.card
        kinds = [s.kind for s in segments]
        assert kinds == [
            "title",
            "image_prompt",
            "card",
            "card",
            "posting_text",
            "keywords",
            "hashtags",
            "references",
        ]

        cover = segments[1]
        assert isinstance(cover, ImagePromptSegment)
        assert cover.cover is True
        assert cover.prompt == "golfer in winter clothes on a frosty fairway"

        first, second = segments[2], segments[3]
        assert first.heading == "Card 1 레이어드 착용"
        assert first.source == "골프다이제스트"
        assert first.body_lines == ["기능성 이너웨어를 먼저 입으세요.", "바람막이는 필수입니다."]
        assert second.index == 2
        assert second.source is None  # self-authored

        posting = segments[4]
        assert isinstance(posting, PostingTextSegment)
        assert posting.body_lines == ["겨울에도 골프는 계속됩니다!", "준비만 잘하면 충분히 즐길 수 있어요."]

        assert isinstance(segments[5], KeywordsSegment)
        assert segments[5].text == "겨울골프, 방한"

    def test_card_content_does_not_bleed(self):
        text = "[Card 1] 첫 카드\n첫 본문\n[Card 2] 둘째 카드\n둘째 본문"
        first, second = segment(text, ContentFormat.card)
        assert first.body_lines == ["첫 본문"]
        assert second.body_lines == ["둘째 본문"]

    def test_card_without_number_counts_up(self):
        text = "[Card 1] a\n[Card] b\n[Card] c"
        assert [s.index for s in segment(text, ContentFormat.card)] == [1, 2, 3]

    def test_second_prompt_in_card_is_standalone(self):
        text = "[Card 1] a\n📸 이미지 프롬프트: one\n📸 이미지 프롬프트: two"
        card, extra = segment(text, ContentFormat.card)
        assert card.image_prompt == "one"
        assert isinstance(extra, ImagePromptSegment)
        assert extra.prompt == "two"

    def test_cover_header_marks_next_prompt_as_cover(self):
        text = "📸 대표 이미지\n📸 이미지 프롬프트: sunrise over the first tee"
        (prompt,) = segment(text, ContentFormat.card)
        assert prompt.cover is True

    def test_posting_collects_bgm_and_hashtags(self):
        text = "✍️ 포스팅 글\n오늘의 숏폼!\n🎵 추천 BGM: 잔잔한 어쿠스틱\n#골프 #숏폼\n후속 제안: 다음 편"
        (posting,) = segment(text, ContentFormat.default)
        assert posting.body_lines == ["오늘의 숏폼!"]
        assert posting.bgm == "잔잔한 어쿠스틱"
        assert posting.hashtags == ["골프", "숏폼"]

    def test_posting_swallows_other_markers(self):
        text = "✍️ 포스팅 글\n[Card 9] 인용\n✅ 팁"
        (posting,) = segment(text, ContentFormat.card)
        assert posting.body_lines == ["[Card 9] 인용", "✅ 팁"]


class TestShortFormSegmentation:
    def test_scenes_and_markers(self):
        text = (
            "제목: 30초 퍼팅 팁\n"
            "[Scene 1] 셋업\n"
            "공을 왼발 쪽에 두세요.\n"
            "🎬 엔딩: 홀인 장면\n"
            "✅\n"
        )
        fmt, segments = parse_content(text, "YOUTUBE-SHORTFORM")

        assert fmt is ContentFormat.default
        title, scene, ending, closing = segments
        assert title.text == "30초 퍼팅 팁"
        assert isinstance(scene, CardSegment)
        assert scene.heading == "Scene 1 셋업"
        assert isinstance(ending, MarkerHeadingSegment)
        assert ending.text == "🎬 엔딩: 홀인 장면"
        assert closing.text == "마무리"


class TestBlogSegmentation:
    def test_full_blog_content(self, blog_content):
        fmt, segments = parse_content(blog_content)

        assert fmt is ContentFormat.blog
        kinds = [s.kind for s in segments]
        assert kinds == [
            "title",
            "intro",
            "table_of_contents",
            "blog_section",
            "blog_section",
            "summary",
            "conclusion",
            "references",
            "tags",
        ]
        assert segments[0].text == "드라이버 비거리 늘리는 3가지 방법"

    def test_intro_denylist_drops_meta_lines(self, blog_content):
        _, segments = parse_content(blog_content)
        intro = segments[1]
        assert isinstance(intro, TextBlockSegment)
        assert intro.body_lines == ["드라이버 비거리는 모든 골퍼의 고민입니다."]

    def test_sections_carry_heading_and_prompt(self, blog_content):
        _, segments = parse_content(blog_content)
        first, second = segments[3], segments[4]
        assert isinstance(first, BlogSectionSegment)
        assert (first.index, first.heading) == (1, "그립 점검")
        assert first.body_lines == ["그립 압력을 일정하게 유지하세요."]
        assert first.image_prompt == "close up of golf grip"
        assert (second.index, second.heading) == (2, "스윙 궤도")

    def test_tags_block_keeps_hashtag_lines(self, blog_content):
        _, segments = parse_content(blog_content)
        assert segments[-1].body_lines == ["#드라이버 #비거리"]

    def test_blog_title_drops_placeholders(self):
        text = "✅ 1. 제목 퍼팅 루틴\n[예시 제목]\n예: 퍼팅 3단계\n✍️ 인트로\n본문"
        title, intro = segment(text, ContentFormat.blog)
        assert title.lines == ["퍼팅 루틴"]
        assert intro.body_lines == ["본문"]

    def test_bracket_section_markers(self):
        text = "[섹션 1 제목] 그립\n내용 1\n[섹션 2 제목] 스탠스\n내용 2"
        first, second = segment(text, ContentFormat.blog)
        assert (first.index, first.heading, first.body_lines) == (1, "그립", ["내용 1"])
        assert (second.index, second.heading, second.body_lines) == (2, "스탠스", ["내용 2"])


class TestBannerSegmentation:
    def test_banner_fields(self, banner_content):
        fmt, segments = parse_content(banner_content)

        assert fmt is ContentFormat.banner
        assert all(isinstance(s, BannerFieldSegment) for s in segments)
        assert [s.field for s in segments] == [
            BannerFieldKind.headline,
            BannerFieldKind.subheadline,
            BannerFieldKind.style,
            BannerFieldKind.aspect_ratio,
            BannerFieldKind.design_concept,
            BannerFieldKind.image_prompt,
            BannerFieldKind.guidelines,
        ]
        assert segments[0].lines == ["가을 골프 페스타"]

    def test_multi_line_field(self):
        text = "📐 비율: 1:1\n📝 텍스트 요소:\n- 가을 골프 페스타\n- 10월 한정"
        _, elements = segment(text, ContentFormat.banner)
        assert elements.field is BannerFieldKind.text_elements
        assert elements.lines == ["- 가을 골프 페스타", "- 10월 한정"]


class TestCatchAll:
    def test_unmarked_lines_become_paragraphs(self):
        segments = segment("첫 줄\n\n둘째 줄", ContentFormat.default)
        assert segments == [ParagraphSegment(text="첫 줄"), ParagraphSegment(text="둘째 줄")]

    def test_title_marker_alone_is_dropped(self):
        assert segment("제목:", ContentFormat.card) == []

    @pytest.mark.parametrize("text", ["", "   \n\t\n", "```json\n{}\n```"])
    @pytest.mark.parametrize("hint", [None, "ETC-BANNER", "NAVER-BLOG/BAND"])
    def test_totality(self, text, hint):
        _, segments = parse_content(text, hint)
        assert segments == []

    def test_json_fence_never_reaches_segments(self):
        raw = '제목: 퍼팅\n```json\n{"secret": "echo"}\n```\n[Card 1] 그립\n본문'
        _, segments = parse_content(raw)
        dumped = str([s.model_dump() for s in segments])
        assert "secret" not in dumped
        assert "```" not in dumped

    def test_idempotent(self, card_content):
        assert parse_content(card_content) == parse_content(card_content)


class TestCollectImagePrompts:
    def test_first_seen_order_and_dedup(self):
        text = (
            "[Card 1] a\n📸 이미지 프롬프트: shared prompt\n"
            "[Card 2] b\n📸 이미지 프롬프트: other prompt\n"
            "[Card 3] c\n📸 이미지 프롬프트: shared prompt"
        )
        segments = segment(text, ContentFormat.card)
        assert collect_image_prompts(segments) == ["shared prompt", "other prompt"]

    def test_banner_prompt(self, banner_content):
        _, segments = parse_content(banner_content)
        assert collect_image_prompts(segments) == ["autumn golf course with red maple leaves"]

    def test_cover_prompt_first(self, card_content):
        _, segments = parse_content(card_content)
        assert collect_image_prompts(segments) == [
            "golfer in winter clothes on a frosty fairway",
            "layered golf outfit flat lay",
            "golf balls on snow",
        ]
