"""
Unit tests for the hole registry and the built-in hole fillers.
"""

import io
from types import SimpleNamespace

import pytest
from PIL import Image

from stamp_toolkit.core.models import Align, Hole, Location, Token
from stamp_toolkit.holes import (
    HoleContentError,
    HoleFiller,
    HoleRegistry,
    ImageHoleFiller,
    ParsedTextHoleFiller,
    TextHoleFiller,
    UnsupportedHoleType,
    default_registry,
    fit_image,
)


@pytest.fixture
def fake_context(formats, metrics):
    """Minimal stand-in exposing what fillers use from StampContext."""
    return SimpleNamespace(format_table=lambda name: formats, metrics=metrics)


class _NullFiller(HoleFiller):
    def fill(self, sink, hole, location, context):
        return None


class TestHoleRegistry:
    """Type tag dispatch."""

    def test_default_registry_has_builtin_types(self):
        registry = default_registry()

        assert registry.types == ("image", "text", "text-parsed")
        assert isinstance(registry.get("text-parsed"), ParsedTextHoleFiller)

    def test_register_returns_new_registry(self):
        original = HoleRegistry()
        filler = _NullFiller()

        registry = original.register("qr", filler)

        assert registry.get("qr") is filler
        assert "qr" not in original

    def test_register_replaces_existing_type(self):
        filler = _NullFiller()

        registry = default_registry().register("text", filler)

        assert registry.get("text") is filler

    def test_when_type_unknown_then_raises(self):
        with pytest.raises(UnsupportedHoleType) as exc_info:
            default_registry().get("video")

        assert exc_info.value.hole_type == "video"


class TestImageHoleFiller:
    """Scaled, centred images."""

    def test_fit_image_wide_image_is_centred_vertically(self):
        hole = Hole("logo", "image", x=10, y=20, width=100, height=100)

        assert fit_image((200, 100), hole) == (10.0, 45.0, 100.0, 50.0)

    def test_fit_image_tall_image_is_centred_horizontally(self):
        hole = Hole("logo", "image", x=0, y=0, width=100, height=50)

        assert fit_image((10, 20), hole) == (37.5, 0.0, 25.0, 50.0)

    def test_fill_draws_pil_image(self, sink, fake_context):
        hole = Hole("logo", "image", x=0, y=0, width=100, height=100)
        image = Image.new("RGB", (50, 50))

        overflow = ImageHoleFiller().fill(sink, hole, Location({"image": image}), fake_context)

        assert overflow is None
        assert sink.ops == [("draw_image", (50, 50), 0.0, 0.0, 100.0, 100.0)]

    def test_fill_reads_path_and_bytes(self, sink, fake_context, sample_image):
        hole = Hole("logo", "image", x=0, y=0, width=100, height=100)
        buffer = io.BytesIO()
        Image.new("RGB", (10, 30)).save(buffer, format="PNG")

        ImageHoleFiller().fill(sink, hole, Location({"image": sample_image}), fake_context)
        ImageHoleFiller().fill(sink, hole, Location({"image": buffer.getvalue()}), fake_context)

        assert [op[1] for op in sink.named("draw_image")] == [(200, 100), (10, 30)]

    def test_when_bytes_are_not_an_image_then_raises(self, sink, fake_context):
        hole = Hole("logo", "image", x=0, y=0, width=100, height=100)

        with pytest.raises(HoleContentError):
            ImageHoleFiller().fill(sink, hole, Location({"image": b"nope"}), fake_context)

    def test_when_contents_missing_then_raises(self, sink, fake_context):
        hole = Hole("logo", "image", x=0, y=0, width=100, height=100)

        with pytest.raises(HoleContentError, match="'image'"):
            ImageHoleFiller().fill(sink, hole, Location({"text": "x"}), fake_context)


class TestTextHoleFiller:
    """Single line text holes."""

    def test_draws_single_line_in_paragraph_format(self, sink, fake_context):
        hole = Hole("title", "text", x=0, y=0, width=10, height=20,
                    format_ref="body", align=Align("left", "top"))

        overflow = TextHoleFiller().fill(sink, hole, Location({"text": "far too long for the hole"}), fake_context)

        assert overflow is None
        assert sink.runs == ["far too long for the hole"]
        assert sink.named("set_font") == [("set_font", "times", 12, ())]

    def test_empty_text_draws_nothing(self, sink, fake_context):
        hole = Hole("title", "text", x=0, y=0, width=10, height=20, format_ref="body")

        TextHoleFiller().fill(sink, hole, Location({"text": ""}), fake_context)

        assert sink.ops == []

    def test_when_text_not_string_then_raises(self, sink, fake_context):
        hole = Hole("title", "text", x=0, y=0, width=10, height=20, format_ref="body")

        with pytest.raises(HoleContentError):
            TextHoleFiller().fill(sink, hole, Location({"text": 42}), fake_context)


class TestParsedTextHoleFiller:
    """Laid out markup with overflow."""

    def test_markup_is_drawn_from_hole_top(self, sink, fake_context):
        hole = Hole("body", "text-parsed", x=15, y=100, width=200, height=100, format_ref="body")

        overflow = ParsedTextHoleFiller().fill(sink, hole, Location({"text": "<p>Hello there</p>"}), fake_context)

        assert overflow is None
        (position,) = sink.named("set_position")
        assert position[1] == 15
        assert position[2] == pytest.approx(200 - 9.6)
        assert sink.runs == [" Hello there"]

    def test_overflow_carries_remaining_tokens(self, sink, fake_context, make_words):
        hole = Hole("body", "text-parsed", x=0, y=0, width=100, height=24, format_ref="body")
        tokens = make_words(20)

        overflow = ParsedTextHoleFiller().fill(sink, hole, Location({"text": tokens}), fake_context)

        assert overflow == {"body": Location({"text": tokens[12:]})}
        assert len(sink.runs) == 2

    def test_number_base_offsets_list_ordinals(self, sink, fake_context):
        hole = Hole("body", "text-parsed", x=0, y=0, width=200, height=100, format_ref="body")

        ParsedTextHoleFiller(number_base=4).fill(
            sink, hole, Location({"text": "<ol><li>item</li></ol>"}), fake_context
        )

        assert sink.runs[0] == "5)"

    def test_empty_markup_draws_nothing(self, sink, fake_context):
        hole = Hole("body", "text-parsed", x=0, y=0, width=200, height=100, format_ref="body")

        assert ParsedTextHoleFiller().fill(sink, hole, Location({"text": ""}), fake_context) is None
        assert sink.ops == []

    def test_nothing_fits_returns_everything(self, sink, fake_context, make_words):
        hole = Hole("body", "text-parsed", x=0, y=0, width=100, height=5, format_ref="body")
        tokens = make_words(3)

        overflow = ParsedTextHoleFiller().fill(sink, hole, Location({"text": tokens}), fake_context)

        assert overflow == {"body": Location({"text": tokens})}
        assert sink.ops == []

    def test_when_text_is_not_tokens_then_raises(self, sink, fake_context):
        hole = Hole("body", "text-parsed", x=0, y=0, width=200, height=100, format_ref="body")

        with pytest.raises(HoleContentError):
            ParsedTextHoleFiller().fill(sink, hole, Location({"text": [1, 2]}), fake_context)

    def test_accepts_token_list(self, sink, fake_context, paragraph_style):
        hole = Hole("body", "text-parsed", x=0, y=0, width=200, height=100, format_ref="body")
        tokens = [Token.word("listed", paragraph_style)]

        ParsedTextHoleFiller().fill(sink, hole, Location({"text": tokens}), fake_context)

        assert sink.runs == [" listed"]
