"""
Unit tests for the hole splitter.

FixedMetrics (conftest) measures every character 2.5 wide, so a five
letter word is 15 wide including its separating space, and a 12pt line
is 12 high.
"""

import random

import pytest

from stamp_toolkit.core.models import FormatTable, StyleRef, Token, TokenKind, UnknownFormat
from stamp_toolkit.layout import line_height, split_tokens


def _line_word_widths(line, formats, metrics):
    return sum(
        metrics.word_width(token.text, formats.resolve(token.style))
        for token in line if token.is_word
    )


class TestExampleScenarios:
    """Worked examples of the splitting rules."""

    def test_twenty_fifteen_unit_words_wrap_six_per_line(self, make_words, formats, metrics):
        # Arrange
        tokens = make_words(20)

        # Act
        result = split_tokens(tokens, 100, 200, formats, metrics)

        # Assert
        assert [len(line) for line in result.lines] == [6, 6, 6, 2]
        assert result.selected == tokens
        assert result.remaining == ()
        assert result.height_used == 48

    def test_single_overlong_word_is_placed_alone(self, paragraph_style, formats, metrics):
        word = Token.word("x" * 199, paragraph_style)
        assert metrics.word_width(word.text, formats["paragraph"]) == 500

        result = split_tokens([word], 100, 200, formats, metrics)

        assert result.selected == (word,)
        assert result.lines == ((word,),)
        assert result.remaining == ()

    def test_overlong_word_after_words_starts_new_line(self, make_words, paragraph_style, formats, metrics):
        words = make_words(2)
        long_word = Token.word("x" * 99, paragraph_style)

        result = split_tokens(words + (long_word,), 100, 200, formats, metrics)

        assert result.lines == (words, (long_word,))


class TestHeight:
    """Vertical fit decisions."""

    def test_lines_past_hole_height_remain(self, make_words, formats, metrics):
        tokens = make_words(20)

        result = split_tokens(tokens, 100, 24, formats, metrics)

        assert result.selected == tokens[:12]
        assert result.remaining == tokens[12:]
        assert result.overflows
        assert result.line_count == 2

    def test_exact_fit_is_accepted(self, make_words, formats, metrics):
        tokens = make_words(12)

        result = split_tokens(tokens, 100, 24, formats, metrics)

        assert result.remaining == ()
        assert result.height_used == 24

    def test_hole_lower_than_one_line_selects_nothing(self, make_words, formats, metrics):
        tokens = make_words(3)

        result = split_tokens(tokens, 100, 11.9, formats, metrics)

        assert result.selected == ()
        assert result.remaining == tokens

    def test_line_height_comes_from_first_token(self, paragraph_style, formats, metrics):
        heading = StyleRef("heading-2")
        tokens = (
            Token.word("Title", heading),
            Token.new_paragraph(heading),
            Token.word("small", paragraph_style),
            Token.new_paragraph(paragraph_style),
        )

        result = split_tokens(tokens, 100, 28, formats, metrics)

        # heading-2 is 14pt: two lines need 28
        assert result.remaining == ()
        assert result.height_used == 28
        assert result.line_format == formats["heading-2"]

    def test_line_spacing_is_part_of_line_height(self, make_words, metrics):
        formats = FormatTable.from_dict({
            "paragraph": {"font": "times", "size": 12, "spacing": {"line": {"above": 1, "below": 2}}},
        })
        tokens = make_words(18)

        result = split_tokens(tokens, 100, 30, formats, metrics)

        assert line_height(formats["paragraph"], metrics) == 15
        assert result.line_count == 2
        assert len(result.remaining) == 6

    def test_paragraph_spacing_is_reserved(self, formats, metrics):
        heading = StyleRef("heading-1")
        tokens = (Token.word("Title", heading), Token.new_paragraph(heading))

        # 18pt line + 6 above + 4 below
        assert split_tokens(tokens, 100, 27.9, formats, metrics).selected == ()
        assert split_tokens(tokens, 100, 28, formats, metrics).remaining == ()


class TestBreaks:
    """Explicit breaks and markers."""

    def test_new_line_breaks_regardless_of_width(self, make_words, paragraph_style, formats, metrics):
        a, b = make_words(2)
        br = Token.new_line(paragraph_style)

        result = split_tokens([a, br, b], 1000, 100, formats, metrics)

        assert result.lines == ((a, br), (b,))

    def test_new_page_stops_consumption(self, make_words, paragraph_style, formats, metrics):
        a, b, c = make_words(3)
        page = Token.new_page(paragraph_style)

        result = split_tokens([a, b, page, c], 1000, 1000, formats, metrics)

        assert result.selected == (a, b, page)
        assert result.remaining == (c,)

    def test_new_page_on_empty_line_uses_no_height(self, make_words, paragraph_style, formats, metrics):
        words = make_words(3)
        end = Token.new_paragraph(paragraph_style)
        page = Token.new_page(paragraph_style)
        tail = make_words(1)

        result = split_tokens(words + (end, page) + tail, 100, 12, formats, metrics)

        assert result.selected == words + (end, page)
        assert result.remaining == tail
        assert result.height_used == 12
        assert result.lines[-1] == (page,)

    def test_markers_take_no_width(self, make_words, formats, metrics):
        style = StyleRef("bullet")
        marker = Token.bullet(style)
        words = make_words(6, style)

        # bullet indent is 10
        result = split_tokens((marker,) + words, 100, 100, formats, metrics)

        assert result.lines == ((marker,) + words,)

    def test_paragraph_indent_narrows_every_line(self, formats, metrics, make_words):
        style = StyleRef("bullet")
        marker = Token.bullet(style)
        words = make_words(12, style)

        result = split_tokens((marker,) + words, 95, 100, formats, metrics)

        # 95 - 10 indent leaves room for five 15 wide words per line
        assert [sum(1 for t in line if t.is_word) for line in result.lines] == [5, 5, 2]

    def test_indent_ends_with_its_paragraph(self, formats, metrics, make_words):
        bullet = StyleRef("bullet")
        item = (Token.bullet(bullet),) + make_words(2, bullet) + (Token.new_paragraph(bullet),)
        body = make_words(6)

        result = split_tokens(item + body, 90, 100, formats, metrics)

        assert result.lines == (item, body)

    def test_character_style_changes_width_through_metrics(self, metrics_factory, formats):
        metrics = metrics_factory(bold_factor=2.0)
        bold = StyleRef("paragraph", {"bold"})
        tokens = tuple(Token.word(f"b{i:04d}", bold) for i in range(6))

        result = split_tokens(tokens, 100, 200, formats, metrics)

        assert [len(line) for line in result.lines] == [3, 3]


class TestEdgeCases:
    """Empty input and format errors."""

    def test_empty_input_gives_empty_result(self, formats, metrics):
        result = split_tokens([], 100, 100, formats, metrics)

        assert result.selected == () and result.remaining == () and result.lines == ()
        assert result.line_format is None
        assert not result.overflows

    def test_unknown_format_fails_before_layout(self, make_words, formats, metrics):
        tokens = make_words(2) + (Token.word("late", StyleRef("caption")),)

        with pytest.raises(UnknownFormat):
            split_tokens(tokens, 1, 1, formats, metrics)


# ─────────────────────────────────────────────────────────────────────────────
# Seeded property checks
# ─────────────────────────────────────────────────────────────────────────────

PLAIN_FORMATS = {"paragraph": {"font": "times", "size": 12}}


def _random_tokens(rng: random.Random, with_pages: bool = True):
    style = StyleRef("paragraph")
    bold = StyleRef("paragraph", {"bold"})
    tokens = []
    for _ in range(rng.randint(0, 120)):
        roll = rng.random()
        if roll < 0.06:
            tokens.append(Token.new_line(style))
        elif roll < 0.10:
            tokens.append(Token.new_paragraph(style))
        elif roll < 0.12 and with_pages:
            tokens.append(Token.new_page(style))
        elif roll < 0.14:
            tokens.append(Token.bullet(style))
        else:
            text = "x" * rng.randint(1, 30)
            tokens.append(Token.word(text, bold if rng.random() < 0.2 else style))
    return tuple(tokens)


@pytest.fixture
def plain_formats():
    return FormatTable.from_dict(PLAIN_FORMATS)


@pytest.mark.parametrize("seed", range(40))
class TestSplitProperties:
    """Properties that hold for every token sequence and hole size."""

    def test_conservation(self, seed, plain_formats, metrics_factory):
        rng = random.Random(seed)
        metrics = metrics_factory(bold_factor=1.5)
        tokens = _random_tokens(rng)

        result = split_tokens(tokens, rng.uniform(20, 300), rng.uniform(5, 300), plain_formats, metrics)

        assert result.selected + result.remaining == tokens
        assert tuple(t for line in result.lines for t in line) == result.selected

    def test_width_bound(self, seed, plain_formats, metrics_factory):
        rng = random.Random(seed)
        metrics = metrics_factory(bold_factor=1.5)
        tokens = _random_tokens(rng)
        width = rng.uniform(20, 300)

        result = split_tokens(tokens, width, 10_000, plain_formats, metrics)

        for line in result.lines:
            word_count = sum(1 for t in line if t.is_word)
            if word_count > 1:
                assert _line_word_widths(line, plain_formats, metrics) <= width

    def test_height_bound(self, seed, plain_formats, metrics):
        rng = random.Random(seed)
        tokens = _random_tokens(rng)
        height = rng.uniform(5, 300)

        result = split_tokens(tokens, rng.uniform(20, 300), height, plain_formats, metrics)

        costed = [line for line in result.lines if not (len(line) == 1 and line[0].kind is TokenKind.NEW_PAGE)]
        new_lines = sum(1 for t in result.selected if t.kind is TokenKind.NEW_LINE)
        assert len(costed) * 12 == pytest.approx(result.height_used)
        assert result.height_used <= height
        assert new_lines <= len(costed)

    def test_progress(self, seed, plain_formats, metrics):
        rng = random.Random(seed)
        tokens = _random_tokens(rng)
        width, height = rng.uniform(20, 300), rng.uniform(12, 300)

        placed = ()
        remaining = tokens
        while remaining:
            result = split_tokens(remaining, width, height, plain_formats, metrics)
            assert len(result.remaining) < len(remaining)
            placed += result.selected
            remaining = result.remaining

        assert placed == tokens

    def test_resplit_matches_continuous_pass(self, seed, plain_formats, metrics):
        rng = random.Random(seed)
        tokens = _random_tokens(rng, with_pages=False)
        width = rng.uniform(20, 300)

        short = split_tokens(tokens, width, rng.uniform(12, 120), plain_formats, metrics)
        tail = split_tokens(short.remaining, width, 10_000, plain_formats, metrics)
        whole = split_tokens(tokens, width, 10_000, plain_formats, metrics)

        assert short.lines + tail.lines == whole.lines

    def test_split_is_deterministic(self, seed, plain_formats, metrics):
        rng = random.Random(seed)
        tokens = _random_tokens(rng)
        width, height = rng.uniform(20, 300), rng.uniform(5, 300)

        first = split_tokens(tokens, width, height, plain_formats, metrics)
        second = split_tokens(tokens, width, height, plain_formats, metrics)

        assert first == second
