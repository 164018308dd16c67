"""
Module: tokenizer.markup

Purpose:
    Convert marked-up text into the ordered token sequence consumed by
    the layout engine. Tag nesting (blocks, lists, emphasis) is resolved
    into StyleRefs on each token.

Key Functions:
    - tokenize(): Markup string -> tuple of Tokens

Key Classes:
    - TokenizeError: Malformed or unsupported markup

Grammar:
    <pp>                optional root wrapper
    <p>, <h1>-<h3>      blocks -> words + new-paragraph
    <ul>/<ol> + <li>    list items -> bullet/number marker + words + new-paragraph
    <em>/<i>            italic words
    <strong>/<b>        bold words
    <br/>               new-line
    <pagebreak/>        new-page

    Anything else fails with TokenizeError; content is never dropped.

    Words are split on whitespace and at every tag boundary, so
    "un<b>believ</b>able" gives three words drawn with spaces between
    them ("un believ able").

Dependencies:
    - html.parser (std): Markup scanning and entity decoding
    - core.models.tokens: Token, StyleRef

Used By:
    - holes.text: ParsedTextHoleFiller tokenizes string contents
"""

from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import List, Optional, Tuple

from stamp_toolkit.core.models.tokens import StyleRef, Token
from stamp_toolkit.errors import StampError

logger = logging.getLogger(__name__)


BLOCK_FORMATS = {
    "p": "paragraph",
    "h1": "heading-1",
    "h2": "heading-2",
    "h3": "heading-3",
}
LIST_FORMATS = {
    "ul": "bullet",
    "ol": "number",
}
INLINE_STYLES = {
    "em": "italic",
    "i": "italic",
    "strong": "bold",
    "b": "bold",
}
ROOT_TAG = "pp"
LINE_BREAK_TAG = "br"
PAGE_BREAK_TAG = "pagebreak"


class TokenizeError(StampError):
    """Markup could not be turned into tokens."""

    def __init__(self, message: str, fragment: str = ""):
        super().__init__(f"{message}: {fragment!r}" if fragment else message)
        self.fragment = fragment


class _MarkupTokenizer(HTMLParser):
    """
    Single-use parser that emits tokens while tracking an open-tag stack.

    The stack holds every open tag; the current block (p/h*/li) and the
    current list (ul/ol) are tracked separately because they decide the
    format key of emitted tokens.
    """

    def __init__(self, number_base: int):
        super().__init__(convert_charrefs=True)
        self.tokens: List[Token] = []
        self._number_base = number_base
        self._stack: List[str] = []
        self._root_seen = False
        self._block: Optional[Tuple[str, StyleRef]] = None
        self._list: Optional[str] = None
        self._next_ordinal = number_base
        self._emphasis: List[str] = []

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _fail(self, message: str, fragment: Optional[str] = None) -> None:
        raise TokenizeError(message, fragment if fragment is not None else (self.get_starttag_text() or ""))

    def _current_style(self) -> StyleRef:
        _, style = self._block
        return style.with_flags(self._emphasis)

    # ─────────────────────────────────────────────────────────────────────
    # HTMLParser callbacks
    # ─────────────────────────────────────────────────────────────────────

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag == ROOT_TAG:
            if self._stack or self._root_seen or self.tokens:
                self._fail("Root element <pp> must wrap the whole text")
            self._root_seen = True
        elif tag in BLOCK_FORMATS:
            if self._block is not None:
                self._fail("Blocks cannot be nested")
            if self._list is not None:
                self._fail("Only <li> is allowed directly inside a list")
            self._block = (tag, StyleRef(BLOCK_FORMATS[tag]))
        elif tag in LIST_FORMATS:
            if self._list is not None:
                self._fail("Nested lists are not supported")
            if self._block is not None:
                self._fail("Lists cannot appear inside a block")
            self._list = tag
            self._next_ordinal = self._number_base
        elif tag == "li":
            if self._list is None:
                self._fail("<li> outside of a list")
            if self._block is not None:
                self._fail("Blocks cannot be nested")
            style = StyleRef(LIST_FORMATS[self._list])
            self._block = (tag, style)
            if self._list == "ol":
                self.tokens.append(Token.number(style, self._next_ordinal))
                self._next_ordinal += 1
            else:
                self.tokens.append(Token.bullet(style))
        elif tag in INLINE_STYLES:
            if self._block is None:
                self._fail("Emphasis outside of a block")
            self._emphasis.append(INLINE_STYLES[tag])
        elif tag in (LINE_BREAK_TAG, PAGE_BREAK_TAG):
            self._handle_break(tag)
            return
        else:
            self._fail("Unknown tag")
        self._stack.append(tag)

    def handle_startendtag(self, tag: str, attrs) -> None:
        if tag in (LINE_BREAK_TAG, PAGE_BREAK_TAG):
            self._handle_break(tag)
        else:
            self._fail("Unexpected self-closing tag")

    def handle_endtag(self, tag: str) -> None:
        if tag in (LINE_BREAK_TAG, PAGE_BREAK_TAG):
            # </br> is tolerated by browsers, and by us
            return
        if not self._stack or self._stack[-1] != tag:
            expected = f"</{self._stack[-1]}>" if self._stack else "no closing tag"
            self._fail(f"Mismatched closing tag, expected {expected}", f"</{tag}>")
        self._stack.pop()

        if tag in BLOCK_FORMATS or tag == "li":
            _, style = self._block
            self.tokens.append(Token.new_paragraph(style))
            self._block = None
        elif tag in LIST_FORMATS:
            self._list = None
        elif tag in INLINE_STYLES:
            self._emphasis.pop()

    def _handle_break(self, tag: str) -> None:
        if tag == LINE_BREAK_TAG:
            if self._block is None:
                self._fail("<br> outside of a block", f"<{tag}>")
            self.tokens.append(Token.new_line(self._current_style()))
        else:
            style = self._current_style() if self._block else StyleRef("paragraph")
            self.tokens.append(Token.new_page(style))

    def handle_data(self, data: str) -> None:
        words = data.split()
        if not words:
            return
        if self._block is None:
            self._fail("Text outside of a block", data.strip())
        style = self._current_style()
        self.tokens.extend(Token.word(word, style) for word in words)

    def handle_comment(self, data: str) -> None:
        pass

    def handle_decl(self, decl: str) -> None:
        self._fail("Declarations are not supported", decl)

    def handle_pi(self, data: str) -> None:
        self._fail("Processing instructions are not supported", data)

    def unknown_decl(self, data: str) -> None:
        self._fail("Unsupported markup", data)

    def close(self) -> None:
        super().close()
        if self._stack:
            open_tags = "".join(f"<{t}>" for t in self._stack)
            raise TokenizeError("Unclosed tags at end of text", open_tags)


def tokenize(markup: str, *, number_base: int = 0) -> Tuple[Token, ...]:
    """
    Tokenize marked-up text.

    Args:
        markup: Text using the supported tag set
        number_base: First ordinal of every numbered list

    Returns:
        Ordered, immutable token sequence

    Raises:
        TokenizeError: On unknown tags, bad nesting or unclosed tags

    Example:
        >>> [t.kind.value for t in tokenize("<p>Hello <b>world</b></p>")]
        ['word', 'word', 'new-paragraph']
    """
    parser = _MarkupTokenizer(number_base)
    parser.feed(markup)
    parser.close()
    logger.debug(f"Tokenized {len(markup)} characters into {len(parser.tokens)} tokens")
    return tuple(parser.tokens)
