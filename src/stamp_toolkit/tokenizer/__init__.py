"""
Module: tokenizer

Purpose:
    Turn marked-up text into layout tokens.

Key Functions:
    - tokenize(): Markup -> token tuple

Key Classes:
    - TokenizeError: Raised on malformed markup
"""

from .markup import tokenize, TokenizeError

__all__ = [
    "tokenize",
    "TokenizeError",
]
