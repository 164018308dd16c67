"""
Module: errors

Purpose:
    Root of the stamp_toolkit exception hierarchy. Every error raised by
    the toolkit derives from StampError so callers can catch a single type
    around fill_pages().

Key Classes:
    - StampError: Base exception for all toolkit failures

Used By:
    - Every module that raises (formats, tokenizer, cascade, holes, fonts)
"""


class StampError(Exception):
    """Base class for all errors raised while stamping pages."""
    pass
