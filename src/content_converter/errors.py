"""Typed exception hierarchy for content conversion errors.

All exceptions raised by this project inherit from ConverterError so callers
can catch every application-level failure with a single except clause.
"""


class ConverterError(Exception):
    """Base exception for all storage/markdown converter errors."""
    pass


class ConversionError(ConverterError):
    """Raised when content conversion between formats fails."""

    def __init__(self, message: str):
        super().__init__(message)
