"""Errors raised while decoding .vox files.

Every failure is a ``ValueError`` so callers that only care about "this file is
broken" can keep catching that.
"""

from typing import Optional


class VoxDecodeError(ValueError):
    """Base class for all .vox decoding errors."""


class BadMagicError(VoxDecodeError):
    """The file does not start with the ``VOX `` magic."""


class BadContainerError(VoxDecodeError):
    """The top-level ``MAIN`` chunk is missing or has the wrong tag."""


class TruncatedError(VoxDecodeError):
    """A read, peek or skip ran past the end of the available bytes."""

    def __init__(
        self, offset: int, requested: int, remaining: int, what: Optional[str] = None
    ):
        self.offset = offset
        self.requested = requested
        self.remaining = remaining
        message = (
            f"Unexpected end of data at offset {offset}: "
            f"needed {requested} bytes, {remaining} remaining"
        )
        if what:
            message += f" (reading {what})"
        super().__init__(message)


class MalformedChunkSequenceError(VoxDecodeError):
    """A ``SIZE`` chunk is not immediately followed by an ``XYZI`` chunk."""


class BadNumericFieldError(VoxDecodeError):
    """A material property value could not be parsed as a number."""


class ModelCountExceededError(VoxDecodeError):
    """More ``SIZE`` chunks were found than the ``PACK`` chunk declared."""
