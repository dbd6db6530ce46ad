"""Exceptions raised while opening or traversing RIFF files.

Everything derives from ValueError so callers that already catch the
reader's ValueError keep working.
"""


class RiffError(ValueError):
    """Base class for RIFF decoding failures.

    `offset` is the region offset the failure refers to, when there is one.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)


class RiffIOError(RiffError, OSError):
    """The byte region could not be obtained (stat or mmap failed)."""


class TooShortError(RiffError):
    """Fewer bytes than the 12-byte file header."""


class FormatMismatchError(RiffError):
    """Magic tag or form type differs from what the caller asked for."""


class NestingTooDeepError(RiffError):
    """A group would open past the supported nesting depth."""


class ClosedRegionError(RiffError):
    """The region was accessed after close()."""
