"""Exception classes for Tinta.

Only two things can go wrong while converting a document: the input is not
valid UTF-8, or it nests block containers deeper than the configured limit.
Everything else degrades to literal text.

Both errors carry the byte offset (and line, where known) of the failure
so callers can point at the originating file.
"""

from __future__ import annotations


class TintaError(Exception):
    """Base exception for all Tinta errors."""

    pass


class SourceError(TintaError):
    """Error tied to a position in the input.

    The formatted message is prefixed with ``file:line:col`` where the
    parts are known, matching the format of ``SourceLocation``.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: int,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize with a message and position.

        Args:
            message: Error description
            offset: Byte offset into the original input
            lineno: Line number (1-indexed, optional)
            col_offset: Column (1-indexed, optional)
            source_file: Path to the source file (optional)
        """
        self.message = message
        self.offset = offset
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message} (byte {offset})")


class InputEncodingError(SourceError):
    """The input is not valid UTF-8.

    Raised by the scanner before any parsing happens.
    """

    pass


class ResourceLimitExceeded(SourceError):
    """Block containers are nested deeper than ``max_nesting_depth``.

    Attributes:
        limit: The configured maximum that was exceeded
    """

    def __init__(
        self,
        limit: int,
        *,
        offset: int,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.limit = limit
        super().__init__(
            f"nesting depth exceeds maximum of {limit}",
            offset=offset,
            lineno=lineno,
            col_offset=col_offset,
            source_file=source_file,
        )


__all__ = [
    "TintaError",
    "SourceError",
    "InputEncodingError",
    "ResourceLimitExceeded",
]
