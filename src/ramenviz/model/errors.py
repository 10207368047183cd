"""
Load Errors
===========
Typed failures for a single asset load attempt.

Every error is recoverable: the caller reports the message to the user and
keeps the previously installed asset on screen.
"""
from typing import Optional


class ParseError(Exception):
    """Base class for every failure of the format parser."""

    def __init__(self, format_name: str, cause: str) -> None:
        self.format_name = format_name
        self.cause = cause
        super().__init__(f"{format_name}: {cause}")


class UnsupportedFormat(ParseError):
    def __init__(self, extension: str) -> None:
        self.extension = extension
        shown = f"'.{extension}'" if extension else "(no extension)"
        super().__init__("UNKNOWN", f"unsupported file format {shown}")


class InvalidHeader(ParseError):
    pass


class InvalidVertexCount(ParseError):
    pass


class MissingHeaderTerminator(ParseError):
    def __init__(self, format_name: str = "PLY") -> None:
        super().__init__(format_name, "header is not terminated by 'end_header'")


class TruncatedData(ParseError):
    def __init__(self, format_name: str, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(format_name, f"expected {expected} vertex rows, found only {found}")


class InvalidVertexData(ParseError):
    def __init__(self, format_name: str, line: int, detail: Optional[str] = None) -> None:
        self.line = line
        cause = f"invalid vertex data on line {line}"
        if detail:
            cause = f"{cause} ({detail})"
        super().__init__(format_name, cause)


class MalformedVertexArray(ParseError):
    pass


class InvalidJSONShape(ParseError):
    pass


class AssetLoadFailed(ParseError):
    pass


class SceneClosedError(RuntimeError):
    """Raised when the scene is used after it has been torn down."""
