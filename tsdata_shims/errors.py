"""
tsdata_shims/errors.py
══════════════════════

Exception types shared by the tsdata-shims checker pipeline.

Error Hierarchy
───────────────

  ShimsError (base)
  ├── OracleResolutionError  - type information unavailable for a node
  ├── MalformedTreeError     - a required child slot is absent
  ├── ConfigurationError     - invalid rule options
  └── DumpFormatError        - unreadable or structurally invalid dump

Only the last two reach the host. Oracle failures degrade a single
classification to "safe"; malformed-tree failures skip a single rule
invocation.

License: MIT — same as tsdata-shims.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from tsdata_shims.syntax import SourceSpan


class ShimsError(Exception):
    """
    Base exception for all tsdata-shims errors.

    Carries an optional source span so that messages can be rendered in
    the same GCC style as diagnostics.
    """

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.span = span
        self.cause = cause

    def to_gcc_format(self) -> str:
        """Format as ``file:line:col: error: message``."""
        if self.span is None:
            return f"error: {self.message}"
        return f"{self.span.location}: error: {self.message}"

    def __str__(self) -> str:
        return self.to_gcc_format()


class OracleResolutionError(ShimsError):
    """The type oracle has no resolved type for a node."""


class MalformedTreeError(ShimsError):
    """A node lacks a child the parser contract guarantees."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        slot: str = "",
    ) -> None:
        super().__init__(message, span)
        self.slot = slot


class ConfigurationError(ShimsError):
    """Rule options failed validation."""


class DumpFormatError(ShimsError):
    """A dump file could not be decoded into a syntax tree."""


__all__ = [
    "ShimsError",
    "OracleResolutionError",
    "MalformedTreeError",
    "ConfigurationError",
    "DumpFormatError",
]
