"""Error hierarchy for notedown.

Every public error class inherits from NotedownError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error notedown can raise."""

    UNKNOWN_NODE_KIND = "UNKNOWN_NODE_KIND"
    UNRESOLVABLE_POSITION = "UNRESOLVABLE_POSITION"
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotedownError(Exception):
    """Base exception for all notedown errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Serialization errors
# ---------------------------------------------------------------------------

class NotedownUnknownNodeKindError(NotedownError):
    """The serializer met a top-level node that is neither a heading nor a
    paragraph.

    This always signals a bug in the builder or the normalization engine
    and is never caught inside notedown.

    Context keys: ``kind``, ``index``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_NODE_KIND,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Editing errors
# ---------------------------------------------------------------------------

class NotedownUnresolvablePositionError(NotedownError):
    """A document position could not be resolved against the current tree.

    Raised when a position is out of range or sits at the wrong depth
    for the requested operation (for example a caret between two blocks).
    The normalization engine treats it as recoverable and skips the
    corrective pass for that transaction.

    Context keys: ``pos``, ``size``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNRESOLVABLE_POSITION,
            message=message,
            context=context,
            cause=cause,
        )


class NotedownSchemaError(NotedownError):
    """A node or mark violates the document schema.

    Context keys: ``kind``, ``field``, ``value``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SCHEMA_VIOLATION,
            message=message,
            context=context,
            cause=cause,
        )
