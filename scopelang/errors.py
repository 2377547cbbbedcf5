# scopelang/errors.py
"""
Scopelang Error Types and Reporting Module

This module provides the error handling infrastructure for the scopelang
interpreter pipeline. Errors fall into two severity tiers that the rest of
the package keeps strictly apart:

Architecture Overview:
─────────────────────
┌─────────────────────────────────────────────────────────────────────────────┐
│                          Error Hierarchy                                     │
├─────────────────────────────────────────────────────────────────────────────┤
│  ScopelangError (base)                                                      │
│  ├── SyntaxError             - Structural failures, abort the whole parse   │
│  │   ├── UnfinishedDirectiveError                                           │
│  │   ├── MisplacedCommentError                                              │
│  │   ├── UnexpectedCharacterError                                           │
│  │   ├── UnbalancedScopeError                                               │
│  │   ├── ArgumentCountError                                                 │
│  │   └── UnexpectedTerminatorError                                          │
│  └── SemanticError           - Naming/resolution failures                   │
│      ├── UnknownDirectiveError   (raised while scanning, parse-fatal)       │
│      ├── InvalidNameError                                                   │
│      ├── RedefinedSymbolError                                               │
│      ├── UndefinedSymbolError                                               │
│      ├── AmbiguousReferenceError                                            │
│      └── InaccessibleEntityError                                            │
└─────────────────────────────────────────────────────────────────────────────┘

Exceptions are raised *inside* a phase. At the phase boundary they are
converted to result records so callers can tell at the type level what a
failure means:

  - ``ParseAbort``        - the scan failed, nothing may execute
  - ``DirectiveFailure``  - one directive failed, the run continues

Error Codes:
────────────
Each error has a code following the pattern SCPL-XXXX:
  - 0001-0999: Lexical errors
  - 1000-1999: Syntax errors
  - 3000-3999: Scope/naming errors
  - 9000-9999: Internal errors

Example Usage:
──────────────
    from scopelang.errors import ErrorReporter, UndefinedSymbolError, SourceSpan

    reporter = ErrorReporter(source_file="demo.scl")
    reporter.report(UndefinedSymbolError("x", span=SourceSpan("demo.scl", 3, 1)))
    if reporter.has_errors():
        for message in reporter.messages:
            print(message.to_gcc_format())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto, unique
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorPhase(Enum):
    """Pipeline phase where the error occurred."""

    LEXICAL = "lexical"        # Character classification
    SYNTAX = "syntax"          # Directive structure
    SEMANTIC = "semantic"      # Name registration and resolution
    INTERNAL = "internal"      # Interpreter internals


@unique
class ErrorCategory(Enum):
    """
    Fine-grained error categories for filtering and statistics.
    """

    # Lexical categories
    INVALID_CHARACTER = auto()
    MISPLACED_COMMENT = auto()

    # Syntax categories
    UNFINISHED_DIRECTIVE = auto()
    UNBALANCED_SCOPE = auto()
    ARITY_MISMATCH = auto()
    UNEXPECTED_TERMINATOR = auto()

    # Semantic categories
    UNKNOWN_DIRECTIVE = auto()
    INVALID_NAME = auto()
    REDEFINED_SYMBOL = auto()
    UNDEFINED_SYMBOL = auto()
    AMBIGUOUS_REFERENCE = auto()
    INACCESSIBLE_ENTITY = auto()

    # Internal categories
    INTERNAL_ERROR = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorCode:
    """
    Structured error code.

    Codes follow the pattern PREFIX-NNNN where PREFIX is ``SCPL`` and NNNN
    is a 4-digit number in the ranges listed in the module docstring.
    """

    __slots__ = ("prefix", "number", "category", "phase")

    def __init__(
        self,
        prefix: str,
        number: int,
        category: ErrorCategory,
        phase: ErrorPhase,
    ) -> None:
        self.prefix = prefix
        self.number = number
        self.category = category
        self.phase = phase

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ScopelangErrorCodes:
    """Predefined error codes for the scopelang interpreter."""

    # ═══════════════════════════════════════════════════════════════════════════
    # LEXICAL ERRORS (0001-0999)
    # ═══════════════════════════════════════════════════════════════════════════

    INVALID_CHARACTER = ErrorCode(
        "SCPL", 1, ErrorCategory.INVALID_CHARACTER, ErrorPhase.LEXICAL
    )
    MISPLACED_COMMENT = ErrorCode(
        "SCPL", 2, ErrorCategory.MISPLACED_COMMENT, ErrorPhase.LEXICAL
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # SYNTAX ERRORS (1000-1999)
    # ═══════════════════════════════════════════════════════════════════════════

    UNFINISHED_DIRECTIVE = ErrorCode(
        "SCPL", 1000, ErrorCategory.UNFINISHED_DIRECTIVE, ErrorPhase.SYNTAX
    )
    UNBALANCED_SCOPE = ErrorCode(
        "SCPL", 1001, ErrorCategory.UNBALANCED_SCOPE, ErrorPhase.SYNTAX
    )
    ARGUMENT_COUNT = ErrorCode(
        "SCPL", 1002, ErrorCategory.ARITY_MISMATCH, ErrorPhase.SYNTAX
    )
    UNEXPECTED_TERMINATOR = ErrorCode(
        "SCPL", 1003, ErrorCategory.UNEXPECTED_TERMINATOR, ErrorPhase.SYNTAX
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # SCOPE/NAMING ERRORS (3000-3999)
    # ═══════════════════════════════════════════════════════════════════════════

    UNKNOWN_DIRECTIVE = ErrorCode(
        "SCPL", 3000, ErrorCategory.UNKNOWN_DIRECTIVE, ErrorPhase.SEMANTIC
    )
    INVALID_NAME = ErrorCode(
        "SCPL", 3001, ErrorCategory.INVALID_NAME, ErrorPhase.SEMANTIC
    )
    REDEFINED_SYMBOL = ErrorCode(
        "SCPL", 3002, ErrorCategory.REDEFINED_SYMBOL, ErrorPhase.SEMANTIC
    )
    UNDEFINED_SYMBOL = ErrorCode(
        "SCPL", 3003, ErrorCategory.UNDEFINED_SYMBOL, ErrorPhase.SEMANTIC
    )
    AMBIGUOUS_REFERENCE = ErrorCode(
        "SCPL", 3004, ErrorCategory.AMBIGUOUS_REFERENCE, ErrorPhase.SEMANTIC
    )
    INACCESSIBLE_ENTITY = ErrorCode(
        "SCPL", 3005, ErrorCategory.INACCESSIBLE_ENTITY, ErrorPhase.SEMANTIC
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # INTERNAL ERRORS (9000-9999)
    # ═══════════════════════════════════════════════════════════════════════════

    INTERNAL_ERROR = ErrorCode(
        "SCPL", 9000, ErrorCategory.INTERNAL_ERROR, ErrorPhase.INTERNAL
    )


# Convenient alias
E = ScopelangErrorCodes


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATION TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    A point in the source text an error refers to.

    ``line`` and ``column`` are 1-based; ``0`` means "unknown".
    """

    file: str = ""
    line: int = 0
    column: int = 0

    @classmethod
    def from_position(cls, position: Any, file: str = "") -> "SourceSpan":
        """Create a span from anything carrying ``line``/``column``."""
        return cls(
            file=file,
            line=getattr(position, "line", 0) or 0,
            column=getattr(position, "column", 0) or 0,
        )

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR MESSAGE FORMATTING
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ErrorMessage:
    """
    A complete error message with all context.

    This is the internal representation of an error before it is printed
    or serialised.
    """

    code: ErrorCode
    message: str
    span: SourceSpan = field(default_factory=SourceSpan)
    hint: str = ""

    def with_hint(self, hint: str) -> "ErrorMessage":
        self.hint = hint
        return self

    def to_gcc_format(self) -> str:
        """Format as a GCC-style error message."""
        main = f"{self.span}: error: {self.message} [{self.code}]"
        if self.hint:
            return f"{main}\nhint: {self.hint}"
        return main

    def to_json(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "code": self.code.code,
            "message": self.message,
            "location": {
                "file": self.span.file,
                "line": self.span.line,
                "column": self.span.column,
            },
            "phase": self.code.phase.value,
            "category": self.code.category.name,
            "hint": self.hint,
        }

    def __str__(self) -> str:
        return self.to_gcc_format()


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ScopelangError(Exception):
    """
    Base exception for all scopelang errors.

    Carries an :class:`ErrorMessage` and knows how to present itself to a
    user: :attr:`tag` is the short form that is always printed,
    :attr:`detail` the positional explanation printed in debug mode.
    """

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.error_message = ErrorMessage(
            code=code or ScopelangErrorCodes.INTERNAL_ERROR,
            message=message,
            span=span or SourceSpan(),
            hint=hint,
        )

    @property
    def code(self) -> ErrorCode:
        return self.error_message.code

    @property
    def span(self) -> SourceSpan:
        return self.error_message.span

    @property
    def reason(self) -> str:
        return self.error_message.message

    @property
    def phase(self) -> ErrorPhase:
        return self.code.phase

    @property
    def tag(self) -> str:
        return "ERROR"

    @property
    def detail(self) -> str:
        """``<reason> at <line>:<column>``."""
        return f"{self.reason} at {self.span.line}:{self.span.column}"

    def render(self, debug: bool = False) -> str:
        """The line printed for this error; the detail only when *debug*."""
        if debug:
            return f'{self.tag}: "{self.detail}".'
        return self.tag

    def with_hint(self, hint: str) -> "ScopelangError":
        self.error_message.with_hint(hint)
        return self

    def to_gcc_format(self) -> str:
        return self.error_message.to_gcc_format()

    def __str__(self) -> str:
        return self.to_gcc_format()


# ───────────────────────────────────────────────────────────────────────────────
# SYNTAX ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SyntaxError(ScopelangError):
    """Malformed token stream. Any one of these invalidates the whole parse."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=code or ScopelangErrorCodes.UNFINISHED_DIRECTIVE,
            span=span,
            **kwargs,
        )

    @property
    def tag(self) -> str:
        return "SYNTAX ERROR"


class UnfinishedDirectiveError(SyntaxError):
    """A newline (or the end of input) cut a directive short."""

    def __init__(
        self,
        span: Optional[SourceSpan] = None,
        message: str = "keyword is not finished",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=ScopelangErrorCodes.UNFINISHED_DIRECTIVE,
            span=span,
            hint="Terminate the directive with ';' or '{' on the same line",
            **kwargs,
        )


class MisplacedCommentError(SyntaxError):
    """A comment was started while a directive was still being read."""

    def __init__(self, span: Optional[SourceSpan] = None, **kwargs: Any) -> None:
        super().__init__(
            message="keyword is not finished, but comment started",
            code=ScopelangErrorCodes.MISPLACED_COMMENT,
            span=span,
            **kwargs,
        )


class UnexpectedCharacterError(SyntaxError):
    """A character the language does not define appeared outside a comment."""

    def __init__(
        self,
        char: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        if len(char) == 1 and not char.isprintable():
            char_desc = f"U+{ord(char):04X}"
        else:
            char_desc = char
        super().__init__(
            message=f"unexpected symbol '{char_desc}'",
            code=ScopelangErrorCodes.INVALID_CHARACTER,
            span=span,
            **kwargs,
        )
        self.character = char


class UnbalancedScopeError(SyntaxError):
    """More scope closes than opens, or a scope left open at end of input."""

    def __init__(
        self,
        span: Optional[SourceSpan] = None,
        message: str = "number of scope ends is not the same as number of scope starts",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=ScopelangErrorCodes.UNBALANCED_SCOPE,
            span=span,
            **kwargs,
        )


class ArgumentCountError(SyntaxError):
    def __init__(
        self,
        keyword: str,
        expected: int,
        got: int,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message="number of keyword arguments is not the same as expected",
            code=ScopelangErrorCodes.ARGUMENT_COUNT,
            span=span,
            hint=f"{keyword} takes {expected} argument(s), got {got}",
            **kwargs,
        )
        self.keyword = keyword
        self.expected = expected
        self.got = got


class UnexpectedTerminatorError(SyntaxError):
    def __init__(
        self,
        keyword: str,
        expected: str,
        got: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message="unexpected end of keyword",
            code=ScopelangErrorCodes.UNEXPECTED_TERMINATOR,
            span=span,
            hint=f"{keyword} must end with '{expected}', not '{got}'",
            **kwargs,
        )
        self.keyword = keyword
        self.expected = expected
        self.got = got


# ───────────────────────────────────────────────────────────────────────────────
# SEMANTIC ERRORS
# ───────────────────────────────────────────────────────────────────────────────

class SemanticError(ScopelangError):
    """
    Naming or resolution failure.

    Raised while executing a directive these are recovered at the
    granularity of that directive; :class:`UnknownDirectiveError` is the
    one member raised while scanning, where it is fatal to the parse.
    """

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        symbol: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=message,
            code=code or ScopelangErrorCodes.UNDEFINED_SYMBOL,
            span=span,
            **kwargs,
        )
        self.symbol = symbol

    @property
    def tag(self) -> str:
        return f"ERROR {self.span.line}"


class UnknownDirectiveError(SemanticError):
    def __init__(self, keyword: str, span: Optional[SourceSpan] = None, **kwargs: Any) -> None:
        super().__init__(
            message=f'unknown keyword "{keyword}"',
            code=ScopelangErrorCodes.UNKNOWN_DIRECTIVE,
            span=span,
            symbol=keyword,
            hint="Known keywords: USING, SCOPE, DECLARE, ACCESS",
            **kwargs,
        )


class InvalidNameError(SemanticError):
    """A declared or scope name does not match the identifier rule."""

    def __init__(self, name: str, span: Optional[SourceSpan] = None, **kwargs: Any) -> None:
        super().__init__(
            message=f'declaration "{name}" has invalid format',
            code=ScopelangErrorCodes.INVALID_NAME,
            span=span,
            symbol=name,
            hint="Names are a letter followed by letters or digits",
            **kwargs,
        )


class RedefinedSymbolError(SemanticError):
    def __init__(
        self,
        name: str,
        path: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=f'declaration "{name}" is not unique and conflicts with "{path}"',
            code=ScopelangErrorCodes.REDEFINED_SYMBOL,
            span=span,
            symbol=name,
            **kwargs,
        )
        self.path = path


class UndefinedSymbolError(SemanticError):
    def __init__(self, name: str, span: Optional[SourceSpan] = None, **kwargs: Any) -> None:
        super().__init__(
            message=f'declaration "{name}" is not existent',
            code=ScopelangErrorCodes.UNDEFINED_SYMBOL,
            span=span,
            symbol=name,
            **kwargs,
        )


class AmbiguousReferenceError(SemanticError):
    """A reference matched both directly and through the current alias."""

    def __init__(
        self,
        name: str,
        direct: str,
        aliased: str,
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message=(
                f'declaration "{name}" is ambiguous by USING statement, '
                f'could be "{direct}" or "{aliased}"'
            ),
            code=ScopelangErrorCodes.AMBIGUOUS_REFERENCE,
            span=span,
            symbol=name,
            **kwargs,
        )
        self.direct = direct
        self.aliased = aliased


class InaccessibleEntityError(SemanticError):
    def __init__(self, path: str, span: Optional[SourceSpan] = None, **kwargs: Any) -> None:
        super().__init__(
            message=f'attempt to access inaccessible item with name "{path}"',
            code=ScopelangErrorCodes.INACCESSIBLE_ENTITY,
            span=span,
            symbol=path,
            **kwargs,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# PHASE RESULTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ParseAbort:
    """The scan failed: no directive sequence exists and nothing executes."""

    error: ScopelangError

    def render(self, debug: bool = False) -> str:
        return self.error.render(debug)


@dataclass(frozen=True)
class DirectiveFailure:
    """One directive failed while executing; the remaining ones still ran."""

    index: int
    error: SemanticError

    def render(self, debug: bool = False) -> str:
        return self.error.render(debug)


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR REPORTER
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorReporter:
    """
    Collects errors raised during a run.

    Each reported error is kept as an :class:`ErrorMessage` and forwarded
    to *callback* (if given) in the order it was reported.
    """

    def __init__(
        self,
        source_file: str = "",
        callback: Optional[Callable[[ScopelangError], None]] = None,
    ) -> None:
        self.source_file = source_file
        self._callback = callback
        self._errors: List[ScopelangError] = []

    def report(self, error: ScopelangError) -> None:
        self._errors.append(error)
        if self._callback is not None:
            self._callback(error)

    @property
    def errors(self) -> List[ScopelangError]:
        return list(self._errors)

    @property
    def messages(self) -> List[ErrorMessage]:
        return [error.error_message for error in self._errors]

    def has_errors(self) -> bool:
        return bool(self._errors)

    def count_by_phase(self, phase: ErrorPhase) -> int:
        return sum(1 for error in self._errors if error.phase is phase)

    def to_json(self) -> List[Dict[str, Any]]:
        return [message.to_json() for message in self.messages]

    def clear(self) -> None:
        self._errors.clear()
