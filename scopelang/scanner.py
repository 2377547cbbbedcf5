"""scopelang/scanner.py – Character-level scanner and directive builder.

Turns raw source text into a :class:`~scopelang.nodes.Program` in a single
pass over the characters.  There is no separate token stream: the scanner
is a small state machine that accumulates a directive keyword and its
arguments and builds a node as soon as it sees the directive's terminator.

Design principles
-----------------
* **All-or-nothing** – the first structural error stops the scan and no
  program is produced.  :func:`scan` turns that error into a
  :class:`~scopelang.errors.ParseAbort`.
* **Keyword dispatch** – each keyword registers a ``_build_<keyword>``
  method together with the terminator it requires (``{`` for ``SCOPE``,
  ``;`` for the others).
* **Paths resolved while scanning** – ``SCOPE`` and ``DECLARE`` nodes carry
  their qualified path and ``ACCESS`` nodes carry every candidate path, all
  computed from the scope stack at the point the directive is read.
* **Aliases follow reading order** – ``USING`` replaces the current alias
  and the alias is not restored when a scope closes.

Lexical rules
-------------
* Whitespace separates the keyword from its argument; runs of whitespace
  collapse.
* ``//`` starts a comment running to the end of the line.  A lone ``/`` is
  an error (there is no division).
* ``;`` and ``{`` end a directive, ``}`` closes the innermost scope.
* A directive may not cross a newline, and may not contain a comment.
* Token characters are any printable, non-whitespace characters other than
  ``; { } /``.  Whether a name is well formed is decided later by the
  registry.

Public API
----------
``scan(text, source_file="<input>", on_error=None) -> ParseResult``
    Scan a complete source string.

``Scanner``
    The state machine itself; ``feed`` text in chunks, then ``finish``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from scopelang.errors import (
    ArgumentCountError,
    MisplacedCommentError,
    ParseAbort,
    ScopelangError,
    SourceSpan,
    UnbalancedScopeError,
    UnexpectedCharacterError,
    UnexpectedTerminatorError,
    UnfinishedDirectiveError,
    UnknownDirectiveError,
)
from scopelang.nodes import (
    PATH_DELIMITER,
    AliasSet,
    Declaration,
    Directive,
    Position,
    Program,
    Reference,
    ScopeOpener,
)

logger = logging.getLogger(__name__)

NEWLINES = "\r\n"
COMMENT_CHAR = "/"
SCOPE_BEGIN = "{"
SCOPE_END = "}"
DIRECTIVE_END = ";"


# ═══════════════════════════════════════════════════════════════════════
#  Result type
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ParseResult:
    """Either a complete program or the reason the scan was abandoned."""

    program: Optional[Program] = None
    abort: Optional[ParseAbort] = None

    @property
    def ok(self) -> bool:
        return self.abort is None and self.program is not None


# ═══════════════════════════════════════════════════════════════════════
#  Keyword dispatch registry
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class _Builder:
    keyword: str
    terminator: str
    build: Callable[["Scanner", str, Position], Directive]


# Populated by the ``@_builder`` decorator below.
_BUILDERS: Dict[str, _Builder] = {}


def _builder(keyword: str, terminator: str):
    """Decorator: register a node builder for *keyword*."""
    def deco(fn):
        _BUILDERS[keyword] = _Builder(keyword, terminator, fn)
        return fn
    return deco


def keywords() -> Tuple[str, ...]:
    return tuple(_BUILDERS)


# ═══════════════════════════════════════════════════════════════════════
#  Scanner
# ═══════════════════════════════════════════════════════════════════════

class Scanner:
    """Single-use scanning state machine."""

    def __init__(self, source_file: str = "<input>") -> None:
        self.source_file = source_file

        # Cursor; column is that of the last consumed character.
        self._line = 1
        self._column = 0
        self._after_cr = False

        # Comment state
        self._in_comment = False
        self._slashes = 0

        # Directive being read
        self._keyword = ""
        self._args: List[str] = []
        self._start: Optional[Position] = None

        # Name context; index 0 is the root and is never popped.
        self._scopes: List[str] = [PATH_DELIMITER]
        self._alias: Optional[str] = None

        self._result: List[Directive] = []

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    @property
    def position(self) -> Position:
        return Position(self._line, self._column)

    @property
    def depth(self) -> int:
        """Number of open scopes, the root excluded."""
        return len(self._scopes) - 1

    @property
    def alias(self) -> Optional[str]:
        return self._alias

    def feed(self, text: str) -> None:
        for ch in text:
            self._consume(ch)

    def finish(self) -> Program:
        """Check that nothing is left open and return the program."""
        if self._slashes:
            raise UnexpectedCharacterError(COMMENT_CHAR, span=self._span())
        if self._keyword:
            raise UnfinishedDirectiveError(
                span=self._span(), message="keyword is not finished at end of input"
            )
        if self.depth:
            unclosed = self._scopes[-1][: -len(PATH_DELIMITER)]
            raise UnbalancedScopeError(
                span=self._span(), message=f'scope "{unclosed}" is not closed'
            )
        return Program(self._result)

    def scan(self, text: str) -> Program:
        self.feed(text)
        return self.finish()

    # ------------------------------------------------------------------
    # Character handling
    # ------------------------------------------------------------------

    def _span(self) -> SourceSpan:
        return SourceSpan(self.source_file, self._line, self._column)

    def _consume(self, ch: str) -> None:
        if ch in NEWLINES:
            # \r\n is one line break
            if ch == "\n" and self._after_cr:
                self._after_cr = False
                return
            self._after_cr = ch == "\r"
            self._newline(ch)
            return
        self._after_cr = False
        self._column += 1
        if self._in_comment:
            return
        if self._check_comment_start(ch):
            return
        self._directive_char(ch)

    def _newline(self, ch: str) -> None:
        self._column += 1
        if not self._in_comment:
            if self._slashes:
                raise UnexpectedCharacterError(ch, span=self._span())
            if self._keyword:
                raise UnfinishedDirectiveError(span=self._span())
        self._line += 1
        self._column = 0
        self._in_comment = False

    def _check_comment_start(self, ch: str) -> bool:
        if ch != COMMENT_CHAR:
            if self._slashes:
                # math is not supported
                raise UnexpectedCharacterError(ch, span=self._span())
            return False
        if self._keyword:
            raise MisplacedCommentError(span=self._span())
        self._slashes += 1
        if self._slashes == 2:
            self._slashes = 0
            self._in_comment = True
        return True

    def _directive_char(self, ch: str) -> None:
        if ch.isspace():
            if not self._keyword:
                return
            if self._args and not self._args[-1]:
                return
            self._args.append("")
            return

        if ch in (DIRECTIVE_END, SCOPE_BEGIN):
            self._build(ch)
            return

        if ch == SCOPE_END:
            self._close_scope()
            return

        if not ch.isprintable():
            raise UnexpectedCharacterError(ch, span=self._span())

        if self._args:
            self._args[-1] += ch
        else:
            if not self._keyword:
                self._start = self.position
            self._keyword += ch

    def _close_scope(self) -> None:
        if self._keyword:
            raise UnfinishedDirectiveError(
                span=self._span(), message="scope closed inside an unfinished keyword"
            )
        if self.depth < 1:
            raise UnbalancedScopeError(span=self._span())
        closed = self._scopes.pop()
        logger.debug("Closed scope %s at %s", closed, self.position)

    # ------------------------------------------------------------------
    # Directive construction
    # ------------------------------------------------------------------

    def _build(self, terminator: str) -> None:
        builder = _BUILDERS.get(self._keyword)
        if builder is None:
            raise UnknownDirectiveError(self._keyword, span=self._span())
        argument = self._single_argument(builder, terminator)
        node = builder.build(self, argument, self._start or self.position)
        logger.debug("Built %s directive %r", builder.keyword, node)
        self._result.append(node)
        self._keyword = ""
        self._args = []
        self._start = None

    def _single_argument(self, builder: _Builder, terminator: str) -> str:
        args = self._args
        if args and not args[-1]:
            args = args[:-1]
        if len(args) != 1:
            raise ArgumentCountError(builder.keyword, 1, len(args), span=self._span())
        if terminator != builder.terminator:
            raise UnexpectedTerminatorError(
                builder.keyword, builder.terminator, terminator, span=self._span()
            )
        return args[0]

    @_builder("USING", DIRECTIVE_END)
    def _build_using(self, argument: str, position: Position) -> Directive:
        # replaces, never stacks
        self._alias = argument
        return AliasSet(alias=argument, position=position)

    @_builder("SCOPE", SCOPE_BEGIN)
    def _build_scope(self, argument: str, position: Position) -> Directive:
        path = self._scopes[-1] + argument
        self._scopes.append(path + PATH_DELIMITER)
        return ScopeOpener(name=argument, path=path, position=position)

    @_builder("DECLARE", DIRECTIVE_END)
    def _build_declare(self, argument: str, position: Position) -> Directive:
        return Declaration(name=argument, path=self._scopes[-1] + argument, position=position)

    @_builder("ACCESS", DIRECTIVE_END)
    def _build_access(self, argument: str, position: Position) -> Directive:
        if argument.startswith(PATH_DELIMITER):
            return Reference(name=argument, direct=(argument,), aliased=(), position=position)
        direct = tuple(prefix + argument for prefix in self._scopes)
        aliased: Tuple[str, ...] = ()
        if self._alias:
            aliased = tuple(
                prefix + self._alias + PATH_DELIMITER + argument for prefix in self._scopes
            )
        return Reference(name=argument, direct=direct, aliased=aliased, position=position)


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════

def scan(
    text: str,
    source_file: str = "<input>",
    on_error: Optional[Callable[[ScopelangError], None]] = None,
) -> ParseResult:
    """Scan *text* completely.

    On the first error *on_error* (if given) is called with it and the
    result carries a :class:`ParseAbort` instead of a program.
    """
    scanner = Scanner(source_file)
    try:
        program = scanner.scan(text)
    except ScopelangError as exc:
        logger.info("Scan of %s aborted: %s", source_file, exc.detail)
        if on_error is not None:
            on_error(exc)
        return ParseResult(abort=ParseAbort(exc))
    logger.info("Scanned %d directive(s) from %s", len(program), source_file)
    return ParseResult(program=program)
