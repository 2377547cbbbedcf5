"""
grammar.py — PEG grammar of the scopelang language
==================================================

A declarative description of the language, independent of the
character-level :mod:`scopelang.scanner`.  It is used to validate a source
file's overall shape and to build a nested outline of its directives
(``scopelang check --outline``).

The grammar is stricter than the scanner about names (it only accepts
well-formed identifiers, where the scanner leaves that to the registry)
and it does not know about aliases or resolution.

Usage::

    from scopelang.grammar import check

    result = check("SCOPE a { DECLARE b; } ACCESS a::b;")
    assert result.ok
    for line in format_outline(result.outline):
        print(line)

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Sequence, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

SCOPELANG_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Top-Level Structure
    # ─────────────────────────────────────────────────────────────

    program     = ws directive*
    directive   = (using / scope / declare / access) ws

    # ─────────────────────────────────────────────────────────────
    # Directives (never split across lines)
    # ─────────────────────────────────────────────────────────────

    using       = "USING" gap name pad ";"
    scope       = "SCOPE" gap name pad "{" ws directive* "}"
    declare     = "DECLARE" gap name pad ";"
    access      = "ACCESS" gap path pad ";"

    # ─────────────────────────────────────────────────────────────
    # Names
    # ─────────────────────────────────────────────────────────────

    path        = "::"? name ("::" name)*
    name        = ~r"[A-Za-z][A-Za-z0-9]*"

    # ─────────────────────────────────────────────────────────────
    # Layout
    # ─────────────────────────────────────────────────────────────

    gap         = ~r"[ \t]+"
    pad         = ~r"[ \t]*"
    ws          = (space / comment)*
    space       = ~r"\s+"
    comment     = ~r"//[^\r\n]*"
''')

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — OUTLINE
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OutlineEntry:
    """One directive as the grammar sees it; scopes nest their body."""

    keyword: str
    argument: str
    line: int
    children: Tuple["OutlineEntry", ...] = ()

    def walk(self) -> Iterator["OutlineEntry"]:
        yield self
        for child in self.children:
            yield from child.walk()


def _entries(value: Any) -> Tuple[OutlineEntry, ...]:
    # An empty repetition visits to its bare Node.
    if isinstance(value, list):
        return tuple(value)
    return ()


class OutlineBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into :class:`OutlineEntry` items."""

    grammar = SCOPELANG_GRAMMAR

    def __init__(self, text: str) -> None:
        self._text = text

    def _line(self, node: Node) -> int:
        return len(_LINE_BREAK.findall(self._text, 0, node.start)) + 1

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_program(self, node, visited_children):
        _, directives = visited_children
        return _entries(directives)

    def visit_directive(self, node, visited_children):
        alternative, _ = visited_children
        return alternative[0]

    def visit_using(self, node, visited_children):
        return OutlineEntry("USING", node.children[2].text, self._line(node))

    def visit_scope(self, node, visited_children):
        body = visited_children[6]
        return OutlineEntry("SCOPE", node.children[2].text, self._line(node), _entries(body))

    def visit_declare(self, node, visited_children):
        return OutlineEntry("DECLARE", node.children[2].text, self._line(node))

    def visit_access(self, node, visited_children):
        return OutlineEntry("ACCESS", node.children[2].text, self._line(node))


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GrammarCheck:
    ok: bool
    outline: Tuple[OutlineEntry, ...] = ()
    message: str = ""
    line: int = 0
    column: int = 0

    def count(self) -> int:
        return sum(1 for entry in self.outline for _ in entry.walk())


def check(text: str) -> GrammarCheck:
    """Validate *text* against :data:`SCOPELANG_GRAMMAR`."""
    try:
        tree = SCOPELANG_GRAMMAR.parse(text)
    except ParseError as exc:
        logger.debug("Grammar rejected input at %d:%d", exc.line(), exc.column())
        return GrammarCheck(
            ok=False, message=str(exc), line=exc.line(), column=exc.column()
        )
    outline = OutlineBuilder(text).visit(tree)
    return GrammarCheck(ok=True, outline=tuple(outline))


def format_outline(entries: Sequence[OutlineEntry], indent: str = "  ") -> List[str]:
    """Render an outline as indented ``<line>: <KEYWORD> <argument>`` rows."""
    lines: List[str] = []

    def _emit(entry: OutlineEntry, depth: int) -> None:
        lines.append(f"{indent * depth}{entry.line}: {entry.keyword} {entry.argument}")
        for child in entry.children:
            _emit(child, depth + 1)

    for entry in entries:
        _emit(entry, 0)
    return lines
