"""scopelang/nodes.py – Directive nodes produced by the scanner.

The language has exactly four directives, so the node set is closed:

=============  ======================  ==========================================
Keyword        Node                    Carries
=============  ======================  ==========================================
``SCOPE``      :class:`ScopeOpener`    short name, qualified path of the scope
``DECLARE``    :class:`Declaration`    short name, qualified path
``USING``      :class:`AliasSet`       alias name
``ACCESS``     :class:`Reference`      name, direct and aliased candidate paths
=============  ======================  ==========================================

Nodes are frozen dataclasses and are never mutated after scanning.  The
behaviour attached to them (``execute`` / ``respond_to_access``) lives in
:mod:`scopelang.runtime` as explicit dispatch functions over
:class:`DirectiveKind`.

A parsed file is a :class:`Program`: an arena of nodes addressed by their
index.  The registry stores those indices instead of node references.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union

from sexpdata import Symbol, dumps


PATH_DELIMITER = "::"


@dataclass(frozen=True, slots=True)
class Position:
    """A 1-based (line, column) cursor into the source text."""

    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class DirectiveKind(enum.Enum):
    SCOPE = "SCOPE"
    DECLARE = "DECLARE"
    USING = "USING"
    ACCESS = "ACCESS"


@dataclass(frozen=True, slots=True)
class ScopeOpener:
    """``SCOPE <name> {`` – ``path`` is the scope itself, not its children."""

    name: str
    path: str
    position: Position

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.SCOPE


@dataclass(frozen=True, slots=True)
class Declaration:
    name: str
    path: str
    position: Position

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.DECLARE


@dataclass(frozen=True, slots=True)
class AliasSet:
    alias: str
    position: Position

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.USING


@dataclass(frozen=True, slots=True)
class Reference:
    """``ACCESS <name>;`` with its candidate paths ordered outer-to-inner."""

    name: str
    direct: Tuple[str, ...]
    aliased: Tuple[str, ...]
    position: Position

    @property
    def kind(self) -> DirectiveKind:
        return DirectiveKind.ACCESS

    @property
    def is_absolute(self) -> bool:
        return self.name.startswith(PATH_DELIMITER)


Directive = Union[ScopeOpener, Declaration, AliasSet, Reference]


# ═══════════════════════════════════════════════════════════════════════
#  Serialisation helpers
# ═══════════════════════════════════════════════════════════════════════

def _at(position: Position) -> list:
    return [Symbol("at"), position.line, position.column]


def directive_to_sexp(node: Directive) -> list:
    """Return the nested-list S-expression form of *node*."""
    if isinstance(node, ScopeOpener):
        return [Symbol("scope"), node.name, node.path, _at(node.position)]
    if isinstance(node, Declaration):
        return [Symbol("declare"), node.name, node.path, _at(node.position)]
    if isinstance(node, AliasSet):
        return [Symbol("using"), node.alias, _at(node.position)]
    if isinstance(node, Reference):
        return [
            Symbol("access"),
            node.name,
            [Symbol("direct"), *node.direct],
            [Symbol("aliased"), *node.aliased],
            _at(node.position),
        ]
    raise TypeError(f"Not a directive node: {node!r}")


def directive_to_dict(node: Directive) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "kind": node.kind.value,
        "line": node.position.line,
        "column": node.position.column,
    }
    if isinstance(node, (ScopeOpener, Declaration)):
        result["name"] = node.name
        result["path"] = node.path
    elif isinstance(node, AliasSet):
        result["alias"] = node.alias
    else:
        result["name"] = node.name
        result["direct"] = list(node.direct)
        result["aliased"] = list(node.aliased)
    return result


# ═══════════════════════════════════════════════════════════════════════
#  Program arena
# ═══════════════════════════════════════════════════════════════════════

class Program(Sequence[Directive]):
    """The ordered, immutable result of a successful scan.

    Indices into a program are stable for its whole lifetime, which is
    what lets the registry refer to nodes by index.
    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Sequence[Directive] = ()) -> None:
        self._nodes: Tuple[Directive, ...] = tuple(nodes)

    def __getitem__(self, index):  # type: ignore[override]
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Directive]:
        return iter(self._nodes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Program):
            return self._nodes == other._nodes
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._nodes)

    def __repr__(self) -> str:
        return f"Program({list(self._nodes)!r})"

    def of_kind(self, kind: DirectiveKind) -> List[Directive]:
        return [node for node in self._nodes if node.kind is kind]

    def to_sexp(self) -> str:
        """Dump as a single ``(program ...)`` S-expression string."""
        return dumps([Symbol("program"), *(directive_to_sexp(n) for n in self._nodes)])

    def to_dict(self) -> Dict[str, Any]:
        return {"directives": [directive_to_dict(n) for n in self._nodes]}
