"""
scopelang/runtime.py – Directive execution and name resolution.

Executes a scanned :class:`~scopelang.nodes.Program` against a
:class:`~scopelang.registry.Registry`, strictly in source order and once
per directive.

Dispatch is explicit: :func:`execute` and :func:`respond_to_access` switch
on the node's :class:`~scopelang.nodes.DirectiveKind`.

=========== ================================= ===============================
Kind        execute                           respond_to_access
=========== ================================= ===============================
SCOPE       register own path                 inaccessible
DECLARE     register own path                 log ``LINE <n> ACCESS <path>``
USING       nothing (alias used at scan time) inaccessible
ACCESS      resolve and access the target     inaccessible
=========== ================================= ===============================

Semantic errors raised by :func:`execute` are caught by
:class:`Interpreter` one directive at a time and recorded as
:class:`~scopelang.errors.DirectiveFailure`; every later directive still
runs.  Anything else propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union, cast

from scopelang.config import RunConfig
from scopelang.errors import (
    AmbiguousReferenceError,
    DirectiveFailure,
    InaccessibleEntityError,
    ParseAbort,
    RedefinedSymbolError,
    ScopelangError,
    SemanticError,
    SourceSpan,
    UndefinedSymbolError,
)
from scopelang.nodes import (
    Declaration,
    Directive,
    DirectiveKind,
    Program,
    Reference,
    ScopeOpener,
)
from scopelang.registry import Entity, Registry
from scopelang.scanner import scan

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[ScopelangError], None]


# ═══════════════════════════════════════════════════════════════════════
#  execute
# ═══════════════════════════════════════════════════════════════════════

def _span(node: Directive, registry: Registry) -> SourceSpan:
    return SourceSpan.from_position(node.position, registry.source_file)


def _execute_entity(
    node: Directive, index: int, program: Program, registry: Registry
) -> None:
    node = cast(Union[ScopeOpener, Declaration], node)
    if not registry.register(node.name, node.path, index, node.position):
        raise RedefinedSymbolError(node.name, node.path, span=_span(node, registry))


def _execute_alias(
    node: Directive, index: int, program: Program, registry: Registry
) -> None:
    pass


def _first_registered(candidates: Sequence[str], registry: Registry) -> Optional[Entity]:
    # innermost scope first
    for path in reversed(candidates):
        entity = registry.lookup(path)
        if entity is not None:
            return entity
    return None


def resolve(reference: Reference, registry: Registry) -> Entity:
    """Find the entity *reference* names, or raise.

    Raises :class:`AmbiguousReferenceError` when both a direct and an
    aliased candidate are registered, :class:`UndefinedSymbolError` when
    neither is.
    """
    direct = _first_registered(reference.direct, registry)
    aliased = _first_registered(reference.aliased, registry)
    if direct is not None and aliased is not None:
        raise AmbiguousReferenceError(
            reference.name, direct.name, aliased.name, span=_span(reference, registry)
        )
    target = direct or aliased
    if target is None:
        raise UndefinedSymbolError(reference.name, span=_span(reference, registry))
    return target


def _execute_reference(
    node: Directive, index: int, program: Program, registry: Registry
) -> None:
    node = cast(Reference, node)
    target = resolve(node, registry)
    if not respond_to_access(program[target.node], node, registry):
        raise InaccessibleEntityError(target.name, span=_span(node, registry))


_EXECUTE: Dict[DirectiveKind, Callable[[Directive, int, Program, Registry], None]] = {
    DirectiveKind.SCOPE: _execute_entity,
    DirectiveKind.DECLARE: _execute_entity,
    DirectiveKind.USING: _execute_alias,
    DirectiveKind.ACCESS: _execute_reference,
}


def execute(program: Program, index: int, registry: Registry) -> None:
    """Execute the directive at *index* of *program*."""
    node = program[index]
    _EXECUTE[node.kind](node, index, program, registry)


# ═══════════════════════════════════════════════════════════════════════
#  respond_to_access
# ═══════════════════════════════════════════════════════════════════════

def respond_to_access(target: Directive, accesser: Reference, registry: Registry) -> bool:
    """Let *target* react to being accessed by *accesser*.

    Returns ``False`` when *target* cannot be accessed.  Only declarations
    can; their response is a log line naming the accessing line and the
    declaration's qualified path.
    """
    if target.kind is DirectiveKind.DECLARE:
        target = cast(Declaration, target)
        registry.log(f"LINE {accesser.position.line} ACCESS {target.path}")
        return True
    return False


# ═══════════════════════════════════════════════════════════════════════
#  Interpreter
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class RunReport:
    """What happened while executing one program."""

    executed: int = 0
    failures: List[DirectiveFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.executed - len(self.failures)


class Interpreter:
    """Runs programs against a single registry."""

    def __init__(
        self,
        registry: Optional[Registry] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self.registry = registry if registry is not None else Registry()
        self._on_error = on_error

    def run(self, program: Program) -> RunReport:
        report = RunReport()
        for index, node in enumerate(program):
            logger.debug("Executing #%d %s at %s", index, node.kind.value, node.position)
            try:
                execute(program, index, self.registry)
            except SemanticError as exc:
                logger.info("Directive #%d failed: %s", index, exc.detail)
                report.failures.append(DirectiveFailure(index, exc))
                if self._on_error is not None:
                    self._on_error(exc)
            report.executed += 1
        logger.info(
            "Executed %d directive(s), %d failed, %d log line(s) pending",
            report.executed,
            len(report.failures),
            self.registry.pending(),
        )
        return report


@dataclass
class InterpretResult:
    """Outcome of :func:`interpret`: a parse abort, or a run report."""

    registry: Registry
    program: Optional[Program] = None
    abort: Optional[ParseAbort] = None
    report: Optional[RunReport] = None

    @property
    def parsed(self) -> bool:
        return self.abort is None

    @property
    def failures(self) -> Tuple[DirectiveFailure, ...]:
        return tuple(self.report.failures) if self.report else ()


def interpret(
    text: str,
    config: Optional[RunConfig] = None,
    on_error: Optional[ErrorCallback] = None,
) -> InterpretResult:
    """Scan *text* completely, then execute it if the scan succeeded."""
    config = config or RunConfig()
    registry = Registry(source_file=config.source_name)
    parsed = scan(text, source_file=config.source_name, on_error=on_error)
    if not parsed.ok:
        return InterpretResult(registry=registry, abort=parsed.abort)
    program = cast(Program, parsed.program)
    report = Interpreter(registry, on_error=on_error).run(program)
    return InterpretResult(registry=registry, program=program, report=report)
