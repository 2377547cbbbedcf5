"""scopelang — a tiny scoped-declaration language and its interpreter.

A scopelang program declares entities inside nested named scopes, sets an
alias with ``USING`` and refers to entities with ``ACCESS``; every
successful access produces one log line.

Submodules
----------
scanner
    Character-level state machine turning source text into a
    ``Program`` of directive nodes (or a ``ParseAbort``).

nodes
    ``Position``, the four directive node types and the ``Program`` arena,
    with S-expression and JSON dumps.

registry
    ``Registry``: qualified path → entity, name validation, log buffer.

runtime
    ``execute`` / ``respond_to_access`` dispatch, ``Interpreter`` and the
    two-phase ``interpret()`` pipeline.

errors
    Error codes (``SCPL-XXXX``), ``SourceSpan``, the syntax/semantic
    exception hierarchy, ``ParseAbort`` / ``DirectiveFailure`` results and
    ``ErrorReporter``.

grammar
    Parsimonious PEG grammar of the language and an outline builder.

config
    ``RunConfig`` run options.

main
    CLI entry-point with subcommands: ``run``, ``parse``, ``check``.

Usage
-----
Command-line::

    python -m scopelang run program.scl --debug
    python -m scopelang parse program.scl --format json
    python -m scopelang check program.scl --outline

Programmatic::

    from scopelang.runtime import interpret

    result = interpret("SCOPE a { DECLARE b; } ACCESS a::b;")
    result.registry.drain(print)        # LINE 1 ACCESS ::a::b

"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "config",
    "errors",
    "grammar",
    "nodes",
    "registry",
    "runtime",
    "scanner",
]
