#!/usr/bin/env python3
"""scopelang/main.py — CLI entry-point for the scopelang interpreter.

Usage examples
--------------
    # Run a program; errors show their short tag only
    python -m scopelang run program.scl

    # Run with detailed "<reason> at <line>:<column>" error messages
    python -m scopelang run program.scl --debug

    # Scan a program and dump its directives (debugging aid)
    python -m scopelang parse program.scl --format sexp

    # Validate a program against the language grammar
    python -m scopelang check program.scl --outline

    # Show version and exit
    python -m scopelang --version

Exit codes
----------
    0   Success.  ``run`` also exits 0 when single directives failed.
    1   The program did not parse, or it contains no directives.
    2   Infrastructure failure (unreadable file, bad options, crash).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO, cast

from scopelang import __version__
from scopelang.config import RunConfig
from scopelang.errors import ErrorPhase, ErrorReporter, ScopelangError
from scopelang.grammar import check, format_outline
from scopelang.nodes import Program
from scopelang.runtime import interpret
from scopelang.scanner import scan

_log = logging.getLogger("scopelang")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the root ``scopelang`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("scopelang")
    root.setLevel(level)
    root.handlers[:] = [handler]


def _read_source(raw: str, encoding: str = "utf-8") -> Optional[str]:
    """Return the text of *raw*, or ``None`` after reporting why it failed."""
    path = Path(raw).expanduser()
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        sys.stdout.write(f'Failed to open source file "{raw}".\n')
        _log.debug("Reading %s failed: %s", path, exc)
        return None


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


# ===========================================================================
# Subcommands
# ===========================================================================

# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------

def cmd_run(args: argparse.Namespace) -> int:
    """Scan and execute a program, then print its access log."""
    config = RunConfig(
        debug=args.debug,
        encoding=args.encoding,
        source_name=args.source_file,
    )
    problems = config.validate()
    if problems:
        for problem in problems:
            _log.error("Invalid configuration: %s", problem)
        return EXIT_INFRA

    source = _read_source(args.source_file, config.encoding)
    if source is None:
        return EXIT_INFRA

    out = sys.stdout

    def _print_error(exc: ScopelangError) -> None:
        out.write(exc.render(config.debug) + "\n")

    reporter = ErrorReporter(config.source_name, callback=_print_error)
    result = interpret(source, config, on_error=reporter.report)
    if reporter.has_errors():
        _log.debug("Reported errors: %s", json.dumps(reporter.to_json()))
    if not result.parsed:
        _log.info("Parsing %s failed; nothing executed.", args.source_file)
        return EXIT_ERROR
    if config.reject_empty and not result.program:
        _log.warning("No directives found in %s", args.source_file)
        return EXIT_ERROR

    written = result.registry.drain(out)
    _log.info(
        "Run finished: %d directive(s), %d failed (%d semantic), %d log line(s).",
        len(result.program or ()),
        len(result.failures),
        reporter.count_by_phase(ErrorPhase.SEMANTIC),
        written,
    )
    return EXIT_OK


# ---------------------------------------------------------------------------
# parse (debugging / directive dump)
# ---------------------------------------------------------------------------

def cmd_parse(args: argparse.Namespace) -> int:
    """Scan a source file and print its directive sequence.

    Useful for debugging name qualification without running anything.
    """
    source = _read_source(args.source_file, args.encoding)
    if source is None:
        return EXIT_INFRA

    parsed = scan(source, source_file=args.source_file)
    if parsed.abort is not None:
        sys.stderr.write(parsed.abort.error.to_gcc_format() + "\n")
        return EXIT_ERROR
    program = cast(Program, parsed.program)

    out = _open_output(args.output)
    try:
        if args.format == "sexp":
            out.write(program.to_sexp() + "\n")
        elif args.format == "json":
            out.write(json.dumps(program.to_dict(), indent=2) + "\n")
        else:
            for node in program:
                out.write(repr(node) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ---------------------------------------------------------------------------
# check (grammar validation)
# ---------------------------------------------------------------------------

def cmd_check(args: argparse.Namespace) -> int:
    """Validate a source file against the PEG grammar."""
    source = _read_source(args.source_file, args.encoding)
    if source is None:
        return EXIT_INFRA

    result = check(source)
    if not result.ok:
        sys.stdout.write(f"GRAMMAR ERROR at {result.line}:{result.column}\n")
        _log.info("%s", result.message)
        return EXIT_ERROR

    if args.outline:
        for line in format_outline(result.outline):
            sys.stdout.write(line + "\n")
    sys.stdout.write(f"OK: {result.count()} directive(s)\n")
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    # --- Top-level parser --------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="scopelang",
        description=(
            "scopelang — interpreter for a tiny language of nested scopes,\n"
            "declarations, aliases and accesses."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              scopelang run   program.scl --debug
              scopelang parse program.scl -f json
              scopelang check program.scl --outline
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- run ---------------------------------------------------------------
    p_run = subparsers.add_parser(
        "run",
        help="Scan and execute a program.",
        description=(
            "Scan the whole file, then execute its directives in order. "
            "Errors are printed as they happen; the access log is printed "
            "at the end."
        ),
    )
    p_run.add_argument(
        "source_file",
        metavar="SOURCE",
        help="Path to the program file.",
    )
    p_run.add_argument(
        "--debug",
        action="store_true",
        help='Print "<reason> at <line>:<column>" after each error tag.',
    )
    p_run.add_argument(
        "--encoding",
        default="utf-8",
        metavar="ENC",
        help="Source file encoding (default: utf-8).",
    )
    p_run.set_defaults(func=cmd_run)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Scan a program and dump its directives.",
        description=(
            "Scan a source file and print the directive sequence with "
            "qualified paths and candidate lists. Nothing is executed."
        ),
    )
    p_parse.add_argument(
        "source_file",
        metavar="SOURCE",
        help="Path to the program file.",
    )
    p_parse.add_argument(
        "--encoding",
        default="utf-8",
        metavar="ENC",
        help="Source file encoding (default: utf-8).",
    )
    p_parse.add_argument(
        "-f", "--format",
        choices=["sexp", "json", "repr"],
        default="sexp",
        help="Output format (default: sexp).",
    )
    p_parse.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_parse.set_defaults(func=cmd_parse)

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Validate a program against the language grammar.",
        description="Match the file against the PEG grammar of the language.",
    )
    p_check.add_argument(
        "source_file",
        metavar="SOURCE",
        help="Path to the program file.",
    )
    p_check.add_argument(
        "--encoding",
        default="utf-8",
        metavar="ENC",
        help="Source file encoding (default: utf-8).",
    )
    p_check.add_argument(
        "--outline",
        action="store_true",
        help="Print the nested directive outline.",
    )
    p_check.set_defaults(func=cmd_check)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the scopelang CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130  # Standard UNIX convention for SIGINT
    except Exception as exc:
        sys.stdout.write(f'Fatal error: "{exc}".\n')
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


# ---------------------------------------------------------------------------
# Module execution support
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
