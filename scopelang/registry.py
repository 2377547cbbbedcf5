"""
Name/symbol registry.

Owns the mapping from qualified path to registered entity and the buffer of
ACCESS log lines.  Entities refer back to their directive by index into the
:class:`~scopelang.nodes.Program` arena; the registry never holds nodes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Pattern, TextIO, Union

from scopelang.errors import InvalidNameError, SourceSpan
from scopelang.nodes import Position

logger = logging.getLogger(__name__)

Sink = Union[TextIO, Callable[[str], None]]


@dataclass(frozen=True, slots=True)
class Entity:
    """A registered, addressable declaration or scope.

    ``name`` is the fully qualified path; ``node`` the index of the owning
    directive in the program being executed.
    """

    name: str
    node: int


class Registry:
    """Entities keyed by qualified path, plus the deferred log buffer."""

    # A letter followed by letters or digits, either case.
    NAME_RULE: Pattern[str] = re.compile(r"[a-z][a-z0-9]*", re.IGNORECASE | re.ASCII)

    def __init__(self, source_file: str = "") -> None:
        self.source_file = source_file
        self._entities: Dict[str, Entity] = {}
        self._output: List[str] = []

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def is_valid_name(self, name: str) -> bool:
        return self.NAME_RULE.fullmatch(name) is not None

    def register(
        self,
        short_name: str,
        path: str,
        node: int,
        position: Optional[Position] = None,
    ) -> bool:
        """Register *path* for the directive at index *node*.

        Raises :class:`InvalidNameError` when *short_name* breaks the name
        rule.  Returns ``False`` without touching any state when *path* is
        already registered.
        """
        if not self.is_valid_name(short_name):
            raise InvalidNameError(
                short_name, span=SourceSpan.from_position(position, self.source_file)
            )
        if path in self._entities:
            logger.debug("Duplicate registration of %s", path)
            return False
        self._entities[path] = Entity(name=path, node=node)
        logger.debug("Registered %s (directive #%d)", path, node)
        return True

    def lookup(self, path: str) -> Optional[Entity]:
        return self._entities.get(path)

    def entities(self) -> Iterator[Entity]:
        """Registered entities in registration order."""
        return iter(list(self._entities.values()))

    def __contains__(self, path: object) -> bool:
        return path in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    # ------------------------------------------------------------------
    # Log buffer
    # ------------------------------------------------------------------

    def log(self, line: str) -> None:
        self._output.append(line)

    def pending(self) -> int:
        return len(self._output)

    def drain(self, sink: Sink) -> int:
        """Write every buffered line to *sink* in order, then empty the buffer.

        *sink* is either a text stream (one line per write, newline added)
        or a callable taking the line.  Returns the number of lines written.
        """
        lines, self._output = self._output, []
        if callable(sink):
            for line in lines:
                sink(line)
        else:
            for line in lines:
                sink.write(line + "\n")
        return len(lines)
