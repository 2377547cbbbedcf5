"""Run configuration for the scopelang interpreter."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import List


@dataclass
class RunConfig:
    """Tuning knobs for a single interpreter run."""

    debug: bool = False
    encoding: str = "utf-8"
    source_name: str = "<input>"
    reject_empty: bool = True

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty if valid)."""
        problems: List[str] = []
        if not self.encoding:
            problems.append("encoding must not be empty")
        else:
            try:
                codecs.lookup(self.encoding)
            except LookupError:
                problems.append(f"unknown encoding: {self.encoding}")
        if not self.source_name:
            problems.append("source_name must not be empty")
        return problems
