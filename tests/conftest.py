# tests/conftest.py
"""
Shared fixtures and sample programs for the scopelang test-suite.
"""

import textwrap

import pytest

from scopelang.registry import Registry


def src(text: str) -> str:
    """Dedent a triple-quoted program and drop the leading newline."""
    return textwrap.dedent(text).lstrip("\n")


NESTED_PROGRAM = src("""
    // two levels of scopes
    SCOPE outer {
        DECLARE a;
        SCOPE inner {
            DECLARE b;
            ACCESS a;
            ACCESS b;
        }
    }
    ACCESS outer::inner::b;
    ACCESS ::outer::a;
""")

ALIAS_PROGRAM = src("""
    SCOPE lib {
        DECLARE item;
    }
    USING lib;
    SCOPE app {
        ACCESS item;
    }
""")

AMBIGUOUS_PROGRAM = src("""
    SCOPE lib {
        DECLARE item;
    }
    USING lib;
    SCOPE app {
        DECLARE item;
        ACCESS item;
    }
""")


@pytest.fixture
def registry():
    return Registry(source_file="test.scl")


@pytest.fixture
def write_source(tmp_path):
    """Write a program to a temporary file and return its path as str."""
    def _write(text: str, name: str = "program.scl") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write
