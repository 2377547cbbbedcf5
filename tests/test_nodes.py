# tests/test_nodes.py
"""
Tests for directive nodes and the Program arena.
"""

import dataclasses

import pytest
from sexpdata import Symbol, loads

from scopelang.nodes import (
    AliasSet,
    Declaration,
    DirectiveKind,
    Position,
    Program,
    Reference,
    ScopeOpener,
    directive_to_dict,
    directive_to_sexp,
)
from scopelang.scanner import scan


@pytest.fixture
def program():
    return scan("USING lib;\nSCOPE a {\n  DECLARE b;\n  ACCESS b;\n}").program


class TestNodes:

    def test_nodes_are_frozen(self):
        node = Declaration("x", "::x", Position(1, 1))
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.name = "y"

    def test_kinds(self):
        pos = Position()
        assert ScopeOpener("a", "::a", pos).kind is DirectiveKind.SCOPE
        assert Declaration("a", "::a", pos).kind is DirectiveKind.DECLARE
        assert AliasSet("a", pos).kind is DirectiveKind.USING
        assert Reference("a", ("::a",), (), pos).kind is DirectiveKind.ACCESS

    def test_position_str(self):
        assert str(Position(3, 9)) == "3:9"

    def test_relative_reference_is_not_absolute(self):
        assert not Reference("a::b", ("::a::b",), (), Position()).is_absolute


class TestProgram:

    def test_sequence_protocol(self, program):
        assert len(program) == 4
        assert isinstance(program[0], AliasSet)
        assert [n.kind for n in program][-1] is DirectiveKind.ACCESS

    def test_of_kind(self, program):
        (decl,) = program.of_kind(DirectiveKind.DECLARE)
        assert decl.path == "::a::b"

    def test_equality(self, program):
        again = scan("USING lib;\nSCOPE a {\n  DECLARE b;\n  ACCESS b;\n}").program
        assert program == again
        assert hash(program) == hash(again)
        assert program != Program()

    def test_sexp_dump_reads_back(self, program):
        data = loads(program.to_sexp())
        assert data[0] == Symbol("program")
        assert data[1] == [Symbol("using"), "lib", [Symbol("at"), 1, 1]]
        assert data[2] == [Symbol("scope"), "a", "::a", [Symbol("at"), 2, 1]]
        assert data[3] == [Symbol("declare"), "b", "::a::b", [Symbol("at"), 3, 3]]

    def test_sexp_access_candidates(self, program):
        access = directive_to_sexp(program[3])
        assert access[0] == Symbol("access")
        assert access[2] == [Symbol("direct"), "::b", "::a::b"]
        assert access[3] == [Symbol("aliased"), "::lib::b", "::a::lib::b"]

    def test_sexp_rejects_non_nodes(self):
        with pytest.raises(TypeError):
            directive_to_sexp("DECLARE x;")

    def test_dict_dump(self, program):
        dumped = program.to_dict()["directives"]
        assert dumped[0] == {"kind": "USING", "line": 1, "column": 1, "alias": "lib"}
        assert dumped[2] == {
            "kind": "DECLARE", "line": 3, "column": 3, "name": "b", "path": "::a::b",
        }
        assert directive_to_dict(program[3])["aliased"] == ["::lib::b", "::a::lib::b"]
