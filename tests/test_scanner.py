# tests/test_scanner.py
"""
Tests for the scopelang scanner: source text → directive nodes.
"""

import pytest

from scopelang.errors import (
    ArgumentCountError,
    MisplacedCommentError,
    ParseAbort,
    SemanticError,
    SyntaxError,
    UnbalancedScopeError,
    UnexpectedCharacterError,
    UnexpectedTerminatorError,
    UnfinishedDirectiveError,
    UnknownDirectiveError,
)
from scopelang.nodes import (
    AliasSet,
    Declaration,
    DirectiveKind,
    Position,
    Reference,
    ScopeOpener,
)
from scopelang.scanner import Scanner, keywords, scan
from tests.conftest import NESTED_PROGRAM


def _program(text):
    result = scan(text)
    assert result.ok, result.abort
    return result.program


def _abort(text):
    result = scan(text)
    assert not result.ok
    assert result.program is None
    assert isinstance(result.abort, ParseAbort)
    return result.abort.error


class TestScanEmpty:

    def test_empty_string(self):
        assert len(_program("")) == 0

    def test_whitespace_only(self):
        assert len(_program("   \n\n\t  ")) == 0

    def test_comment_only(self):
        assert len(_program("// just a comment\n// another one")) == 0

    def test_keywords_are_exactly_four(self):
        assert set(keywords()) == {"USING", "SCOPE", "DECLARE", "ACCESS"}


class TestDeclare:

    def test_root_declaration(self):
        (node,) = _program("DECLARE x;")
        assert isinstance(node, Declaration)
        assert node.name == "x"
        assert node.path == "::x"
        assert node.kind is DirectiveKind.DECLARE

    def test_declaration_inside_scope(self):
        program = _program("SCOPE a { DECLARE b; }")
        assert program[1].path == "::a::b"

    def test_spaces_collapse(self):
        (node,) = _program("DECLARE \t  x    ;")
        assert node.name == "x"

    def test_no_space_before_terminator(self):
        (node,) = _program("DECLARE x;")
        assert node.path == "::x"

    def test_position_is_keyword_start(self):
        (node,) = _program("\n\n   DECLARE x;")
        assert node.position == Position(3, 4)


class TestScope:

    def test_scope_path_is_the_scope_itself(self):
        (node,) = _program("SCOPE a {}")
        assert isinstance(node, ScopeOpener)
        assert node.name == "a"
        assert node.path == "::a"

    def test_nested_scope_uses_innermost_prefix(self):
        program = _program("SCOPE a { SCOPE b { DECLARE c; } }")
        assert [n.path for n in program] == ["::a", "::a::b", "::a::b::c"]

    def test_scope_close_pops_one_level(self):
        program = _program("SCOPE a { SCOPE b { } DECLARE c; } DECLARE d;")
        assert program[2].path == "::a::c"
        assert program[3].path == "::d"

    def test_scope_without_space_before_brace(self):
        (node,) = _program("SCOPE a{}")
        assert node.path == "::a"

    def test_depth_tracking(self):
        scanner = Scanner()
        scanner.feed("SCOPE a { SCOPE b {")
        assert scanner.depth == 2
        scanner.feed("} }")
        assert scanner.depth == 0
        scanner.finish()


class TestUsingAndAccess:

    def test_using_emits_alias_node(self):
        (node,) = _program("USING lib;")
        assert isinstance(node, AliasSet)
        assert node.alias == "lib"

    def test_access_candidates_outer_to_inner(self):
        program = _program("SCOPE a { SCOPE b { ACCESS x; } }")
        ref = program[2]
        assert isinstance(ref, Reference)
        assert ref.direct == ("::x", "::a::x", "::a::b::x")
        assert ref.aliased == ()

    def test_access_with_alias(self):
        program = _program("USING q; SCOPE a { ACCESS x; }")
        ref = program[2]
        assert ref.direct == ("::x", "::a::x")
        assert ref.aliased == ("::q::x", "::a::q::x")

    def test_absolute_access_has_single_candidate(self):
        program = _program("USING q; SCOPE a { ACCESS ::b::c; }")
        ref = program[2]
        assert ref.is_absolute
        assert ref.direct == ("::b::c",)
        assert ref.aliased == ()

    def test_qualified_relative_access(self):
        (ref,) = _program("ACCESS a::b;")
        assert ref.direct == ("::a::b",)

    def test_new_alias_replaces_previous(self):
        program = _program("USING p; USING q; ACCESS x;")
        assert program[2].aliased == ("::q::x",)

    def test_alias_survives_scope_exit(self):
        program = _program("SCOPE a { USING q; } ACCESS x;")
        assert program[2].aliased == ("::q::x",)

    def test_scanner_exposes_current_alias(self):
        scanner = Scanner()
        scanner.feed("USING first; SCOPE s { USING second; }")
        assert scanner.alias == "second"


class TestComments:

    def test_comment_before_directive(self):
        (node,) = _program("// DECLARE hidden;\nDECLARE shown;")
        assert node.name == "shown"
        assert node.position.line == 2

    def test_trailing_comment(self):
        assert len(_program("DECLARE x; // note\nDECLARE y;")) == 2

    def test_extra_slashes_inside_comment(self):
        assert len(_program("DECLARE x; /// three\n")) == 1

    def test_comment_hides_structural_characters(self):
        assert len(_program("// } { ; / \x07\nDECLARE x;")) == 1


class TestLineEndings:

    def test_crlf_is_one_line(self):
        program = _program("DECLARE x;\r\nDECLARE y;")
        assert program[1].position == Position(2, 1)

    def test_lone_cr_ends_a_line(self):
        program = _program("DECLARE x;\rDECLARE y;")
        assert program[1].position.line == 2

    def test_incremental_feed(self):
        scanner = Scanner()
        scanner.feed("DECL")
        scanner.feed("ARE x")
        scanner.feed(";")
        (node,) = scanner.finish()
        assert node.path == "::x"


class TestStructuralErrors:

    def test_extra_scope_close(self):
        error = _abort("DECLARE x;\n}")
        assert isinstance(error, UnbalancedScopeError)
        assert (error.span.line, error.span.column) == (2, 1)

    def test_unclosed_scope(self):
        error = _abort("SCOPE a {\nDECLARE b;\n")
        assert isinstance(error, UnbalancedScopeError)
        assert '"::a"' in error.reason

    def test_newline_inside_directive(self):
        error = _abort("DECLARE x\n;")
        assert isinstance(error, UnfinishedDirectiveError)
        assert (error.span.line, error.span.column) == (1, 10)

    def test_newline_after_keyword(self):
        assert isinstance(_abort("SCOPE\na {}"), UnfinishedDirectiveError)

    def test_comment_inside_directive(self):
        assert isinstance(_abort("DECLARE x // no\n"), MisplacedCommentError)

    def test_single_slash(self):
        error = _abort("DECLARE x; / y")
        assert isinstance(error, UnexpectedCharacterError)
        assert error.character == " "

    def test_single_slash_at_end_of_line(self):
        assert isinstance(_abort("DECLARE x; /\n/ y"), UnexpectedCharacterError)

    def test_single_slash_at_end_of_input(self):
        assert isinstance(_abort("DECLARE x; /"), UnexpectedCharacterError)

    def test_control_character(self):
        error = _abort("DECLARE x\x00;")
        assert isinstance(error, UnexpectedCharacterError)
        assert "U+0000" in error.reason

    def test_too_many_arguments(self):
        error = _abort("DECLARE a b;")
        assert isinstance(error, ArgumentCountError)
        assert error.got == 2

    def test_missing_argument(self):
        error = _abort("DECLARE;")
        assert isinstance(error, ArgumentCountError)
        assert error.got == 0

    def test_scope_needs_brace(self):
        error = _abort("SCOPE a;")
        assert isinstance(error, UnexpectedTerminatorError)
        assert error.expected == "{"

    @pytest.mark.parametrize("keyword", ["DECLARE", "USING", "ACCESS"])
    def test_other_keywords_need_semicolon(self, keyword):
        error = _abort(f"{keyword} a {{}}")
        assert isinstance(error, UnexpectedTerminatorError)
        assert error.expected == ";"

    def test_unfinished_at_end_of_input(self):
        assert isinstance(_abort("DECLARE x"), UnfinishedDirectiveError)

    def test_scope_close_inside_directive(self):
        assert isinstance(_abort("SCOPE a { DECLARE x }"), UnfinishedDirectiveError)

    def test_structural_errors_are_syntax_class(self):
        assert isinstance(_abort("}"), SyntaxError)

    def test_first_error_stops_the_scan(self):
        seen = []
        result = scan("}\n}\n}", on_error=seen.append)
        assert not result.ok
        assert len(seen) == 1


class TestUnknownDirective:

    def test_unknown_keyword_aborts_parse(self):
        error = _abort("DECLARE a;\nFOO b;")
        assert isinstance(error, UnknownDirectiveError)
        assert isinstance(error, SemanticError)
        assert error.symbol == "FOO"

    def test_keywords_are_case_sensitive(self):
        assert isinstance(_abort("declare x;"), UnknownDirectiveError)

    def test_stray_semicolon(self):
        error = _abort("DECLARE x;;")
        assert isinstance(error, UnknownDirectiveError)
        assert error.symbol == ""


class TestLargerPrograms:

    def test_nested_program_kinds(self):
        program = _program(NESTED_PROGRAM)
        kinds = [n.kind.value for n in program]
        assert kinds == [
            "SCOPE", "DECLARE", "SCOPE", "DECLARE", "ACCESS", "ACCESS",
            "ACCESS", "ACCESS",
        ]

    def test_nested_program_positions(self):
        program = _program(NESTED_PROGRAM)
        assert program[0].position == Position(2, 1)
        assert program[-1].position == Position(11, 1)

    def test_names_are_not_validated_while_scanning(self):
        (node,) = _program("DECLARE a_b;")
        assert node.path == "::a_b"
