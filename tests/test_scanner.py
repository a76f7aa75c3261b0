"""
test_scanner.py - Testes para a varredura estrutural de JSON incompleto

Propósito:
    Validar scan, current_word, is_in_string e is_after_colon sobre textos
    típicos de edição (incompletos, malformados, com escapes).
"""

from __future__ import annotations

import pytest

from esdsl_lsp.scanner import ParseState, current_word, is_after_colon, is_in_string, scan


def _end(text: str) -> ParseState:
    """Helper: varre até o fim do texto."""
    return scan(text, len(text))


class TestPath:
    """Construção e desempilhamento do path de chaves."""

    def test_empty_text(self):
        state = _end("")
        assert state.path == ()
        assert state.depth == 0
        assert state.in_array is False

    def test_root_object_has_empty_path(self):
        state = _end('{"si')
        assert state.path == ()
        assert state.depth == 1

    def test_nested_keys(self):
        state = _end('{"query":{"bool":{')
        assert state.path == ("query", "bool")
        assert state.depth == 3
        assert state.parent_key == "bool"

    def test_closed_object_pops_key(self):
        state = _end('{"query":{"match_all":{}},')
        assert state.path == ()
        assert state.depth == 1

    def test_array_key_enters_path(self):
        state = _end('{"query":{"bool":{"must":[')
        assert state.path == ("query", "bool", "must")
        assert state.in_array is True
        assert state.array_depths == (3,)

    def test_anonymous_object_in_array_does_not_pop(self):
        state = _end('{"query":{"bool":{"must":[{"match":{"a":"b"}},{')
        assert state.path == ("query", "bool", "must")

    def test_array_close_pops_key(self):
        state = _end('{"sort":["a"],')
        assert state.path == ()
        assert state.in_array is False

    def test_brace_stack(self):
        state = _end('{"must":[{')
        assert state.brace_stack == ("{", "[", "{")


class TestKeys:
    """current_key e expecting_value."""

    def test_key_promoted_on_colon(self):
        state = _end('{"size":')
        assert state.current_key == "size"
        assert state.expecting_value is True

    def test_comma_resets_key(self):
        state = _end('{"size": 10,')
        assert state.current_key is None
        assert state.expecting_value is False

    def test_string_value_is_not_key(self):
        state = _end('{"query":{"match":{"title":"foo"')
        assert state.current_key == "title"
        assert state.path == ("query", "match")

    def test_array_keeps_expecting_value(self):
        state = _end('{"_source":[')
        assert state.expecting_value is True
        assert state.current_key == "_source"

    def test_object_resets_expecting_value(self):
        state = _end('{"query":{')
        assert state.expecting_value is False


class TestStrings:
    """Strings e escapes."""

    def test_open_string(self):
        state = _end('{"que')
        assert state.in_string is True
        assert state.string_start == 1

    def test_closed_string(self):
        state = _end('{"query"')
        assert state.in_string is False
        assert state.string_start == -1

    def test_escaped_quote_does_not_close(self):
        text = '{"a\\"b":'
        state = _end(text)
        assert state.in_string is False
        assert state.current_key == 'a\\"b'

    def test_escaped_backslash_then_quote_closes(self):
        state = _end('{"a\\\\":')
        assert state.current_key == "a\\\\"

    def test_braces_inside_string_ignored(self):
        state = _end('{"query":{"match":{"title":"{[}]",')
        assert state.path == ("query", "match")
        assert state.depth == 3


class TestRobustness:
    """Entrada malformada nunca levanta exceção."""

    @pytest.mark.parametrize("text", [
        "}}]]",
        "]]]{{{",
        ':::,,,"""',
        '{"a":[}',
        "\\\\\\",
        '{"a": "\\',
    ])
    def test_malformed_input_terminates(self, text):
        state = _end(text)
        assert isinstance(state, ParseState)
        assert state.depth >= 0

    def test_stray_closers_ignored(self):
        state = _end("}}]]{{[[")
        assert state.depth == 4
        assert state.brace_stack == ("{", "{", "[", "[")
        assert state.array_depths == (2, 3)

    def test_cursor_clamped(self):
        text = '{"query":{'
        assert scan(text, 999) == scan(text, len(text))
        assert scan(text, -5) == scan(text, 0)


class TestDeterminism:
    """O resultado depende só de text[:cursor_pos]."""

    def test_same_input_same_state(self):
        text = '{"aggs":{"x":{"terms":{"field":"'
        assert scan(text, len(text)) == scan(text, len(text))

    def test_suffix_does_not_matter(self):
        prefix = '{"query":{"bool":{"must":[{"ma'
        pos = len(prefix)
        assert scan(prefix + 'tch":{}}]}}}', pos) == scan(prefix, pos)
        assert scan(prefix + "garbage }}]]", pos) == scan(prefix, pos)


class TestCurrentWord:

    def test_word_after_quote(self):
        assert current_word('{"query":{"mat', 14) == "mat"

    def test_word_without_quote(self):
        assert current_word("{si", 3) == "si"

    def test_empty_after_delimiter(self):
        for text in ['{"', "{", '{"a":', '{"a",', "[", "{ "]:
            assert current_word(text, len(text)) == ""

    def test_dotted_field_name(self):
        text = '{"field":"user.na'
        assert current_word(text, len(text)) == "user.na"


class TestIsInString:

    def test_open_string(self):
        assert is_in_string('{"que', 5) is True

    def test_closed_string(self):
        assert is_in_string('{"query"', 8) is False

    def test_escaped_quote(self):
        text = '{"a\\"b'
        assert is_in_string(text, len(text)) is True


class TestIsAfterColon:

    def test_after_colon(self):
        assert is_after_colon('{"size":', 8) is True

    def test_after_colon_with_space_and_quote(self):
        text = '{"field": "'
        assert is_after_colon(text, len(text)) is True

    def test_value_started(self):
        text = '{"size": 1'
        assert is_after_colon(text, len(text)) is False

    def test_after_comma(self):
        text = '{"size": 1, '
        assert is_after_colon(text, len(text)) is False

    def test_after_open_brace(self):
        assert is_after_colon("{", 1) is False
