"""
test_hover.py - Testes para hover da Query DSL

Propósito:
    Validar documentação de tipos de query, agregações, cláusulas bool e
    propriedades da raiz, incluindo desambiguação por contexto.
"""

from __future__ import annotations

from lsprotocol.types import MarkupKind, Position
from pygls.workspace import PositionCodec

from esdsl_lsp.hover import compute_hover


def _hover_at(source: str, needle: str, delta: int = 1):
    """Helper: hover com o cursor dentro da primeira ocorrência de needle."""
    offset = source.index(needle) + delta
    return compute_hover(source, Position(line=0, character=offset))


class TestQueryHover:

    def test_query_type(self):
        hover = _hover_at('{"query":{"match":{"title":"x"}}}', "match")
        assert hover is not None
        assert hover.contents.kind == MarkupKind.Markdown
        assert "**match** (full_text query)" in hover.contents.value
        assert "```json" in hover.contents.value

    def test_range_covers_word(self):
        source = '{"query":{"match":{"title":"x"}}}'
        hover = _hover_at(source, "match")
        start = source.index("match")
        assert hover.range.start == Position(line=0, character=start)
        assert hover.range.end == Position(line=0, character=start + len("match"))

    def test_range_in_utf16_units(self):
        source = '{"t":"\U0001F600","query":{"match":{}}}'
        hover = compute_hover(source, Position(line=0, character=21), PositionCodec())
        assert "**match**" in hover.contents.value
        assert hover.range.start == Position(line=0, character=20)
        assert hover.range.end == Position(line=0, character=25)

    def test_required_fields_listed(self):
        hover = _hover_at('{"query":{"exists":{"field":"a"}}}', "exists")
        assert "Required: `field`" in hover.contents.value


class TestAggregationHover:

    def test_terms_inside_aggs_is_aggregation(self):
        hover = _hover_at('{"aggs":{"s":{"terms":{"field":"a"}}}}', "terms")
        assert "(bucket aggregation)" in hover.contents.value

    def test_terms_inside_query_is_query(self):
        hover = _hover_at('{"query":{"terms":{"a":[1]}}}', "terms")
        assert "(term_level query)" in hover.contents.value

    def test_metric_aggregation(self):
        hover = _hover_at('{"aggs":{"m":{"avg":{"field":"p"}}}}', "avg")
        assert "(metric aggregation)" in hover.contents.value


class TestPropertyHover:

    def test_bool_clause(self):
        hover = _hover_at('{"query":{"bool":{"filter":[]}}}', "filter")
        assert "(bool clause)" in hover.contents.value

    def test_root_property(self):
        hover = _hover_at('{"size":10}', "size")
        assert "**size** (search body)" in hover.contents.value
        assert "Type: `number`" in hover.contents.value

    def test_root_name_outside_root(self):
        assert _hover_at('{"query":{"match":{"size":"x"}}}', "size") is None


def test_unknown_word():
    assert _hover_at('{"query":{"match":{"title":"x"}}}', "title") is None


def test_no_word():
    assert compute_hover("{  }", Position(line=0, character=2)) is None
