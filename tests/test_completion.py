"""
test_completion.py - Testes para o provider de completion da Query DSL

Propósito:
    Validar seleção de candidatos por contexto, filtragem por prefixo,
    ranking por boost, supressão de resultado vazio e a adaptação para
    CompletionList do LSP.
"""

from __future__ import annotations

from lsprotocol.types import CompletionItemKind, InsertTextFormat, Position
from pygls.workspace import PositionCodec

from esdsl_lsp.completion import (
    FIELD_RESULT_LIMIT,
    Boost,
    CompletionKind,
    _HANDLERS,
    compute_completions,
    provide,
)
from esdsl_lsp.context import ESContextType
from esdsl_lsp.fields import field_data_from_payload


def _fields(*entries, index="idx"):
    """Helper: FieldData com campos (nome, tipo) em um índice."""
    return field_data_from_payload({
        "fields": {index: [{"name": name, "type": type_} for name, type_ in entries]},
    })


def _provide(text: str, **kwargs):
    """Helper: completion no fim do texto."""
    return provide(text, len(text), **kwargs)


def test_handlers_cover_every_context():
    assert set(_HANDLERS) == set(ESContextType)


class TestRoot:
    """Propriedades da raiz e snippets."""

    def test_prefix_si(self):
        result = _provide("{si")
        assert result is not None
        assert "size" in result.labels
        assert "sort" not in result.labels

    def test_prefix_case_insensitive(self):
        result = _provide("{SI")
        assert "size" in result.labels

    def test_all_properties_without_prefix(self):
        result = _provide("{")
        assert result.labels[0] == "query"
        assert "aggs" in result.labels
        # Snippets só aparecem com prefixo ou pedido explícito
        assert "search-basic" not in result.labels

    def test_snippets_on_explicit(self):
        result = _provide("{", explicit=True)
        assert "search-basic" in result.labels
        snippet = next(o for o in result.options if o.label == "search-basic")
        assert snippet.kind is CompletionKind.SNIPPET
        assert "${1:field}" in snippet.template
        assert "${" not in snippet.apply

    def test_snippets_with_prefix(self):
        result = _provide("{se")
        assert "search-basic" in result.labels
        assert "search_after" in result.labels
        # Propriedade (boost 90) antes de snippet (boost 75)
        assert result.labels.index("search_after") < result.labels.index("search-basic")

    def test_property_apply_inserts_key(self):
        result = _provide("{si")
        size = next(o for o in result.options if o.label == "size")
        assert size.apply == '"size": '
        assert size.boost == Boost.PROPERTY

    def test_from_offset(self):
        text = '{"query":{},"si'
        result = provide(text, len(text), explicit=True)
        assert result.from_ == len(text) - 2


class TestQuery:
    """Tipos de query e opções de cláusula."""

    def test_query_types(self):
        result = _provide('{"query":{')
        assert result.labels[0] == "match"
        assert "bool" in result.labels
        assert all(o.kind is CompletionKind.QUERY_TYPE for o in result.options)

    def test_query_prefix(self):
        result = _provide('{"query":{mat')
        assert set(result.labels) >= {"match", "match_phrase", "match_all"}
        assert "multi_match" not in result.labels

    def test_clause_options_inside_query(self):
        result = _provide('{"query":{"match":{"title":{')
        assert "operator" in result.labels
        assert "fuzziness" in result.labels
        # Tipos de query continuam primeiro (boost maior)
        assert result.options[0].kind is CompletionKind.QUERY_TYPE

    def test_bool_clause_offers_query_types(self):
        result = _provide('{"query":{"bool":{"must":[')
        assert "match" in result.labels
        assert "term" in result.labels

    def test_clause_options_under_bool_clause(self):
        result = _provide('{"query":{"bool":{"must":[{"range":{"date":{')
        assert "gte" in result.labels
        assert "lt" in result.labels
        # Tipos de query continuam disponíveis e primeiro
        assert "match" in result.labels
        assert result.options[0].kind is CompletionKind.QUERY_TYPE

    def test_no_clause_options_after_colon_in_bool_clause(self):
        result = _provide('{"query":{"bool":{"must":{"range":{"date":')
        assert result is None or "gte" not in result.labels

    def test_bool_keywords(self):
        result = _provide('{"query":{"bool":{')
        assert result.labels[:4] == ["must", "filter", "should", "must_not"]
        assert all(o.kind is CompletionKind.KEYWORD for o in result.options)
        assert all(o.boost == Boost.KEYWORD for o in result.options)

    def test_field_after_field_key(self):
        data = _fields(("status", "keyword"))
        result = _provide('{"query":{"exists":{"field":', field_data=data)
        assert result.labels == ["status"]


class TestAggregations:

    def test_aggs_offers_agg_types(self):
        result = _provide('{"aggs":{"by_status":{')
        assert "terms" in result.labels
        assert "avg" in result.labels
        assert "aggs" in result.labels
        terms = next(o for o in result.options if o.label == "terms")
        assert terms.kind is CompletionKind.AGG_TYPE
        assert terms.detail == "bucket aggregation"

    def test_agg_options_prefer_aggregation(self):
        result = _provide('{"aggs":{"prices":{"range":{')
        assert "ranges" in result.labels
        assert "gte" not in result.labels

    def test_end_to_end_field(self):
        data = _fields(("status", "keyword"))
        text = '{"aggs":{"by_status":{"terms":{"field":"'
        result = provide(text, len(text), data, explicit=True)
        assert result is not None
        status = next(o for o in result.options if o.label == "status")
        assert status.apply == '"status"'
        assert status.kind is CompletionKind.FIELD
        assert result.from_ == len(text)


class TestOtherContexts:
    """highlight, _source, suggest e posições fora dos caminhos conhecidos."""

    def test_highlight_options(self):
        result = _provide('{"highlight":{')
        assert result.labels == ["fields", "pre_tags", "post_tags", "require_field_match", "type"]
        assert all(o.kind is CompletionKind.PROPERTY for o in result.options)

    def test_source_options(self):
        result = _provide('{"_source":{')
        assert result.labels == ["includes", "excludes"]

    def test_suggest_options(self):
        result = _provide('{"suggest":{')
        assert result.labels == ["text", "term", "phrase", "completion"]

    def test_suggest_prefix(self):
        result = _provide('{"suggest":{te')
        assert result.labels == ["text", "term"]

    def test_unknown_inside_aggregation_body(self):
        """Agregação fora de "aggs" ainda oferece suas opções."""
        result = _provide('{"foo":{"avg":{')
        assert result.labels == ["field", "missing", "script"]

    def test_unknown_after_colon_offers_fields(self):
        data = _fields(("status", "keyword"), ("title", "text"))
        result = _provide('{"foo":{"bar":', field_data=data)
        assert result.labels == ["status", "title", "title.keyword"]
        assert all(o.kind is CompletionKind.FIELD for o in result.options)

    def test_unknown_container_offers_query_types(self):
        result = _provide('{"post_filter":{')
        assert "match" in result.labels
        assert "bool" in result.labels
        assert all(o.kind is CompletionKind.QUERY_TYPE for o in result.options)


class TestFields:
    """Campos do snapshot."""

    def test_keyword_sibling_ranked_below(self):
        data = _fields(("title", "text"))
        result = _provide('{"aggs":{"t":{"terms":{"field":', field_data=data)
        assert result.labels == ["title", "title.keyword"]
        title, keyword = result.options
        assert keyword.boost == title.boost - 1
        assert keyword.detail == "keyword"

    def test_substring_filter(self):
        data = _fields(("user_name", "keyword"), ("status", "keyword"), ("username", "text"))
        result = _provide('{"query":{"exists":{"field":name', field_data=data)
        assert "user_name" in result.labels
        assert "username" in result.labels
        assert "status" not in result.labels

    def test_limit_without_prefix(self):
        data = _fields(*[(f"f{i:02d}", "keyword") for i in range(40)])
        result = _provide('{"query":{"exists":{"field":', field_data=data)
        assert len(result.options) == FIELD_RESULT_LIMIT

    def test_no_limit_with_prefix(self):
        data = _fields(*[(f"f{i:02d}", "keyword") for i in range(40)])
        result = _provide('{"query":{"exists":{"field":f', field_data=data)
        assert len(result.options) == 40

    def test_nested_paths(self):
        data = field_data_from_payload({
            "fields": {"idx": [{"name": "user", "type": "object",
                                "properties": [{"name": "id", "type": "keyword"}]}]},
        })
        result = _provide('{"_source":[', field_data=data)
        assert result.labels == ["user", "user.id"]

    def test_duplicates_across_indices(self):
        data = field_data_from_payload({
            "fields": {
                "a": [{"name": "status", "type": "keyword"}],
                "b": [{"name": "status", "type": "keyword"}],
            },
        })
        result = _provide('{"query":{"exists":{"field":', field_data=data)
        assert result.labels == ["status"]


class TestSortAndValues:

    def test_sort_order_values(self):
        result = _provide('{"sort":[{"date":{"order":')
        assert result.labels == ["asc", "desc"]
        assert all(o.kind is CompletionKind.VALUE for o in result.options)

    def test_sort_direction_shorthand(self):
        result = _provide('{"sort":[{"date":')
        assert result.labels == ["asc", "desc"]

    def test_sort_array_offers_fields(self):
        data = _fields(("date", "date"))
        result = _provide('{"sort":[', field_data=data)
        assert result.labels == ["date"]

    def test_operator_values_prefix(self):
        result = _provide('{"query":{"match":{"title":{"operator":a')
        assert result.labels == ["and", "AND"]

    def test_value_apply_quoted(self):
        result = _provide('{"sort":[{"date":{"order":')
        assert result.options[0].apply == '"asc"'


class TestSuppression:
    """Quando o provider devolve None."""

    def test_empty_result_is_none(self):
        assert _provide('{"highlight":{"pre_tags":') is None

    def test_empty_result_explicit(self):
        result = _provide('{"highlight":{"pre_tags":', explicit=True)
        assert result is not None
        assert result.options == ()

    def test_inside_string_is_none(self):
        assert _provide('{"query":{"match":{"title":"some te') is None

    def test_inside_string_explicit(self):
        result = _provide('{"si', explicit=True)
        assert result is not None
        assert "size" in result.labels
        assert result.from_ == 2

    def test_no_fields_no_result(self):
        assert _provide('{"query":{"exists":{"field":') is None


class TestOrdering:

    def test_stable_sort_by_boost(self):
        result = _provide('{"query":{"match":{"title":{', explicit=True)
        boosts = [o.boost for o in result.options]
        assert boosts == sorted(boosts, reverse=True)

    def test_deterministic(self):
        text = '{"aggs":{"x":{'
        assert _provide(text) == _provide(text)


class TestComputeCompletions:
    """Adaptação para lsprotocol."""

    def test_completion_list(self):
        source = '{\n  "query": {\n    mat'
        result = compute_completions(source, Position(line=2, character=7))
        assert result is not None
        assert result.is_incomplete is False

        match = next(item for item in result.items if item.label == "match")
        assert match.kind == CompletionItemKind.Keyword
        assert match.insert_text_format == InsertTextFormat.PlainText
        assert match.text_edit.new_text == '"match": '
        assert match.text_edit.range.start == Position(line=2, character=4)
        assert match.text_edit.range.end == Position(line=2, character=7)

    def test_sort_text_preserves_ranking(self):
        source = '{"query":{"match":{"title":{'
        result = compute_completions(source, Position(line=0, character=len(source)))
        sort_texts = [item.sort_text for item in result.items]
        assert sort_texts == sorted(sort_texts)

    def test_snippet_format(self):
        result = compute_completions("{se", Position(line=0, character=3))
        snippet = next(item for item in result.items if item.label == "search-basic")
        assert snippet.kind == CompletionItemKind.Snippet
        assert snippet.insert_text_format == InsertTextFormat.Snippet
        assert "${1:field}" in snippet.text_edit.new_text

    def test_none_passthrough(self):
        source = '{"query":{"match":{"title":"abc'
        assert compute_completions(source, Position(line=0, character=len(source))) is None

    def test_utf16_positions(self):
        """Com PositionCodec, colunas são contadas em unidades UTF-16."""
        source = '{"t":"\U0001F600", "si'
        result = compute_completions(
            source, Position(line=0, character=14), explicit=True, codec=PositionCodec()
        )
        size = next(item for item in result.items if item.label == "size")
        assert size.text_edit.range.start == Position(line=0, character=12)
        assert size.text_edit.range.end == Position(line=0, character=14)

    def test_field_documentation(self):
        data = field_data_from_payload({
            "fields": {"idx": [{"name": "body", "type": "text", "analyzer": "english"}]},
        })
        source = '{"query":{"exists":{"field":'
        result = compute_completions(source, Position(line=0, character=len(source)), data)
        body = result.items[0]
        assert body.label == "body"
        assert body.kind == CompletionItemKind.Field
        assert "english" in body.documentation.value
