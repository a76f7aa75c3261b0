"""
completion.py - Autocomplete contextual para a Query DSL do Elasticsearch

Propósito:
    Orquestra scanner, classificador e catálogo: dado o texto completo e o
    offset do cursor, escolhe o subconjunto relevante do catálogo (ou dos
    campos do índice), filtra pela palavra sendo digitada, ordena por boost
    e devolve o offset a partir do qual o editor deve substituir o texto.

Componentes principais:
    - CompletionKind: Tipos fechados de candidato
    - Candidate / CompletionResult: Resultado puro (sem tipos LSP)
    - provide: Ponto de entrada do core
    - compute_completions: Adaptação para lsprotocol CompletionList

Mapeamento de contexto → candidatos:
    ROOT          → propriedades da raiz (+ snippets com prefixo >= 2 ou explícito)
    QUERY         → tipos de query (+ opções da cláusula envolvente)
    BOOL_CLAUSE   → tipos de query (+ opções da cláusula envolvente)
    BOOL          → must/should/filter/must_not/...
    AGGS/AGG_DEF  → tipos de agregação (+ "aggs" e opções em AGG_DEF)
    FIELD_VALUE   → campos do índice
    VALUE         → valores enumerados da chave corrente
    SORT          → campos (ou asc/desc após "campo":)
    UNKNOWN       → tipos de query e opções da agregação envolvente;
                    campos após ":"

Notas de implementação:
    - Dentro de string não terminada só completa se explícito
    - Sem candidatos e não explícito → None (nunca lista vazia)
    - Campos: filtro por substring; catálogo: filtro por prefixo
    - Sem prefixo, campos são limitados aos 30 primeiros
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Iterable, Optional

from lsprotocol.types import CompletionList, Position

from esdsl_lsp.catalog import (
    ALL_AGG_TYPES,
    ALL_QUERY_TYPES,
    BOOL_CLAUSES,
    HIGHLIGHT_OPTIONS,
    QUERY_TYPE_NAMES,
    ROOT_PROPERTIES,
    SNIPPETS,
    SOURCE_OPTIONS,
    SUGGEST_OPTIONS,
    AggType,
    PropertyDef,
    QueryType,
    clause_options,
    enum_values,
    search_agg_types,
    search_query_types,
    strip_placeholders,
)
from esdsl_lsp.context import (
    PATH_CONTEXTS,
    ESContext,
    ESContextType,
    can_add_query_type,
    expects_field_name,
    get_context,
    parent_agg_type,
)
from esdsl_lsp.converters import candidate_to_item, offset_range, position_to_offset
from esdsl_lsp.fields import FieldData, flatten_fields

logger = logging.getLogger(__name__)

# Limite de campos sugeridos quando não há prefixo
FIELD_RESULT_LIMIT = 30


class CompletionKind(Enum):
    PROPERTY = "property"
    QUERY_TYPE = "query_type"
    AGG_TYPE = "agg_type"
    FIELD = "field"
    KEYWORD = "keyword"
    VALUE = "value"
    SNIPPET = "snippet"


class Boost(IntEnum):
    QUERY_TYPE = 100
    AGG_TYPE = 95
    PROPERTY = 90
    FIELD = 85
    KEYWORD = 80
    SNIPPET = 75
    VALUE = 70


@dataclass(frozen=True)
class Candidate:
    """Sugestão de completion; a ordem depende apenas do boost."""

    label: str
    kind: CompletionKind
    boost: int
    detail: Optional[str] = None
    info: Optional[str] = None
    apply: Optional[str] = None
    template: Optional[str] = None

    @property
    def insert_text(self) -> str:
        if self.template is not None:
            return self.template
        return self.apply if self.apply is not None else self.label


@dataclass(frozen=True)
class CompletionResult:
    """Opções ordenadas + offset inicial do trecho a ser substituído."""

    from_: int
    options: tuple[Candidate, ...]

    @property
    def labels(self) -> list[str]:
        return [option.label for option in self.options]


# --- Construtores de candidatos ---


def _matches_prefix(label: str, word: str) -> bool:
    return not word or label.lower().startswith(word.lower())


def _clause_doc(definition: QueryType | AggType, kind: str) -> str:
    """Documentação Markdown de uma cláusula (nome, descrição, template)."""
    md = f"**{definition.name}** ({definition.category} {kind})\n\n"
    md += f"{definition.description}\n\n"
    md += f"```json\n{strip_placeholders(definition.template)}\n```"
    return md


def _query_type_candidates(word: str) -> list[Candidate]:
    query_types = search_query_types(word) if word else ALL_QUERY_TYPES
    return [
        Candidate(
            label=qt.name,
            kind=CompletionKind.QUERY_TYPE,
            boost=Boost.QUERY_TYPE,
            detail=f"{qt.category} query",
            info=_clause_doc(qt, "query"),
            apply=f'"{qt.name}": ',
        )
        for qt in query_types
    ]


def _agg_type_candidates(word: str) -> list[Candidate]:
    agg_types = search_agg_types(word) if word else ALL_AGG_TYPES
    return [
        Candidate(
            label=at.name,
            kind=CompletionKind.AGG_TYPE,
            boost=Boost.AGG_TYPE,
            detail=f"{at.category} aggregation",
            info=_clause_doc(at, "aggregation"),
            apply=f'"{at.name}": ',
        )
        for at in agg_types
    ]


def _property_candidates(
    properties: Iterable[PropertyDef],
    word: str,
    kind: CompletionKind = CompletionKind.PROPERTY,
    boost: int = Boost.PROPERTY,
) -> list[Candidate]:
    return [
        Candidate(
            label=prop.name,
            kind=kind,
            boost=boost,
            detail=prop.detail,
            info=prop.info or None,
            apply=f'"{prop.name}": ',
        )
        for prop in properties
        if _matches_prefix(prop.name, word)
    ]


def _field_candidates(data: Optional[FieldData], word: str) -> list[Candidate]:
    """
    Campos do snapshot (todos os índices), achatados em caminhos pontilhados.

    Campos text ganham um irmão "<campo>.keyword" um nível de boost abaixo.
    O filtro é por substring para tolerar caminhos parciais.
    """
    if data is None or not data.fields:
        return []

    candidates: list[Candidate] = []
    seen: set[str] = set()

    def add(label: str, detail: str, info: Optional[str], boost: int) -> None:
        if label in seen:
            return
        seen.add(label)
        candidates.append(
            Candidate(
                label=label,
                kind=CompletionKind.FIELD,
                boost=boost,
                detail=detail,
                info=info,
                apply=f'"{label}"',
            )
        )

    for full_path, descriptor in flatten_fields(data.all_fields()):
        analyzer_info = f"Analyzer: {descriptor.analyzer}" if descriptor.analyzer else None
        add(full_path, descriptor.type, analyzer_info, Boost.FIELD)
        if descriptor.type == "text":
            add(f"{full_path}.keyword", "keyword", "Exact match (not analyzed)", Boost.FIELD - 1)

    if word:
        lowered = word.lower()
        return [c for c in candidates if lowered in c.label.lower()]

    return candidates[:FIELD_RESULT_LIMIT]


def _snippet_candidates(word: str) -> list[Candidate]:
    return [
        Candidate(
            label=snippet.label,
            kind=CompletionKind.SNIPPET,
            boost=Boost.SNIPPET,
            detail=snippet.detail,
            info=snippet.info or None,
            apply=strip_placeholders(snippet.template),
            template=snippet.template,
        )
        for snippet in SNIPPETS
        if _matches_prefix(snippet.label, word)
    ]


def _value_candidates(values: Iterable[str], word: str) -> list[Candidate]:
    return [
        Candidate(
            label=value,
            kind=CompletionKind.VALUE,
            boost=Boost.VALUE,
            apply=f'"{value}"',
        )
        for value in values
        if _matches_prefix(value, word)
    ]


def _enclosing_clause(context: ESContext, names: frozenset[str]) -> Optional[str]:
    """
    Cláusula conhecida que envolve o cursor, abaixo da última palavra-chave.

    Só considera os dois segmentos mais internos: o corpo da cláusula
    ({"multi_match": {|}) ou o corpo do campo ({"match": {"title": {|}}).
    """
    path = context.path
    last = len(path) - 1
    for i in range(last, max(last - 2, -1), -1):
        segment = path[i]
        if segment in PATH_CONTEXTS:
            return None
        if segment in names:
            return segment
    return None


# --- Handlers por contexto ---

_Handler = Callable[[ESContext, str, Optional[FieldData], bool], list]


def _complete_root(context, word, data, explicit):
    if context.after_colon:
        return []
    candidates = _property_candidates(ROOT_PROPERTIES, word)
    # Evita ruído de snippets num gatilho automático sem prefixo
    if explicit or len(word) >= 2:
        candidates.extend(_snippet_candidates(word))
    return candidates


def _complete_query(context, word, data, explicit):
    if context.after_colon:
        if expects_field_name(context):
            return _field_candidates(data, word)
        return []
    candidates = _query_type_candidates(word)
    clause = _enclosing_clause(context, QUERY_TYPE_NAMES)
    if clause:
        candidates.extend(_property_candidates(clause_options(clause), word))
    return candidates


def _complete_bool(context, word, data, explicit):
    if context.after_colon:
        return []
    return _property_candidates(
        BOOL_CLAUSES, word, kind=CompletionKind.KEYWORD, boost=Boost.KEYWORD
    )


def _complete_bool_clause(context, word, data, explicit):
    # Elementos de must/should/filter/must_not são sempre queries
    candidates = _query_type_candidates(word)
    clause = None if context.after_colon else _enclosing_clause(context, QUERY_TYPE_NAMES)
    if clause:
        candidates.extend(_property_candidates(clause_options(clause), word))
    return candidates


def _complete_aggs(context, word, data, explicit):
    if context.after_colon:
        if expects_field_name(context):
            return _field_candidates(data, word)
        return []

    candidates = _agg_type_candidates(word)
    if context.type is ESContextType.AGG_DEF:
        if _matches_prefix("aggs", word):
            candidates.append(
                Candidate(
                    label="aggs",
                    kind=CompletionKind.PROPERTY,
                    boost=Boost.PROPERTY,
                    detail="Nested aggregations",
                    apply='"aggs": ',
                )
            )
        agg_type = parent_agg_type(context)
        if agg_type and context.path[-1] == agg_type:
            options = clause_options(agg_type, prefer_agg=True)
            candidates.extend(_property_candidates(options, word))
    return candidates


def _complete_sort(context, word, data, explicit):
    # "sort": [ ainda aguarda campos; "campo": aguarda a direção
    if context.after_colon and context.current_key not in (None, "sort"):
        return _value_candidates(enum_values("order"), word)
    return _field_candidates(data, word)


def _complete_highlight(context, word, data, explicit):
    if context.after_colon:
        return []
    return _property_candidates(HIGHLIGHT_OPTIONS, word)


def _complete_source(context, word, data, explicit):
    if context.after_colon:
        return _field_candidates(data, word)
    return _property_candidates(SOURCE_OPTIONS, word)


def _complete_suggest(context, word, data, explicit):
    if context.after_colon:
        return []
    return _property_candidates(SUGGEST_OPTIONS, word)


def _complete_field_value(context, word, data, explicit):
    return _field_candidates(data, word)


def _complete_value(context, word, data, explicit):
    if not context.current_key:
        return []
    return _value_candidates(enum_values(context.current_key), word)


def _complete_unknown(context, word, data, explicit):
    if context.after_colon:
        return _field_candidates(data, word)

    candidates: list[Candidate] = []
    if can_add_query_type(context):
        candidates.extend(_query_type_candidates(word))
    agg_type = parent_agg_type(context)
    if agg_type:
        candidates.extend(_property_candidates(clause_options(agg_type, prefer_agg=True), word))
    return candidates


_HANDLERS: dict[ESContextType, _Handler] = {
    ESContextType.ROOT: _complete_root,
    ESContextType.QUERY: _complete_query,
    ESContextType.BOOL: _complete_bool,
    ESContextType.BOOL_CLAUSE: _complete_bool_clause,
    ESContextType.AGGS: _complete_aggs,
    ESContextType.AGG_DEF: _complete_aggs,
    ESContextType.SORT: _complete_sort,
    ESContextType.HIGHLIGHT: _complete_highlight,
    ESContextType.SOURCE: _complete_source,
    ESContextType.SUGGEST: _complete_suggest,
    ESContextType.FIELD_VALUE: _complete_field_value,
    ESContextType.VALUE: _complete_value,
    ESContextType.UNKNOWN: _complete_unknown,
}


def candidates_for_context(
    context: ESContext,
    field_data: Optional[FieldData] = None,
    explicit: bool = False,
) -> list[Candidate]:
    """Candidatos admissíveis para o contexto, já filtrados pela palavra."""
    word = context.current_word.replace('"', "")
    handler = _HANDLERS.get(context.type, _complete_unknown)
    return handler(context, word, field_data, explicit)


def provide(
    full_text: str,
    cursor_pos: int,
    field_data: Optional[FieldData] = None,
    explicit: bool = False,
) -> Optional[CompletionResult]:
    """
    Computa completions para a posição do cursor.

    Args:
        full_text: Texto completo do documento
        cursor_pos: Offset do cursor (0-based)
        field_data: Snapshot de campos do índice (opcional)
        explicit: True quando o usuário pediu completion explicitamente

    Returns:
        CompletionResult com opções ordenadas por boost, ou None quando não
        há o que sugerir (dentro de string ou sem candidatos, sem pedido
        explícito)
    """
    context = get_context(full_text, cursor_pos)

    if context.in_string and not explicit:
        logger.debug(f"Cursor dentro de string em {context.cursor_pos}, sem completion")
        return None

    candidates = candidates_for_context(context, field_data, explicit)
    if not candidates and not explicit:
        return None

    # sorted é estável: empates mantêm a ordem do catálogo
    options = tuple(sorted(candidates, key=lambda c: -c.boost))
    logger.debug(
        f"Contexto {context.type.value} path={list(context.path)} "
        f"palavra={context.current_word!r}: {len(options)} opções"
    )
    return CompletionResult(
        from_=context.cursor_pos - len(context.current_word),
        options=options,
    )


def compute_completions(
    source: str,
    position: Position,
    field_data: Optional[FieldData] = None,
    explicit: bool = False,
    codec=None,
) -> Optional[CompletionList]:
    """
    Computa lista de completamento no formato LSP.

    Args:
        source: Texto-fonte do documento
        position: Posição do cursor (0-based)
        field_data: Snapshot de campos do workspace (pode ser None)
        explicit: Pedido explícito (CompletionTriggerKind.Invoked)
        codec: PositionCodec do documento; position e ranges em unidades
            do cliente (UTF-16 por padrão). None usa code points

    Returns:
        CompletionList com TextEdits sobre [from_, cursor), ou None
    """
    offset = position_to_offset(source, position, codec)
    result = provide(source, offset, field_data, explicit)
    if result is None:
        return None

    edit_range = offset_range(source, result.from_, offset, codec)
    items = [
        candidate_to_item(candidate, index, edit_range)
        for index, candidate in enumerate(result.options)
    ]
    return CompletionList(is_incomplete=False, items=items)
