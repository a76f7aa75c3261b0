"""
context.py - Classificação semântica da posição do cursor na Query DSL

Propósito:
    Converte o ParseState produzido pelo scanner em um ESContext: o tipo de
    posição JSON em que o cursor está (raiz, dentro de query, dentro de bool,
    cláusula bool, aggs, sort, ...) e os dados auxiliares que o provider de
    completion precisa (palavra corrente, chave corrente, após ':').

Componentes principais:
    - ESContextType: Enum fechado com os tipos de contexto
    - ESContext: Resultado imutável da classificação
    - classify: Função total (path, current_key, after_colon) -> tipo
    - get_context: Scanner + varreduras auxiliares + classify
    - Predicados: can_add_query_type, can_add_aggregation, expects_field_name
    - parent_query_type / parent_agg_type: cláusula conhecida mais próxima

Ordem das regras de classify (primeira que casa vence):
    1. path vazio                               → ROOT
    2. após ':' com chave de nome de campo      → FIELD_VALUE
    3. após ':' com chave de valor enumerado    → VALUE
    4. segmento-palavra-chave mais interno      → tipo do segmento
    5. algum ancestral é cláusula conhecida     → QUERY
    6. caso contrário                           → UNKNOWN
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from esdsl_lsp.catalog import (
    AGG_TYPE_NAMES,
    BOOL_CLAUSE_NAMES,
    ENUM_VALUE_KEYS,
    QUERY_TYPE_NAMES,
    enum_values,
)
from esdsl_lsp.scanner import current_word, is_after_colon, is_in_string, scan


class ESContextType(Enum):
    ROOT = "root"
    QUERY = "query"
    BOOL = "bool"
    BOOL_CLAUSE = "bool_clause"
    AGGS = "aggs"
    AGG_DEF = "agg_def"
    SORT = "sort"
    HIGHLIGHT = "highlight"
    SOURCE = "source"
    SUGGEST = "suggest"
    FIELD_VALUE = "field_value"
    VALUE = "value"
    UNKNOWN = "unknown"


# Segmentos do path que determinam o contexto
PATH_CONTEXTS: dict[str, ESContextType] = {
    "query": ESContextType.QUERY,
    "bool": ESContextType.BOOL,
    "must": ESContextType.BOOL_CLAUSE,
    "should": ESContextType.BOOL_CLAUSE,
    "filter": ESContextType.BOOL_CLAUSE,
    "must_not": ESContextType.BOOL_CLAUSE,
    "aggs": ESContextType.AGGS,
    "aggregations": ESContextType.AGGS,
    "sort": ESContextType.SORT,
    "highlight": ESContextType.HIGHLIGHT,
    "_source": ESContextType.SOURCE,
    "suggest": ESContextType.SUGGEST,
}

# Chaves cujo valor é um nome de campo do índice
FIELD_VALUE_KEYS = frozenset({
    "field",
    "path",
    "nested_path",
    "_source",
    "stored_fields",
    "docvalue_fields",
    "collapse",
})

# Chaves cujo valor pertence a um conjunto enumerado
VALUE_TYPE_KEYS = frozenset({
    "order",
    "type",
    "operator",
    "zero_terms_query",
    "mode",
    "missing",
    "execution",
    "relation",
})

# Dicas por contexto (exibidas em getContext e usadas como expected_types)
_CONTEXT_HINTS: dict[ESContextType, tuple[str, ...]] = {
    ESContextType.BOOL: ("must", "should", "filter", "must_not", "minimum_should_match", "boost"),
    ESContextType.QUERY: ("match", "term", "bool", "range", "exists", "prefix", "wildcard"),
    ESContextType.AGGS: ("terms", "histogram", "date_histogram", "avg", "sum", "min", "max"),
    ESContextType.SORT: ("asc", "desc", "order", "mode", "missing"),
}


@dataclass(frozen=True)
class ESContext:
    """Contexto do cursor; construído a cada requisição e nunca alterado."""

    type: ESContextType
    path: tuple[str, ...]
    current_key: Optional[str]
    parent_key: Optional[str]
    in_array: bool
    depth: int
    expected_types: Optional[tuple[str, ...]]
    cursor_pos: int
    current_word: str
    in_string: bool
    after_colon: bool

    def to_dict(self) -> dict:
        """Serializa para resposta de comando (JSON)."""
        return {
            "type": self.type.value,
            "path": list(self.path),
            "currentKey": self.current_key,
            "parentKey": self.parent_key,
            "inArray": self.in_array,
            "depth": self.depth,
            "expectedTypes": list(self.expected_types) if self.expected_types else None,
            "cursorPos": self.cursor_pos,
            "currentWord": self.current_word,
            "inString": self.in_string,
            "afterColon": self.after_colon,
        }


def classify(
    path: Sequence[str],
    current_key: Optional[str],
    after_colon: bool,
) -> ESContextType:
    """Mapeia path/chave corrente para o tipo de contexto (função total)."""
    if not path:
        return ESContextType.ROOT

    # A chave imediata é um sinal mais específico que a ancestralidade
    if after_colon and current_key in FIELD_VALUE_KEYS:
        return ESContextType.FIELD_VALUE

    if after_colon and current_key in VALUE_TYPE_KEYS:
        return ESContextType.VALUE

    last = len(path) - 1
    for i in range(last, -1, -1):
        context_type = PATH_CONTEXTS.get(path[i])
        if context_type is None:
            continue
        # Um nível abaixo de "aggs" estamos dentro de uma agregação nomeada
        if context_type is ESContextType.AGGS and i < last:
            return ESContextType.AGG_DEF
        return context_type

    if any(segment in QUERY_TYPE_NAMES or segment in BOOL_CLAUSE_NAMES for segment in path):
        return ESContextType.QUERY

    return ESContextType.UNKNOWN


def expected_types(
    context_type: ESContextType, current_key: Optional[str]
) -> Optional[tuple[str, ...]]:
    """Retorna dica de valores esperados para o contexto, se houver."""
    if current_key and current_key in ENUM_VALUE_KEYS:
        return enum_values(current_key)
    return _CONTEXT_HINTS.get(context_type)


def get_context(text: str, cursor_pos: int) -> ESContext:
    """
    Classifica o contexto do cursor no documento.

    Args:
        text: Texto completo do documento
        cursor_pos: Offset do cursor (0-based)

    Returns:
        ESContext com tipo, path, palavra corrente e flags
    """
    pos = max(0, min(cursor_pos, len(text)))
    state = scan(text, pos)

    after_colon = is_after_colon(text, pos) or state.expecting_value
    context_type = classify(state.path, state.current_key, after_colon)

    return ESContext(
        type=context_type,
        path=state.path,
        current_key=state.current_key,
        parent_key=state.parent_key,
        in_array=state.in_array,
        depth=state.depth,
        expected_types=expected_types(context_type, state.current_key),
        cursor_pos=pos,
        current_word=current_word(text, pos),
        in_string=is_in_string(text, pos),
        after_colon=after_colon,
    )


def can_add_query_type(context: ESContext) -> bool:
    """
    Verifica se um novo tipo de query cabe na posição.

    Em UNKNOWN (ex: {"post_filter": {|) a query é plausível enquanto nenhuma
    agregação conhecida envolver o cursor.
    """
    if context.type in (ESContextType.QUERY, ESContextType.BOOL_CLAUSE):
        return True
    if context.after_colon:
        return False
    if context.type is ESContextType.UNKNOWN:
        return parent_agg_type(context) is None
    return context.type is ESContextType.ROOT


def can_add_aggregation(context: ESContext) -> bool:
    return context.type in (ESContextType.AGGS, ESContextType.AGG_DEF)


def expects_field_name(context: ESContext) -> bool:
    """Verifica se a posição espera um nome de campo como valor."""
    return context.type is ESContextType.FIELD_VALUE or (
        context.after_colon and context.current_key in FIELD_VALUE_KEYS
    )


def parent_query_type(context: ESContext) -> Optional[str]:
    """Retorna a cláusula de query conhecida mais interna do path."""
    for segment in reversed(context.path):
        if segment in QUERY_TYPE_NAMES:
            return segment
    return None


def parent_agg_type(context: ESContext) -> Optional[str]:
    """Retorna o tipo de agregação conhecido mais interno do path."""
    for segment in reversed(context.path):
        if segment in AGG_TYPE_NAMES:
            return segment
    return None
