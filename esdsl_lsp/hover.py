"""
hover.py - Documentação ao passar o mouse (textDocument/hover)

Propósito:
    Mostra a documentação de nomes conhecidos da Query DSL quando o usuário
    posiciona o cursor sobre eles no editor.

Mapeamento de hover:
    "match", "bool", ...        → Tipo de query (categoria, descrição, template)
    "terms", "avg", ...         → Tipo de agregação (preferido dentro de aggs)
    "size", "sort", ... na raiz → Propriedade da raiz
    "must", "should", ...       → Cláusula bool

Notas de implementação:
    - Não depende de cache nem de mapping: só do catálogo estático
    - O contexto é calculado no início da palavra para desambiguar nomes
      presentes nos dois catálogos (range, terms, nested, filter, ...)
    - Formata resposta como Markdown via MarkupContent
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from lsprotocol.types import Hover, MarkupContent, MarkupKind, Position

from esdsl_lsp.catalog import (
    BOOL_CLAUSES,
    ROOT_PROPERTIES,
    PropertyDef,
    get_agg_type,
    get_query_type,
    strip_placeholders,
)
from esdsl_lsp.context import ESContextType, get_context
from esdsl_lsp.converters import offset_range, position_to_offset

logger = logging.getLogger(__name__)

# Caracteres válidos em nomes da DSL (inclui ponto para campos)
_WORD_CHARS = re.compile(r"[\w.]")

_ROOT_BY_NAME = {prop.name: prop for prop in ROOT_PROPERTIES}
_BOOL_BY_NAME = {prop.name: prop for prop in BOOL_CLAUSES}


def compute_hover(source: str, position: Position, codec=None) -> Optional[Hover]:
    """
    Computa hover baseado na posição do cursor.

    Args:
        source: Texto-fonte do documento
        position: Posição do cursor (0-based)
        codec: PositionCodec do documento (unidades do cliente), opcional

    Returns:
        Hover com MarkupContent ou None se a palavra não é conhecida
    """
    offset = position_to_offset(source, position, codec)
    start, end = _word_bounds(source, offset)
    if start == end:
        return None

    word = source[start:end]
    context = get_context(source, start)
    md = _markdown_for(word, context.type)
    if md is None:
        return None

    return Hover(
        contents=MarkupContent(kind=MarkupKind.Markdown, value=md),
        range=offset_range(source, start, end, codec),
    )


def _word_bounds(source: str, offset: int) -> tuple[int, int]:
    """Retorna [início, fim) da palavra sob o offset."""
    start = offset
    while start > 0 and _WORD_CHARS.match(source[start - 1]):
        start -= 1
    end = offset
    while end < len(source) and _WORD_CHARS.match(source[end]):
        end += 1
    return start, end


def _markdown_for(word: str, context_type: ESContextType) -> Optional[str]:
    prefer_agg = context_type in (ESContextType.AGGS, ESContextType.AGG_DEF)
    query_def = get_query_type(word)
    agg_def = get_agg_type(word)

    if agg_def and prefer_agg:
        return _clause_markdown(agg_def, "aggregation")
    if query_def:
        return _clause_markdown(query_def, "query")
    if word in _BOOL_BY_NAME and context_type is ESContextType.BOOL:
        return _property_markdown(_BOOL_BY_NAME[word], "bool clause")
    if agg_def:
        return _clause_markdown(agg_def, "aggregation")
    if context_type is ESContextType.ROOT and word in _ROOT_BY_NAME:
        return _property_markdown(_ROOT_BY_NAME[word], "search body")
    return None


def _clause_markdown(definition, kind: str) -> str:
    md = f"**{definition.name}** ({definition.category} {kind})\n\n"
    md += f"{definition.description}\n\n"
    if definition.required_fields:
        md += "Required: " + ", ".join(f"`{f}`" for f in definition.required_fields) + "\n\n"
    if definition.optional_fields:
        md += "Optional: " + ", ".join(f"`{f}`" for f in definition.optional_fields) + "\n\n"
    md += f"```json\n{strip_placeholders(definition.template)}\n```"
    return md


def _property_markdown(prop: PropertyDef, kind: str) -> str:
    md = f"**{prop.name}** ({kind})\n\n"
    md += f"Type: `{prop.detail}`"
    if prop.info:
        md += f"\n\n{prop.info}"
    return md
