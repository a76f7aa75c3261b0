"""
converters.py - Conversão entre tipos do core e tipos LSP

Propósito:
    O core trabalha com offsets (0-based) sobre o texto completo; o LSP
    trabalha com Position (linha, caractere). Este módulo faz a ponte nos
    dois sentidos e converte candidatos de completion em CompletionItem.

Componentes principais:
    - position_to_offset / offset_to_position: Coordenadas LSP ↔ offset
    - offset_range: Range LSP de um intervalo [start, end) de offsets
    - candidate_to_item: Candidate → CompletionItem (com TextEdit)

Notas de implementação:
    - Caracteres além do fim da linha são ajustados ao fim da linha
    - Linhas além do fim do documento mapeiam para o fim do texto
    - Com o PositionCodec do documento (pygls), colunas usam as unidades
      negociadas com o cliente (UTF-16 por padrão)
    - sort_text preserva a ordem decidida pelo provider (boost)
    - Templates viram InsertTextFormat.Snippet; o editor avalia ${n:default}
"""

from __future__ import annotations

import logging

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    InsertTextFormat,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    TextEdit,
)

logger = logging.getLogger(__name__)

# CompletionKind.value → CompletionItemKind
KIND_MAP: dict[str, CompletionItemKind] = {
    "property": CompletionItemKind.Property,
    "query_type": CompletionItemKind.Keyword,
    "agg_type": CompletionItemKind.Function,
    "field": CompletionItemKind.Field,
    "keyword": CompletionItemKind.Keyword,
    "value": CompletionItemKind.EnumMember,
    "snippet": CompletionItemKind.Snippet,
}


def _from_client_units(line: str, character: int, codec) -> int:
    """Converte coluna em unidades do cliente (UTF-16 por padrão) em índice da linha."""
    units = 0
    for index, char in enumerate(line):
        if units >= character:
            return index
        units += codec.client_num_units(char)
    return len(line)


def position_to_offset(source: str, position: Position, codec=None) -> int:
    """
    Converte Position LSP (0-based) em offset no texto.

    Mapeamento:
        linha fora do documento → len(source)
        caractere após o fim da linha → fim da linha

    Com codec (PositionCodec do documento pygls), position.character está
    nas unidades negociadas com o cliente; sem codec, em code points.
    """
    lines = source.split("\n")
    if position.line >= len(lines):
        return len(source)

    offset = 0
    for line in lines[: position.line]:
        offset += len(line) + 1

    line = lines[position.line]
    if line.endswith("\r"):
        line = line[:-1]
    character = max(0, position.character)
    if codec is not None:
        character = _from_client_units(line, character, codec)
    return offset + min(character, len(line))


def offset_to_position(source: str, offset: int, codec=None) -> Position:
    """Converte offset no texto em Position LSP (unidades do codec, se houver)."""
    offset = max(0, min(offset, len(source)))
    prefix = source[:offset]
    line = prefix.count("\n")
    line_start = prefix.rfind("\n") + 1
    character = offset - line_start
    if codec is not None:
        character = codec.client_num_units(source[line_start:offset])
    return Position(line=line, character=character)


def offset_range(source: str, start: int, end: int, codec=None) -> Range:
    return Range(
        start=offset_to_position(source, start, codec),
        end=offset_to_position(source, end, codec),
    )


def candidate_to_item(candidate, index: int, edit_range: Range) -> CompletionItem:
    """
    Converte um Candidate do provider em CompletionItem.

    Args:
        candidate: Candidate (completion.py)
        index: Posição do candidato na lista já ordenada
        edit_range: Trecho [from_, cursor) substituído pela inserção
    """
    is_snippet = candidate.template is not None
    documentation = None
    if candidate.info:
        documentation = MarkupContent(kind=MarkupKind.Markdown, value=candidate.info)

    return CompletionItem(
        label=candidate.label,
        kind=KIND_MAP.get(candidate.kind.value, CompletionItemKind.Text),
        detail=candidate.detail,
        documentation=documentation,
        sort_text=f"{index:05d}",
        filter_text=candidate.label,
        insert_text_format=InsertTextFormat.Snippet if is_snippet else InsertTextFormat.PlainText,
        text_edit=TextEdit(range=edit_range, new_text=candidate.insert_text),
    )
