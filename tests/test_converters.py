"""
test_converters.py - Testes para conversão de coordenadas e itens LSP

Propósito:
    Validar position_to_offset / offset_to_position (incluindo casos fora
    do documento) e candidate_to_item.
"""

from __future__ import annotations

from lsprotocol.types import CompletionItemKind, InsertTextFormat, Position, Range
from pygls.workspace import PositionCodec

from esdsl_lsp.completion import Candidate, CompletionKind
from esdsl_lsp.converters import (
    KIND_MAP,
    candidate_to_item,
    offset_range,
    offset_to_position,
    position_to_offset,
)


SOURCE = '{\n  "query": {\n    "match_all": {}\n  }\n}'


class TestPositionToOffset:

    def test_first_line(self):
        assert position_to_offset(SOURCE, Position(line=0, character=0)) == 0
        assert position_to_offset(SOURCE, Position(line=0, character=1)) == 1

    def test_later_line(self):
        offset = position_to_offset(SOURCE, Position(line=1, character=3))
        assert SOURCE[offset:offset + 5] == "query"

    def test_character_past_line_end(self):
        offset = position_to_offset(SOURCE, Position(line=0, character=50))
        assert offset == 1

    def test_line_past_document_end(self):
        assert position_to_offset(SOURCE, Position(line=99, character=0)) == len(SOURCE)

    def test_crlf(self):
        source = '{\r\n  "a"'
        assert position_to_offset(source, Position(line=0, character=5)) == 1
        assert position_to_offset(source, Position(line=1, character=2)) == 5


class TestOffsetToPosition:

    def test_roundtrip_points(self):
        for offset in (0, 1, 5, 20, len(SOURCE)):
            position = offset_to_position(SOURCE, offset)
            assert position_to_offset(SOURCE, position) == offset

    def test_clamped(self):
        assert offset_to_position(SOURCE, -3) == Position(line=0, character=0)
        last = offset_to_position(SOURCE, 10_000)
        assert last == Position(line=4, character=1)

    def test_offset_range(self):
        rng = offset_range(SOURCE, 5, 10)
        assert rng == Range(
            start=Position(line=1, character=3),
            end=Position(line=1, character=8),
        )


class TestUtf16Codec:
    """Colunas em unidades UTF-16 (padrão do LSP) via PositionCodec do pygls."""

    SOURCE = '{"t":"\U0001F600", "si'

    def test_position_after_surrogate_pair(self):
        codec = PositionCodec()
        offset = position_to_offset(self.SOURCE, Position(line=0, character=14), codec)
        assert offset == len(self.SOURCE)
        offset = position_to_offset(self.SOURCE, Position(line=0, character=12), codec)
        assert self.SOURCE[offset:] == "si"

    def test_offset_range_in_client_units(self):
        start = len(self.SOURCE) - 2
        rng = offset_range(self.SOURCE, start, len(self.SOURCE), PositionCodec())
        assert rng == Range(
            start=Position(line=0, character=12),
            end=Position(line=0, character=14),
        )

    def test_without_codec_counts_code_points(self):
        assert position_to_offset(self.SOURCE, Position(line=0, character=13)) == len(self.SOURCE)

    def test_later_line(self):
        source = '{"t":"\U0001F600",\n"\U0001F600":1, "si'
        codec = PositionCodec()
        offset = position_to_offset(source, Position(line=1, character=11), codec)
        assert offset == len(source)
        assert offset_to_position(source, offset, codec) == Position(line=1, character=11)


class TestCandidateToItem:
    """Candidate → CompletionItem."""

    def _range(self):
        return Range(start=Position(line=0, character=1), end=Position(line=0, character=3))

    def test_plain_candidate(self):
        candidate = Candidate(
            label="size",
            kind=CompletionKind.PROPERTY,
            boost=90,
            detail="number",
            info="Number of hits to return",
            apply='"size": ',
        )
        item = candidate_to_item(candidate, 3, self._range())
        assert item.label == "size"
        assert item.kind == CompletionItemKind.Property
        assert item.sort_text == "00003"
        assert item.filter_text == "size"
        assert item.insert_text_format == InsertTextFormat.PlainText
        assert item.text_edit.new_text == '"size": '
        assert item.documentation.value == "Number of hits to return"

    def test_template_candidate(self):
        candidate = Candidate(
            label="search-basic",
            kind=CompletionKind.SNIPPET,
            boost=75,
            apply='{"query": {}}',
            template='{"query": {"${1:match_all}": {}}}',
        )
        item = candidate_to_item(candidate, 0, self._range())
        assert item.insert_text_format == InsertTextFormat.Snippet
        assert item.text_edit.new_text == '{"query": {"${1:match_all}": {}}}'
        assert item.documentation is None

    def test_label_fallback(self):
        candidate = Candidate(label="asc", kind=CompletionKind.VALUE, boost=70)
        item = candidate_to_item(candidate, 0, self._range())
        assert item.text_edit.new_text == "asc"
        assert item.kind == CompletionItemKind.EnumMember


def test_kind_map_covers_all_kinds():
    assert set(KIND_MAP) == {kind.value for kind in CompletionKind}
