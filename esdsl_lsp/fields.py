"""
fields.py - Snapshot de campos do índice (mapping) para completion

Propósito:
    Modela os campos de índice fornecidos pela aplicação hospedeira e
    converte os formatos de entrada aceitos para esse modelo. O core de
    completion nunca busca mappings: recebe um FieldData pronto.

Componentes principais:
    - FieldDescriptor: Campo (nome, tipo, analyzer, sub-propriedades)
    - FieldData: Snapshot imutável {índice -> campos}
    - normalize_field_type: Tipo "solto" (varchar, bigint...) → tipo ES
    - field_data_from_payload: Payload JSON do cliente → FieldData
    - field_data_from_mapping: Resposta de GET _mapping → FieldData
    - load_mapping_file: Lê arquivo JSON de mapping do disco

Notas de implementação:
    - Chaves camelCase do cliente são aceitas (ex: "properties", "nested")
    - Multi-fields ("fields" no mapping) viram sub-propriedades
    - Entrada inválida levanta MappingError (subclasse de ValueError)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

FIELD_TYPES = frozenset({
    "text",
    "keyword",
    "long",
    "integer",
    "short",
    "byte",
    "double",
    "float",
    "date",
    "boolean",
    "binary",
    "geo_point",
    "geo_shape",
    "ip",
    "completion",
    "nested",
    "object",
    "flattened",
})

# Ordem importa: primeira regra que casa vence
_TYPE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("text", "string", "varchar"), "text"),
    (("keyword", "id"), "keyword"),
    (("long", "bigint"), "long"),
    (("int", "integer"), "integer"),
    (("float", "real"), "float"),
    (("double", "decimal", "numeric"), "double"),
    (("date", "time", "timestamp"), "date"),
    (("bool",), "boolean"),
    (("geo", "point", "location"), "geo_point"),
    (("ip", "inet"), "ip"),
)


class MappingError(ValueError):
    """Mapping de índice em formato não reconhecido."""


@dataclass(frozen=True)
class FieldDescriptor:
    """Campo de um índice, possivelmente com sub-campos (object/nested)."""

    name: str
    type: str
    analyzer: Optional[str] = None
    nested: bool = False
    properties: tuple["FieldDescriptor", ...] = ()


@dataclass(frozen=True)
class FieldData:
    """Snapshot de campos por índice; somente leitura durante a requisição."""

    fields: Mapping[str, tuple[FieldDescriptor, ...]] = field(default_factory=dict)
    indices: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()

    def all_fields(self) -> Iterator[FieldDescriptor]:
        """Campos de todos os índices, na ordem dos índices."""
        for descriptors in self.fields.values():
            yield from descriptors

    def field_count(self) -> int:
        return sum(len(descriptors) for descriptors in self.fields.values())


def normalize_field_type(raw_type: Optional[str]) -> str:
    """
    Mapeia um nome de tipo qualquer para o conjunto fechado de tipos ES.

    Tipos ES exatos passam direto; nomes vindos de outros bancos
    (varchar, bigint, timestamp, inet, ...) são aproximados por substring.
    Desconhecidos viram keyword.
    """
    if not raw_type:
        return "keyword"
    lowered = str(raw_type).lower()
    if lowered in FIELD_TYPES:
        return lowered
    for needles, es_type in _TYPE_RULES:
        if any(needle in lowered for needle in needles):
            return es_type
    return "keyword"


def _descriptor_from_payload(entry: Mapping) -> FieldDescriptor:
    if not isinstance(entry, Mapping):
        raise MappingError(f"Campo inválido: {entry!r}")
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise MappingError(f"Campo sem nome: {entry!r}")

    children = entry.get("properties") or ()
    return FieldDescriptor(
        name=name,
        type=normalize_field_type(entry.get("type")),
        analyzer=entry.get("analyzer"),
        nested=bool(entry.get("nested", False)),
        properties=tuple(_descriptor_from_payload(child) for child in children),
    )


def field_data_from_payload(payload: Optional[Mapping]) -> FieldData:
    """
    Converte o payload enviado pelo cliente em FieldData.

    Formato:
        {
            "fields": {"indice": [{"name": "title", "type": "text"}, ...]},
            "indices": ["indice"],
            "aliases": []
        }
    """
    if not payload:
        return FieldData()
    if not isinstance(payload, Mapping):
        raise MappingError("Payload de campos deve ser um objeto JSON")

    raw_fields = payload.get("fields") or {}
    if not isinstance(raw_fields, Mapping):
        raise MappingError("'fields' deve mapear índice -> lista de campos")

    fields = {
        str(index): tuple(_descriptor_from_payload(entry) for entry in entries or ())
        for index, entries in raw_fields.items()
    }
    indices = tuple(payload.get("indices") or fields.keys())
    aliases = tuple(payload.get("aliases") or ())
    return FieldData(fields=fields, indices=indices, aliases=aliases)


def _descriptors_from_properties(properties: Mapping) -> tuple[FieldDescriptor, ...]:
    """Converte um bloco "properties" do mapping ES (recursivo)."""
    descriptors: list[FieldDescriptor] = []
    for name, definition in properties.items():
        if not isinstance(definition, Mapping):
            continue
        children = list(_descriptors_from_properties(definition.get("properties") or {}))
        # Multi-fields: "title": {"type": "text", "fields": {"raw": {...}}}
        multi_fields = definition.get("fields") or {}
        if isinstance(multi_fields, Mapping):
            children.extend(_descriptors_from_properties(multi_fields))

        raw_type = definition.get("type") or ("object" if definition.get("properties") else None)
        descriptors.append(
            FieldDescriptor(
                name=str(name),
                type=normalize_field_type(raw_type),
                analyzer=definition.get("analyzer"),
                nested=raw_type == "nested",
                properties=tuple(children),
            )
        )
    return tuple(descriptors)


def _properties_of(index_mapping: Mapping) -> Mapping:
    """Localiza o bloco "properties" de um índice (com ou sem tipo legado)."""
    mappings = index_mapping.get("mappings", index_mapping)
    if not isinstance(mappings, Mapping):
        return {}
    if "properties" in mappings:
        return mappings["properties"] or {}
    # Mapping tipado (ES < 7): {"mappings": {"_doc": {"properties": {...}}}}
    for type_mapping in mappings.values():
        if isinstance(type_mapping, Mapping) and "properties" in type_mapping:
            return type_mapping["properties"] or {}
    return {}


def field_data_from_mapping(mapping: Mapping, index: str = "_default") -> FieldData:
    """
    Converte a resposta de GET <index>/_mapping em FieldData.

    Aceita:
        - {"indice": {"mappings": {"properties": {...}}}, ...}
        - {"mappings": {"properties": {...}}} (índice único, usa index)
        - {"properties": {...}} (bloco solto, usa index)
    """
    if not isinstance(mapping, Mapping):
        raise MappingError("Mapping deve ser um objeto JSON")

    if "mappings" in mapping or "properties" in mapping:
        per_index: dict[str, Mapping] = {index: mapping}
    else:
        per_index = {
            str(name): definition
            for name, definition in mapping.items()
            if isinstance(definition, Mapping)
        }
        if not per_index:
            raise MappingError("Nenhum índice encontrado no mapping")

    fields = {
        name: _descriptors_from_properties(_properties_of(definition))
        for name, definition in per_index.items()
    }
    aliases: list[str] = []
    for definition in per_index.values():
        aliases.extend(str(alias) for alias in (definition.get("aliases") or {}))

    return FieldData(fields=fields, indices=tuple(fields), aliases=tuple(aliases))


def load_mapping_file(path: Path) -> FieldData:
    """Lê um arquivo JSON de mapping e retorna o FieldData correspondente."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MappingError(f"JSON inválido em {path}: {e}") from e

    data = field_data_from_mapping(raw, index=Path(path).stem)
    logger.info(f"Mapping carregado de {path}: {data.field_count()} campos")
    return data


def flatten_fields(
    fields: Iterable[FieldDescriptor], prefix: str = ""
) -> Iterator[tuple[str, FieldDescriptor]]:
    """Percorre campos em profundidade produzindo (caminho_pontilhado, campo)."""
    for descriptor in fields:
        full_path = f"{prefix}.{descriptor.name}" if prefix else descriptor.name
        yield full_path, descriptor
        if descriptor.properties:
            yield from flatten_fields(descriptor.properties, full_path)
