"""
cache.py - Cache de snapshots de campos (mapping) por workspace

Propósito:
    Guarda o FieldData fornecido pelo cliente (ou lido de um arquivo de
    mapping) para servir completions de nomes de campo sem que o core
    precise buscar nada.

Componentes principais:
    - CachedFieldData: Snapshot com timestamp e origem
    - FieldMappingCache: Dicionário de snapshots por workspace

Notas de implementação:
    - Cada workspace tem no máximo um snapshot em cache
    - Snapshots são imutáveis; put substitui o anterior inteiro
    - A chave "" representa o escopo global (sem workspace)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from esdsl_lsp.fields import FieldData

logger = logging.getLogger(__name__)


@dataclass
class CachedFieldData:
    """Snapshot de campos em cache com timestamp."""

    data: FieldData
    timestamp: float = field(default_factory=time.time)
    source: str = "payload"  # "payload" ou caminho do arquivo de mapping


class FieldMappingCache:
    """Cache de FieldData por workspace."""

    def __init__(self):
        self._cache: dict[str, CachedFieldData] = {}

    def get(self, workspace_key: str) -> Optional[CachedFieldData]:
        """Retorna snapshot em cache para o workspace, ou None."""
        return self._cache.get(workspace_key)

    def put(self, workspace_key: str, data: FieldData, source: str = "payload") -> None:
        """Armazena snapshot de campos no cache."""
        self._cache[workspace_key] = CachedFieldData(data=data, source=source)
        logger.info(
            f"Campos atualizados para workspace '{workspace_key}': "
            f"{data.field_count()} campos de {source}"
        )

    def invalidate(self, workspace_key: str) -> None:
        """Remove snapshot do cache para o workspace."""
        if self._cache.pop(workspace_key, None):
            logger.info(f"Campos removidos para workspace: '{workspace_key}'")

    def has(self, workspace_key: str) -> bool:
        """Verifica se há snapshot em cache para o workspace."""
        return workspace_key in self._cache
