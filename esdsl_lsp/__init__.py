"""
esdsl_lsp - Autocomplete e Language Server para a Query DSL do Elasticsearch

Propósito:
    Núcleo de completion sensível ao contexto para corpos de busca da
    Query DSL (JSON possivelmente incompleto) e um servidor LSP que o
    expõe a editores compatíveis.

Componentes principais:
    - scanner: Varredura estrutural do texto até o cursor
    - context: Classificação do contexto da DSL
    - catalog: Catálogo estático de queries, agregações e propriedades
    - fields: Snapshot de campos do índice (mapping)
    - completion: Provider de candidatos ranqueados
    - server: Servidor principal usando pygls

Exemplo de uso:
    esdsl-lsp
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
import re


def _read_version_from_pyproject() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    try:
        text = pyproject.read_text(encoding="utf-8")
    except OSError:
        return "0.0.0"
    match = re.search(r'(?m)^version = "([^"]+)"\s*$', text)
    return match.group(1) if match else "0.0.0"


try:
    __version__ = _pkg_version("esdsl-lsp")
except PackageNotFoundError:
    __version__ = _read_version_from_pyproject()

__all__ = ["scanner", "context", "catalog", "fields", "completion", "server"]
