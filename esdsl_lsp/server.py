"""
server.py - Servidor LSP principal para a Query DSL do Elasticsearch usando pygls

Propósito:
    Servidor Language Server Protocol que oferece autocomplete sensível ao
    contexto e documentação (hover) para corpos de busca da Query DSL em
    editores compatíveis.

Componentes principais:
    - EsDslLanguageServer: Servidor principal com pygls
    - completion / hover: Features do textDocument
    - Comandos esdsl/*: Gerenciam o snapshot de campos por workspace
    - Event handlers: did_open, did_close, did_change_configuration

Dependências críticas:
    - pygls: Framework LSP
    - esdsl_lsp.completion: Provider de completion (core puro)
    - esdsl_lsp.cache: Snapshots de campos por workspace

Exemplo de uso:
    esdsl-lsp
    python -m esdsl_lsp.server

Notas de implementação:
    - Comunica via STDIO (entrada/saída padrão)
    - O core nunca busca mappings: o cliente envia campos via comando
      ou aponta um arquivo de mapping na configuração
    - Tratamento robusto de exceções (nunca crasha)
    - Completion pode ser desabilitado via esdsl.completion.enabled
"""

from __future__ import annotations

import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_HOVER,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    CompletionTriggerKind,
    DidChangeConfigurationParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    HoverParams,
    Position,
)
from pygls.server import LanguageServer

from esdsl_lsp.cache import FieldMappingCache
from esdsl_lsp.completion import compute_completions
from esdsl_lsp.context import (
    can_add_aggregation,
    can_add_query_type,
    get_context,
    parent_agg_type,
    parent_query_type,
)
from esdsl_lsp.converters import position_to_offset
from esdsl_lsp.fields import FieldData, MappingError, field_data_from_payload, load_mapping_file
from esdsl_lsp.hover import compute_hover

# Configuração de logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Chave do escopo global (sem workspace resolvido)
GLOBAL_KEY = ""

TRIGGER_CHARACTERS = ['"', ":", "{", "[", ","]


class EsDslLanguageServer(LanguageServer):
    """
    Servidor LSP especializado para a Query DSL do Elasticsearch.

    Attributes:
        workspace_documents: Mapeamento de workspace_key -> set de URIs abertos
        completion_enabled: Flag de controle para habilitar/desabilitar completion
        field_cache: Snapshots de campos (mapping) por workspace
        mapping_file: Último arquivo de mapping configurado (esdsl.mappingFile)
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.workspace_documents: dict[str, set[str]] = {}
        self.completion_enabled: bool = True  # Habilitado por padrão
        self.field_cache: FieldMappingCache = FieldMappingCache()
        self.mapping_file: Optional[str] = None


# Instância global do servidor
server = EsDslLanguageServer("esdsl-lsp", "v0.1.0")


def _first_arg(params) -> dict:
    """Normaliza argumentos de comando: pygls entrega lista ou dict."""
    if isinstance(params, dict):
        return params
    if isinstance(params, (list, tuple)) and params and isinstance(params[0], dict):
        return params[0]
    return {}


def _workspace_folders(ls: EsDslLanguageServer) -> list:
    workspace = getattr(ls, "workspace", None)
    folders = getattr(workspace, "folders", None) if workspace else None
    if not folders:
        return []
    return list(folders.values())


def _workspace_root_for_uri(ls: EsDslLanguageServer, uri: Optional[str]) -> Optional[str]:
    """
    Encontra a pasta de workspace que contém o documento.

    Estratégia:
        1. Pasta cujo URI é prefixo do URI do documento (a mais longa vence)
        2. Primeira pasta de workspace do LSP
    """
    folders = _workspace_folders(ls)
    if not folders:
        return None
    if uri:
        matches = [
            folder.uri for folder in folders
            if uri.startswith(folder.uri.rstrip("/") + "/")
        ]
        if matches:
            return max(matches, key=len)
    return folders[0].uri


def _resolve_workspace_root(ls: EsDslLanguageServer, params) -> Optional[str]:
    """
    Resolve o workspace root a partir dos parâmetros ou documentos abertos.

    Estratégia:
        1. 'workspaceRoot' / 'rootUri' / 'rootPath' nos parâmetros
        2. 'uri' de documento nos parâmetros → pasta de workspace que o contém
        3. Workspace do primeiro documento aberto
        4. Primeira pasta de workspace do LSP
    """
    args = _first_arg(params)
    for key in ("workspaceRoot", "rootUri", "rootPath"):
        if args.get(key):
            return args[key]

    if args.get("uri"):
        return _workspace_root_for_uri(ls, args["uri"])

    # Fallback: usa primeiro documento aberto
    for workspace_key, doc_uris in ls.workspace_documents.items():
        if doc_uris and workspace_key:
            return workspace_key

    return _workspace_root_for_uri(ls, None)


def _normalize_workspace_path(workspace_root) -> Optional[Path]:
    """
    Normaliza workspace_root para Path, aceitando path ou file URI.

    Mantém o caminho sem resolve() para evitar dependência do filesystem.
    """
    if not workspace_root:
        return None

    if isinstance(workspace_root, Path):
        return workspace_root

    if not isinstance(workspace_root, str):
        return None

    if workspace_root.startswith("file://"):
        parsed = urlparse(workspace_root)
        path_str = unquote(parsed.path or "")

        # UNC paths: file://server/share/path -> //server/share/path
        if parsed.netloc:
            path_str = f"//{parsed.netloc}{path_str}"

        # Windows drive: /d:/path -> d:/path
        if len(path_str) >= 3 and path_str[0] == "/" and path_str[2] == ":":
            path_str = path_str[1:]

        return Path(path_str)

    return Path(workspace_root)


def _workspace_key(workspace_root) -> str:
    """Normaliza workspace_root para chave consistente do cache ("" = global)."""
    path = _normalize_workspace_path(workspace_root)
    if not path:
        return GLOBAL_KEY

    key = path.as_posix()
    if sys.platform.startswith("win"):
        key = key.lower()
    return key


def _field_data_for_uri(ls: EsDslLanguageServer, uri: str) -> Optional[FieldData]:
    """
    Helper: snapshot de campos para o documento.

    Usa o snapshot do workspace do documento e, se não houver, o global.
    """
    workspace_key = _workspace_key(_workspace_root_for_uri(ls, uri))
    cached = ls.field_cache.get(workspace_key) or ls.field_cache.get(GLOBAL_KEY)
    return cached.data if cached else None


def _load_mapping_into_cache(
    ls: EsDslLanguageServer, mapping_path: str, workspace_root: Optional[str]
) -> FieldData:
    path = Path(mapping_path).expanduser()
    if not path.is_absolute():
        base = _normalize_workspace_path(workspace_root)
        if base:
            path = base / path
    data = load_mapping_file(path)
    ls.field_cache.put(_workspace_key(workspace_root), data, str(path))
    return data


@server.feature(
    TEXT_DOCUMENT_COMPLETION,
    CompletionOptions(trigger_characters=TRIGGER_CHARACTERS),
)
def completion(ls: EsDslLanguageServer, params: CompletionParams):
    """
    Autocomplete da Query DSL: propriedades, tipos de query/agregação,
    campos do mapping, valores enumerados e snippets.

    Pedido explícito (Ctrl+Space) é reconhecido pelo triggerKind Invoked.
    """
    if not ls.completion_enabled:
        return CompletionList(is_incomplete=False, items=[])

    uri = params.text_document.uri
    try:
        doc = ls.workspace.get_document(uri)

        explicit = True
        if params.context is not None:
            explicit = params.context.trigger_kind == CompletionTriggerKind.Invoked

        field_data = _field_data_for_uri(ls, uri)
        return compute_completions(
            doc.source, params.position, field_data, explicit, doc.position_codec
        )
    except Exception as e:
        logger.error(f"Erro ao computar completion para {uri}: {e}", exc_info=True)
        return None


@server.feature(TEXT_DOCUMENT_HOVER)
def hover(ls: EsDslLanguageServer, params: HoverParams):
    """
    Retorna documentação ao passar o mouse.

    Tipo de query/agregação, propriedade da raiz ou cláusula bool.
    """
    uri = params.text_document.uri
    try:
        doc = ls.workspace.get_document(uri)
        return compute_hover(doc.source, params.position, doc.position_codec)
    except Exception as e:
        logger.error(f"Erro ao computar hover para {uri}: {e}", exc_info=True)
        return None


@server.command("esdsl/setFieldMappings")
def set_field_mappings(ls: EsDslLanguageServer, params) -> dict:
    """
    Armazena snapshot de campos enviado pelo cliente.

    Formato:
        {"workspaceRoot": "...", "fields": {"indice": [...]}, "indices": [...]}
    """
    try:
        args = _first_arg(params)
        data = field_data_from_payload(args)
        workspace_key = _workspace_key(_resolve_workspace_root(ls, params))
        ls.field_cache.put(workspace_key, data, "payload")
        return {
            "success": True,
            "workspace": workspace_key,
            "indices": list(data.indices),
            "field_count": data.field_count(),
        }
    except MappingError as e:
        return {"success": False, "error": str(e)}
    except Exception as e:
        logger.error(f"setFieldMappings falhou: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@server.command("esdsl/loadMapping")
def load_mapping(ls: EsDslLanguageServer, params) -> dict:
    """
    Lê arquivo de mapping (resposta de GET _mapping) e armazena em cache.

    Caminhos relativos são resolvidos a partir do workspace.
    """
    args = _first_arg(params)
    mapping_path = args.get("path")
    if not mapping_path:
        return {"success": False, "error": "Caminho do mapping não informado"}

    try:
        workspace_root = _resolve_workspace_root(ls, params)
        data = _load_mapping_into_cache(ls, mapping_path, workspace_root)
        return {
            "success": True,
            "workspace": _workspace_key(workspace_root),
            "indices": list(data.indices),
            "field_count": data.field_count(),
        }
    except MappingError as e:
        return {"success": False, "error": str(e)}
    except OSError as e:
        return {"success": False, "error": f"Não foi possível ler {mapping_path}: {e}"}
    except Exception as e:
        logger.error(f"loadMapping falhou: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@server.command("esdsl/clearFieldMappings")
def clear_field_mappings(ls: EsDslLanguageServer, params) -> dict:
    """Remove snapshot de campos do workspace."""
    workspace_key = _workspace_key(_resolve_workspace_root(ls, params))
    had_fields = ls.field_cache.has(workspace_key)
    ls.field_cache.invalidate(workspace_key)
    return {"success": True, "workspace": workspace_key, "cleared": had_fields}


@server.command("esdsl/getContext")
def cmd_get_context(ls: EsDslLanguageServer, params) -> dict:
    """
    Debug: retorna o contexto classificado na posição informada.

    Formato: {"uri": "...", "line": 0, "character": 0}

    character segue a codificação negociada com o cliente (UTF-16 por padrão).
    """
    args = _first_arg(params)
    uri = args.get("uri")
    if not uri:
        return {"success": False, "error": "URI não informada"}

    try:
        doc = ls.workspace.get_document(uri)
        position = Position(
            line=int(args.get("line", 0)),
            character=int(args.get("character", 0)),
        )
        offset = position_to_offset(doc.source, position, doc.position_codec)
        context = get_context(doc.source, offset)
        info = context.to_dict()
        info.update(
            parentQueryType=parent_query_type(context),
            parentAggType=parent_agg_type(context),
            canAddQueryType=can_add_query_type(context),
            canAddAggregation=can_add_aggregation(context),
        )
        return {"success": True, "context": info}
    except Exception as e:
        logger.error(f"getContext falhou: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: EsDslLanguageServer, params: DidOpenTextDocumentParams) -> None:
    """Registra documento aberto no workspace correspondente."""
    uri = params.text_document.uri
    logger.info(f"Documento aberto: {uri}")
    workspace_key = _workspace_key(_workspace_root_for_uri(ls, uri))
    ls.workspace_documents.setdefault(workspace_key, set()).add(uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: EsDslLanguageServer, params: DidCloseTextDocumentParams) -> None:
    """Remove documento do rastreamento de workspace."""
    uri = params.text_document.uri
    logger.info(f"Documento fechado: {uri}")
    workspace_key = _workspace_key(_workspace_root_for_uri(ls, uri))
    if workspace_key in ls.workspace_documents:
        ls.workspace_documents[workspace_key].discard(uri)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(
    ls: EsDslLanguageServer, params: DidChangeConfigurationParams
) -> None:
    """
    Handler para mudanças na configuração do workspace.

    Lê esdsl.completion.enabled e esdsl.mappingFile. A configuração pode vir
    como {'esdsl': {...}} ou já ser a seção; valores que não são dict caem
    nos padrões.
    """
    try:
        settings = params.settings
        esdsl_config = {}
        if isinstance(settings, dict):
            esdsl_config = settings.get("esdsl", settings)
            if not isinstance(esdsl_config, dict):
                esdsl_config = {}

        completion_config = esdsl_config.get("completion", {})
        if isinstance(completion_config, dict):
            ls.completion_enabled = bool(completion_config.get("enabled", True))
        else:
            ls.completion_enabled = True

        logger.info(f"Configuração atualizada: completion.enabled = {ls.completion_enabled}")

        mapping_file = esdsl_config.get("mappingFile")
        if isinstance(mapping_file, str) and mapping_file and mapping_file != ls.mapping_file:
            workspace_root = _workspace_root_for_uri(ls, None)
            try:
                _load_mapping_into_cache(ls, mapping_file, workspace_root)
                ls.mapping_file = mapping_file
            except (MappingError, OSError) as e:
                logger.warning(f"Falha ao carregar mappingFile '{mapping_file}': {e}")

    except Exception as e:
        logger.error(f"Erro ao processar mudança de configuração: {e}", exc_info=True)


def main() -> None:
    """
    Ponto de entrada principal do servidor.

    Inicia servidor LSP em modo STDIO.
    """
    logger.info("Iniciando Elasticsearch DSL Language Server...")
    logger.info("Python executable: %s", sys.executable)
    try:
        logger.info("esdsl-lsp package: %s", metadata.version("esdsl-lsp"))
    except metadata.PackageNotFoundError:
        logger.warning("Pacote esdsl-lsp não instalado; executando a partir do código-fonte")
    server.start_io()


if __name__ == "__main__":
    main()
