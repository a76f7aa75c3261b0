"""
scanner.py - Varredura estrutural de JSON incompleto até o cursor

Propósito:
    Percorre o texto do documento caractere a caractere, do início até a
    posição do cursor, e reconstrói o "lugar" do cursor na estrutura JSON:
    caminho de chaves, profundidade, arrays abertos, chave corrente e se o
    cursor está logo após um ":" ou dentro de uma string.

Componentes principais:
    - ParseState: Estado imutável produzido pela varredura
    - scan: Varredura principal (O(cursor_pos), nunca levanta exceção)
    - current_word: Palavra sendo digitada antes do cursor
    - is_in_string: Verifica se o cursor está dentro de string não terminada
    - is_after_colon: Verifica se o cursor aguarda um valor ("chave": |)

Notas de implementação:
    - O texto quase nunca é JSON válido (usuário está editando)
    - Não há AST: só pilhas e contadores, reconstruídos a cada chamada
    - Arrays não entram no path; só a chave que introduziu o array
    - Fechamentos sem abertura correspondente são ignorados
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Delimitadores que encerram a palavra corrente
_WORD_DELIMITERS = frozenset(" \t\r\n\f\v{}[]:,\"")


@dataclass(frozen=True)
class ParseState:
    """Estado estrutural do documento na posição do cursor."""

    path: tuple[str, ...] = ()
    depth: int = 0
    in_array: bool = False
    array_depths: tuple[int, ...] = ()
    current_key: Optional[str] = None
    expecting_value: bool = False
    in_string: bool = False
    string_start: int = -1
    brace_stack: tuple[str, ...] = ()

    @property
    def parent_key(self) -> Optional[str]:
        return self.path[-1] if self.path else None


def _clamp(text: str, cursor_pos: int) -> int:
    if cursor_pos < 0:
        return 0
    return min(cursor_pos, len(text))


def scan(text: str, cursor_pos: int) -> ParseState:
    """
    Varre o texto de 0 até cursor_pos e retorna o ParseState.

    Args:
        text: Texto completo do documento (não precisa ser JSON válido)
        cursor_pos: Offset do cursor (0-based); valores fora do intervalo
                    são ajustados para [0, len(text)]

    Returns:
        ParseState imutável com path, profundidade e flags do cursor

    Regras:
        - String: só '"' não escapado fecha; ao fechar, se não estamos
          atribuindo um valor, o conteúdo vira chave candidata
        - '{' / '[': abre container e empilha a chave candidata no path
        - '}' / ']': fecha container e desempilha o path apenas se aquele
          container empilhou uma chave
        - ':': promove a chave candidata a current_key
        - ',': encerra o par chave/valor
    """
    end = _clamp(text, cursor_pos)

    path: list[str] = []
    # Cada container aberto guarda (caractere, empilhou_chave)
    frames: list[tuple[str, bool]] = []
    array_depths: list[int] = []
    depth = 0
    current_key: Optional[str] = None
    pending_key: Optional[str] = None
    expecting_value = False
    in_string = False
    escaped = False
    string_start = -1

    for i in range(end):
        char = text[i]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
                if not expecting_value and pending_key is None:
                    pending_key = text[string_start + 1:i]
            continue

        if char == '"':
            in_string = True
            string_start = i
        elif char == "{" or char == "[":
            if char == "[":
                array_depths.append(depth)
            depth += 1
            pushed = pending_key is not None
            if pushed:
                path.append(pending_key)
                pending_key = None
            frames.append((char, pushed))
            if char == "{":
                expecting_value = False
        elif char == "}" or char == "]":
            if frames:
                opener, pushed = frames.pop()
                depth -= 1
                if opener == "[" and array_depths:
                    array_depths.pop()
                if pushed and path:
                    path.pop()
            expecting_value = False
            pending_key = None
        elif char == ":":
            expecting_value = True
            if pending_key is not None:
                current_key = pending_key
        elif char == ",":
            expecting_value = False
            pending_key = None
            current_key = None

    return ParseState(
        path=tuple(path),
        depth=depth,
        in_array=bool(array_depths),
        array_depths=tuple(array_depths),
        current_key=current_key,
        expecting_value=expecting_value,
        in_string=in_string,
        string_start=string_start if in_string else -1,
        brace_stack=tuple(opener for opener, _ in frames),
    )


def current_word(text: str, pos: int) -> str:
    """Retorna o maior sufixo sem delimitadores que termina no cursor."""
    pos = _clamp(text, pos)
    start = pos
    while start > 0 and text[start - 1] not in _WORD_DELIMITERS:
        start -= 1
    return text[start:pos]


def is_in_string(text: str, pos: int) -> bool:
    """Verifica se o cursor está dentro de uma string ainda não fechada."""
    pos = _clamp(text, pos)
    inside = False
    escaped = False
    for i in range(pos):
        char = text[i]
        if inside and escaped:
            escaped = False
        elif inside and char == "\\":
            escaped = True
        elif char == '"':
            inside = not inside
    return inside


def is_after_colon(text: str, pos: int) -> bool:
    """
    Verifica se o cursor aguarda um valor (após "chave":).

    Olha para trás ignorando espaços e aspas; qualquer outro caractere
    antes de encontrar ':' significa que não estamos após dois-pontos.
    """
    pos = _clamp(text, pos)
    for i in range(pos - 1, -1, -1):
        char = text[i]
        if char == ":":
            return True
        if char in ",{[":
            return False
        if not char.isspace() and char != '"':
            return False
    return False
