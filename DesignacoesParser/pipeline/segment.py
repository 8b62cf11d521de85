# -*- coding: utf-8 -*-
"""Segmentação: agrupar fragmentos posicionados em linhas e as linhas em blocos de semana."""

import re
from dataclasses import dataclass, field
from typing import Iterable, List

import config

# "SEMANA DE ..." ou cabeçalho tipo "4-10 DE NOVEMBRO" / "30 DE DEZEMBRO - 5 DE JANEIRO"
WEEK_HEADING = re.compile(r"^\d{1,2}.*\d{1,2}\s+DE\s+[A-ZÇ]+", re.IGNORECASE)
ROLE_LABEL = re.compile(r"^(Estudante|Ajudante|Leitor|Dirigente):?\s*", re.IGNORECASE)
RE_ONLY_DIGITS = re.compile(r"^\d+$")


@dataclass(frozen=True)
class Fragment:
    """Pedaço de texto da página com a posição da linha de base (y cresce para cima)."""
    text: str
    x: float
    y: float
    width: float = 0.0

    @property
    def end_x(self) -> float:
        return self.x + self.width


@dataclass
class Line:
    """Fragmentos que estão visualmente na mesma linha, da esquerda para a direita."""
    y: float
    fragments: List[Fragment] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Junção sem espaços: reconstrói títulos quebrados em vários fragmentos."""
        return "".join(f.text for f in self.fragments).strip()

    @property
    def text_with_spaces(self) -> str:
        """Junção com um espaço: preserva a fronteira entre palavras-chave."""
        return " ".join(f.text for f in self.fragments).strip()


def group_items_by_lines(fragments: Iterable[Fragment]) -> List[Line]:
    """
    Agrupa fragmentos por Y (de cima para baixo) com tolerância de
    config.LINE_Y_TOLERANCE; dentro da linha, ordena por X.
    """
    items = sorted(fragments, key=lambda f: (-f.y, f.x))
    if not items:
        return []

    lines: List[Line] = []
    current = Line(y=items[0].y, fragments=[items[0]])
    for item in items[1:]:
        if abs(item.y - current.y) < config.LINE_Y_TOLERANCE:
            current.fragments.append(item)
        else:
            current.fragments.sort(key=lambda f: f.x)
            lines.append(current)
            current = Line(y=item.y, fragments=[item])
    current.fragments.sort(key=lambda f: f.x)
    lines.append(current)
    return lines


def split_names_by_gap(fragments: Iterable[Fragment], start_x: float) -> List[str]:
    """
    Separa nomes impressos lado a lado (colunas Estudante / Ajudante).

    Só considera fragmentos a partir de start_x. Abre um novo nome quando o
    início do fragmento está a mais de config.COLUMN_GAP do início do
    anterior e o espaço visível entre os dois passa de config.WORD_SPACE_GAP.
    Fragmentos largos colados (sobrenome) continuam no mesmo nome.
    """
    candidates = [f for f in fragments if f.x >= start_x and f.text.strip()]
    if not candidates:
        return []

    names: List[str] = []
    current_parts = [candidates[0].text]
    prev = candidates[0]
    for item in candidates[1:]:
        if item.x - prev.x > config.COLUMN_GAP and item.x - prev.end_x > config.WORD_SPACE_GAP:
            names.append(" ".join(current_parts).strip())
            current_parts = [item.text]
        else:
            current_parts.append(item.text)
        prev = item
    names.append(" ".join(current_parts).strip())

    cleaned = (" ".join(ROLE_LABEL.sub("", n).split()) for n in names)
    return [n for n in cleaned if len(n) > 2 and not RE_ONLY_DIGITS.match(n)]


def is_week_heading_line(line: Line) -> bool:
    text = line.text_with_spaces
    return "SEMANA" in text.upper() or bool(WEEK_HEADING.match(text))


def split_week_blocks(lines: List[Line]) -> List[List[Line]]:
    """
    Corta as linhas da página em blocos, um por semana. Cada cabeçalho de
    semana abre um bloco; blocos com menos de config.MIN_BLOCK_LINES linhas
    são descartados.
    """
    blocks: List[List[Line]] = []
    current: List[Line] = []
    for line in lines:
        if is_week_heading_line(line):
            if current:
                blocks.append(current)
            current = [line]
        else:
            current.append(line)
    if current:
        blocks.append(current)
    return [b for b in blocks if len(b) >= config.MIN_BLOCK_LINES]
