# -*- coding: utf-8 -*-
"""
Entidades: designações de cada semana a partir dos blocos de linhas do PDF.

Lógica principal: uma única passada pelas linhas do bloco. Cada linha é
testada contra LINE_RULES, em ordem, e a primeira regra que reconhece a
linha a consome. Partes numeradas cujo nome não aparece na própria linha
(nem na seguinte) ficam em filas de pendentes, resolvidas depois pelos
cabeçalhos "Estudante(s)" / "Ajudante(s)" ou por linhas só com o nome.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Deque, List, NamedTuple, Optional, Sequence, Tuple

import config
from .dates import standardize_week_date
from .ingest import detect_year_context, extract_fragments_from_pdf
from .records import (
    CONDUCTOR_TITLE,
    FINAL_COMMENTS_TITLE,
    HELPER_TITLE,
    READER_TITLE,
    ParticipationType,
    type_for_part_number,
)
from .segment import Fragment, Line, group_items_by_lines, split_names_by_gap, split_week_blocks

logger = logging.getLogger(__name__)

RE_TIME_MARKER = re.compile(r"\b\d{1,2}:\d{2}\b")
RE_PART_HEADING = re.compile(r"^\d+\.")
# "4. Iniciando conversas (3 min)" -> número, título, minutos
RE_NUMBERED_PART = re.compile(r"^.*?(\d+)\.\s+(.*?)\((\d+)\s*min.*?\)", re.IGNORECASE)
RE_DURATION_TOKEN = re.compile(r"min\.?\s*\)", re.IGNORECASE)
RE_PRESIDENT_LABEL = re.compile(r"Presidente:", re.IGNORECASE)
RE_PRAYER_LABEL = re.compile(r"Ora[çc][ãa]o:", re.IGNORECASE)
RE_FINAL_COMMENTS_LABEL = re.compile(r"Coment[áa]rios?\s*finais:?", re.IGNORECASE)
RE_PARENTHESIS = re.compile(r"\(.*?\)")
RE_INLINE_CONDUCTOR = re.compile(r"Dirigente:\s*(.+?)(?=\s*Leitor:|$)", re.IGNORECASE)
RE_INLINE_READER = re.compile(r"Leitor:\s*(.+)$", re.IGNORECASE)
RE_STUDENT_HEADER = re.compile(r"^ESTUDANTES?", re.IGNORECASE)
RE_HELPER_HEADER = re.compile(r"^AJUDANTES?", re.IGNORECASE)
RE_LOCATION_HEADER = re.compile(r"(SAL[ÃA]O|SALA|AUDIT[ÓO]RIO)", re.IGNORECASE)
RE_COLUMN_LABEL = re.compile(r"^(Estudantes?|Ajudantes?)[:\s-]*", re.IGNORECASE)
RE_ONLY_DIGITS = re.compile(r"^\d+$")
RE_HAS_LETTER = re.compile(r"[A-Za-zÀ-ÿ]")

STOP_WORDS = {
    "ACONSELHAMENTO",
    "COMENTÁRIOS INICIAIS", "COMENTARIOS INICIAIS",
    "COMENTÁRIOS FINAIS", "COMENTARIOS FINAIS",
}
BOUNDARY_PREFIXES = (
    "CÂNTICO", "CANTICO", "COMENT", "ORAÇÃO", "ORACAO",
    "PRESIDENTE", "DIRIGENTE", "LEITOR", "S-",
)

_HELPER_EXCLUDED = (
    "discurso", "necessidades locais", "coment",
    "estudo bíblico de congregação", "estudo biblico de congregacao",
)
_HELPER_KEYWORDS = (
    "iniciando", "cultivando", "fazendo", "revisita", "demonstra",
    "explicando", "estudo bíblico", "estudo biblico", "conversas",
)

_CONDUCTOR_STOPS = ("LEITOR", "ORAÇÃO", "ORACAO", "CÂNTICO", "CANTICO")
_READER_STOPS = ("DIRIGENTE", "ORAÇÃO", "ORACAO", "CÂNTICO", "CANTICO")
_STUDENT_STOPS = ("AJUDANTE", "AJUDANTES", "DIRIGENTE", "LEITOR")
_HELPER_STOPS = ("ESTUDANTE", "ESTUDANTES", "DIRIGENTE", "LEITOR")
_LOCATION_STOPS = ("ESTUDANTE", "ESTUDANTES", "AJUDANTE", "AJUDANTES")


@dataclass
class ParsedParticipation:
    """Uma designação lida do PDF, antes de virar registro."""
    part_title: str
    publisher_name: str
    order: int
    part_number: Optional[int] = None
    duration: Optional[int] = None


@dataclass
class HistoricalWeek:
    """Semana reconhecida no PDF com suas designações em ordem."""
    week: str
    participations: List[ParsedParticipation]


@dataclass
class PendingPart:
    part_title: str
    part_number: Optional[int] = None


@dataclass
class BlockScanState:
    """Estado da passada por um bloco de semana."""
    lines: List[Line]
    participations: List[ParsedParticipation] = field(default_factory=list)
    pending_student_parts: Deque[PendingPart] = field(default_factory=deque)
    pending_helper_parts: Deque[PendingPart] = field(default_factory=deque)
    president_name: str = ""
    running_order: int = 0
    index: int = 0

    @property
    def line(self) -> Line:
        return self.lines[self.index]

    def push(
        self,
        part_title: str,
        publisher_name: str,
        part_number: Optional[int] = None,
        duration: Optional[int] = None,
    ) -> None:
        self.participations.append(ParsedParticipation(
            part_title=part_title,
            publisher_name=publisher_name,
            order=self.running_order,
            part_number=part_number,
            duration=duration,
        ))
        self.running_order += 1


class LineRule(NamedTuple):
    name: str
    matches: Callable[[BlockScanState, str], bool]
    handle: Callable[[BlockScanState, str], None]


# ---------------------------------------------------------------------------
# Predicados de linha
# ---------------------------------------------------------------------------

def is_section_boundary(text: str) -> bool:
    """True se a linha abre outro elemento da pauta; encerra qualquer coleta de nomes."""
    upper = text.strip().upper()
    return (
        bool(RE_TIME_MARKER.search(text))
        or "SEMANA" in upper
        or bool(RE_PART_HEADING.match(text.strip()))
        or upper in STOP_WORDS
        or upper.startswith(BOUNDARY_PREFIXES)
    )


def is_student_header(text: str) -> bool:
    return bool(RE_STUDENT_HEADER.match(text.strip()))


def is_helper_header(text: str) -> bool:
    return bool(RE_HELPER_HEADER.match(text.strip()))


def is_location_header(text: str) -> bool:
    return bool(RE_LOCATION_HEADER.search(text))


def is_standalone_name(text: str) -> bool:
    """Linha que contém só um nome de pessoa."""
    trimmed = (text or "").strip()
    if not trimmed:
        return False
    if (
        is_section_boundary(trimmed)
        or is_student_header(trimmed)
        or is_helper_header(trimmed)
        or is_location_header(trimmed)
    ):
        return False
    if "min)" in trimmed.lower() or RE_ONLY_DIGITS.match(trimmed):
        return False
    return bool(RE_HAS_LETTER.search(trimmed))


def part_needs_helper(part_title: str, part_number: Optional[int] = None) -> bool:
    """Partes de estudante do ministério têm ajudante; discursos e o EBC não."""
    title = part_title.lower()
    if any(word in title for word in _HELPER_EXCLUDED):
        return False
    if any(word in title for word in _HELPER_KEYWORDS):
        return True
    return part_number is not None and type_for_part_number(part_number) is ParticipationType.MINISTRY


def _starts_with_any(text: str, headers: Sequence[str]) -> bool:
    upper = text.upper()
    return any(upper.startswith(h) for h in headers)


# ---------------------------------------------------------------------------
# Coleta de nomes
# ---------------------------------------------------------------------------

def collect_names_after_line(
    lines: List[Line],
    start_index: int,
    stop_headers: Sequence[str] = (),
) -> Tuple[List[str], int]:
    """
    Nomes em linhas próprias depois de start_index, até um cabeçalho de
    parada ou fronteira de seção. Devolve (nomes, índice da última linha lida).
    """
    names: List[str] = []
    idx = start_index + 1
    while idx < len(lines):
        candidate = lines[idx].text_with_spaces
        if not candidate:
            idx += 1
            continue
        if _starts_with_any(candidate, stop_headers):
            break
        if is_section_boundary(candidate) or is_location_header(candidate):
            break
        if is_standalone_name(candidate):
            names.append(candidate)
        idx += 1
    return names, idx - 1


def find_next_name_line(
    lines: List[Line],
    start_index: int,
    stop_headers: Sequence[str] = (),
) -> Optional[Tuple[str, int]]:
    """Primeira linha com nome depois de start_index: (nome, índice) ou None."""
    idx = start_index + 1
    while idx < len(lines):
        candidate = lines[idx].text_with_spaces
        if candidate:
            if _starts_with_any(candidate, stop_headers):
                return None
            if is_section_boundary(candidate) or is_location_header(candidate):
                return None
            if is_standalone_name(candidate):
                return candidate, idx
        idx += 1
    return None


def _assign_pending(
    state: BlockScanState,
    names: List[str],
    queue: Deque[PendingPart],
    helper: bool = False,
) -> None:
    """
    Distribui os nomes, na ordem, para as partes pendentes mais antigas.
    O ajudante leva o número da parte dele, para ficar junto dela na importação.
    """
    for raw in names:
        name = " ".join(raw.split())
        if not name:
            continue
        if not queue:
            break
        target = queue.popleft()
        if helper:
            state.push(HELPER_TITLE, name, target.part_number)
        else:
            state.push(target.part_title, name, target.part_number)


def _inline_column_name(text: str) -> str:
    """Nome escrito na própria linha do cabeçalho ("Estudante: FULANO")."""
    rest = RE_COLUMN_LABEL.sub("", text.strip()).strip().lstrip("/|-: ").strip()
    if not rest or rest.upper() == text.strip().upper():
        return ""
    if is_student_header(rest) or is_helper_header(rest):
        return ""
    return rest if is_standalone_name(rest) else ""


def _duration_anchor(line: Line) -> float:
    """X logo depois do "(N min)" na linha."""
    for frag in line.fragments:
        if RE_DURATION_TOKEN.search(frag.text):
            return frag.end_x
    for frag in line.fragments:
        if ")" in frag.text:
            return frag.end_x
    return config.FALLBACK_ANCHOR_X


def _label_end(fragments: List[Fragment], label: str) -> Optional[float]:
    for frag in fragments:
        if frag.text.strip().upper().startswith(label):
            return frag.end_x
    return None


# ---------------------------------------------------------------------------
# Regras (ordem = prioridade)
# ---------------------------------------------------------------------------

def _handle_president(state: BlockScanState, text: str) -> None:
    parts = RE_PRESIDENT_LABEL.split(text, maxsplit=1)
    name = parts[1].strip() if len(parts) > 1 else ""
    if name:
        state.president_name = name
        state.push(ParticipationType.PRESIDENT.value, name)


def _handle_prayer(state: BlockScanState, text: str) -> None:
    # Heurística: não há marcador explícito de abertura/encerramento no PDF
    if state.index < len(state.lines) / 2:
        title = ParticipationType.OPENING_PRAYER.value
    else:
        title = ParticipationType.CLOSING_PRAYER.value
    parts = RE_PRAYER_LABEL.split(text, maxsplit=1)
    name = parts[1].strip() if len(parts) > 1 else ""
    if name:
        state.push(title, name)


def _handle_song(state: BlockScanState, text: str) -> None:
    state.push(" ".join(text.split()), "")


def _handle_comments(state: BlockScanState, text: str) -> None:
    if "INICIAIS" in text.upper():
        return
    parts = RE_FINAL_COMMENTS_LABEL.split(text, maxsplit=1)
    owner = RE_PARENTHESIS.sub("", parts[1]).strip() if len(parts) > 1 else ""
    owner = owner or state.president_name
    if owner:
        state.push(FINAL_COMMENTS_TITLE, owner)


def _handle_numbered_part(state: BlockScanState, text: str) -> None:
    m = RE_NUMBERED_PART.match(text)
    part_number = int(m.group(1))
    part_title = m.group(2).strip()
    duration = int(m.group(3))
    needs_helper = part_needs_helper(part_title, part_number)

    anchor = _duration_anchor(state.line)
    names = split_names_by_gap(state.line.fragments, anchor + config.ANCHOR_PADDING)

    if not names and state.index + 1 < len(state.lines):
        next_line = state.lines[state.index + 1]
        if not is_section_boundary(next_line.text_with_spaces):
            names = split_names_by_gap(next_line.fragments, config.NEXT_LINE_ANCHOR_X)
            if names:
                state.index += 1

    if names:
        state.push(part_title, names[0], part_number, duration)
        if needs_helper:
            if len(names) > 1:
                state.push(HELPER_TITLE, names[1], part_number)
            else:
                state.pending_helper_parts.append(PendingPart(part_title, part_number))
        return

    logger.debug("Parte %d sem nome, aguardando: %s", part_number, part_title)
    state.pending_student_parts.append(PendingPart(part_title, part_number))
    if needs_helper:
        state.pending_helper_parts.append(PendingPart(part_title, part_number))


def _handle_inline_study_roles(state: BlockScanState, text: str) -> None:
    m = RE_INLINE_CONDUCTOR.search(text)
    if m and m.group(1).strip():
        state.push(CONDUCTOR_TITLE, m.group(1).strip())
    m = RE_INLINE_READER.search(text)
    if m and m.group(1).strip():
        state.push(READER_TITLE, m.group(1).strip())


def _study_role_from_columns(state: BlockScanState, label: str, title: str) -> None:
    """Nome do dirigente/leitor em outra coluna da mesma linha do rótulo."""
    if state.pending_student_parts:
        return
    end_x = _label_end(state.line.fragments, label)
    if end_x is None:
        return
    names = split_names_by_gap(state.line.fragments, end_x + config.ANCHOR_PADDING)
    if names:
        state.push(title, names[0])


def _handle_study_heading(label: str, title: str, stops: Sequence[str]):
    def handle(state: BlockScanState, text: str) -> None:
        found = find_next_name_line(state.lines, state.index, stops)
        if found:
            name, idx = found
            state.push(title, name)
            state.index = idx
        else:
            _study_role_from_columns(state, label, title)
    return handle


def _handle_column_header(stops: Sequence[str], helper: bool):
    def handle(state: BlockScanState, text: str) -> None:
        names: List[str] = []
        inline = _inline_column_name(text)
        if inline:
            names.append(inline)
        collected, next_index = collect_names_after_line(state.lines, state.index, stops)
        names.extend(collected)
        queue = state.pending_helper_parts if helper else state.pending_student_parts
        _assign_pending(state, names, queue, helper=helper)
        state.index = next_index
    return handle


def _handle_location(state: BlockScanState, text: str) -> None:
    collected, next_index = collect_names_after_line(state.lines, state.index, _LOCATION_STOPS)
    _assign_pending(state, collected, state.pending_student_parts)
    state.index = next_index


def _handle_standalone_name(state: BlockScanState, text: str) -> None:
    _assign_pending(state, [text], state.pending_student_parts)


LINE_RULES: Tuple[LineRule, ...] = (
    LineRule("president", lambda s, t: "PRESIDENTE:" in t.upper(), _handle_president),
    LineRule(
        "prayer",
        lambda s, t: "ORAÇÃO:" in t.upper() or "ORACAO:" in t.upper(),
        _handle_prayer,
    ),
    LineRule(
        "song",
        lambda s, t: "CÂNTICO" in t.upper() or "CANTICO" in t.upper(),
        _handle_song,
    ),
    LineRule("comments", lambda s, t: t.strip().upper().startswith("COMENT"), _handle_comments),
    LineRule("numbered_part", lambda s, t: bool(RE_NUMBERED_PART.match(t)), _handle_numbered_part),
    LineRule(
        "inline_study_roles",
        lambda s, t: "DIRIGENTE:" in t.upper() or "LEITOR:" in t.upper(),
        _handle_inline_study_roles,
    ),
    LineRule(
        "conductor_heading",
        lambda s, t: t.strip().upper().startswith("DIRIGENTE"),
        _handle_study_heading("DIRIGENTE", CONDUCTOR_TITLE, _CONDUCTOR_STOPS),
    ),
    LineRule(
        "reader_heading",
        lambda s, t: t.strip().upper().startswith("LEITOR"),
        _handle_study_heading("LEITOR", READER_TITLE, _READER_STOPS),
    ),
    LineRule("student_header", lambda s, t: is_student_header(t), _handle_column_header(_STUDENT_STOPS, helper=False)),
    LineRule("helper_header", lambda s, t: is_helper_header(t), _handle_column_header(_HELPER_STOPS, helper=True)),
    LineRule(
        "location_header",
        lambda s, t: bool(s.pending_student_parts) and is_location_header(t),
        _handle_location,
    ),
    LineRule(
        "standalone_name",
        lambda s, t: bool(s.pending_student_parts) and is_standalone_name(t),
        _handle_standalone_name,
    ),
)


def _flush_pending(state: BlockScanState) -> None:
    """Partes sem nome no fim do bloco saem vazias, para completar à mão."""
    while state.pending_student_parts:
        pending = state.pending_student_parts.popleft()
        state.push(pending.part_title, "", pending.part_number)
    while state.pending_helper_parts:
        pending = state.pending_helper_parts.popleft()
        state.push(HELPER_TITLE, "", pending.part_number)


def scan_block(lines: List[Line]) -> List[ParsedParticipation]:
    """Percorre as linhas do bloco aplicando LINE_RULES; devolve as designações em ordem."""
    state = BlockScanState(lines=lines)
    while state.index < len(state.lines):
        text = state.line.text_with_spaces
        for rule in LINE_RULES:
            if rule.matches(state, text):
                logger.debug("linha %d [%s]: %s", state.index, rule.name, text)
                rule.handle(state, text)
                break
        state.index += 1
    _flush_pending(state)
    return sorted(state.participations, key=lambda p: p.order)


def parse_week_block(lines: List[Line], year_context: int) -> Optional[HistoricalWeek]:
    """Uma semana a partir do bloco; None para blocos curtos ou sem designações."""
    if len(lines) < config.MIN_BLOCK_LINES:
        return None
    week = standardize_week_date(lines[0].text_with_spaces, year_context)
    participations = scan_block(lines)
    if not participations:
        logger.debug("Bloco sem designações descartado: %s", week)
        return None
    return HistoricalWeek(week=week, participations=participations)


def parse_historic_pages(pages: List[List[Fragment]], year_context: int) -> List[HistoricalWeek]:
    """Cada página é independente: nenhum estado passa de uma página para outra."""
    result: List[HistoricalWeek] = []
    for page_number, fragments in enumerate(pages, start=1):
        lines = group_items_by_lines(fragments)
        for block in split_week_blocks(lines):
            week = parse_week_block(block, year_context)
            if week is not None:
                result.append(week)
        logger.debug("Página %d: %d semanas acumuladas", page_number, len(result))
    return result


def parse_historic_pdf(pdf_path: str | Path, year_context: Optional[int] = None) -> List[HistoricalWeek]:
    """
    Lê um PDF de histórico de designações e devolve uma entrada por semana.
    Lança ImportError/FileNotFoundError quando não é possível extrair o texto.
    """
    pages = extract_fragments_from_pdf(pdf_path)
    year = year_context or detect_year_context(pdf_path, pages)
    weeks = parse_historic_pages(pages, year)
    logger.info("%s: %d semanas reconhecidas (ano %d)", Path(pdf_path).name, len(weeks), year)
    return weeks
