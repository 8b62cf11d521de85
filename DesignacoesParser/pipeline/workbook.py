# -*- coding: utf-8 -*-
"""
Apostila: partes da reunião (sem nomes) a partir da 1ª página da apostila.

As seções vêm dos cabeçalhos impressos; presidente e orações são deduzidos
pela posição das linhas "Presidente:" e "Oração:".
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .ingest import extract_fragments_from_pdf
from .records import FINAL_COMMENTS_TITLE, READER_TITLE, ParticipationType
from .segment import Fragment, group_items_by_lines

SECTION_HEADERS = {
    "TESOUROS DA PALAVRA DE DEUS": ParticipationType.TREASURES,
    "FAÇA SEU MELHOR NO MINISTÉRIO": ParticipationType.MINISTRY,
    "NOSSA VIDA CRISTÃ": ParticipationType.CHRISTIAN_LIFE,
}

RE_SONG = re.compile(r"•\s*Cântico", re.IGNORECASE)
RE_INITIAL_COMMENTS = re.compile(r"•\s*Comentários iniciais", re.IGNORECASE)
RE_FINAL_COMMENTS = re.compile(r"•\s*Comentários finais", re.IGNORECASE)
RE_DURATION = re.compile(r"\((\d+)\s*min\.?\)")
RE_LEADING_MARKS = re.compile(r"^[\d\s•.-]+")


@dataclass
class AgendaPart:
    part_title: str
    type: ParticipationType
    duration: Optional[int] = None


def parse_workbook_page(fragments: Iterable[Fragment]) -> List[AgendaPart]:
    lines = [" ".join(line.text_with_spaces.split()) for line in group_items_by_lines(fragments)]
    parts: List[AgendaPart] = []
    current_section: Optional[ParticipationType] = None

    for line in lines:
        upper = line.upper()
        if upper.startswith("ORAÇÃO:") or upper.startswith("PRESIDENTE:"):
            continue

        header = next((t for h, t in SECTION_HEADERS.items() if h in upper), None)
        if header is not None:
            current_section = header
            continue

        if RE_SONG.search(line):
            parts.append(AgendaPart(line.replace("•", "").strip(), ParticipationType.SONG))
            continue
        if RE_INITIAL_COMMENTS.search(line):
            continue
        if RE_FINAL_COMMENTS.search(line):
            parts.append(AgendaPart(FINAL_COMMENTS_TITLE, ParticipationType.FINAL_COMMENTS))
            continue

        if current_section is None:
            continue

        m = RE_DURATION.search(line)
        duration = int(m.group(1)) if m else None
        title = RE_LEADING_MARKS.sub("", RE_DURATION.sub("", line).strip()).strip()
        if not title:
            continue
        part_type = current_section
        if "estudo bíblico de congregação" in title.lower():
            part_type = ParticipationType.BIBLE_STUDY_CONDUCTOR
        parts.append(AgendaPart(title, part_type, duration))

    president_idx = next((i for i, l in enumerate(lines) if l.upper().startswith("PRESIDENTE:")), -1)
    prayer_idxs = [i for i, l in enumerate(lines) if l.upper().startswith("ORAÇÃO:")]

    opening_prayer = None
    if president_idx != -1:
        parts.append(AgendaPart(ParticipationType.PRESIDENT.value, ParticipationType.PRESIDENT))
        opening_prayer = next((i for i in prayer_idxs if i > president_idx), None)
        if opening_prayer is not None:
            parts.append(AgendaPart(ParticipationType.OPENING_PRAYER.value, ParticipationType.OPENING_PRAYER))

    if prayer_idxs and prayer_idxs[-1] != opening_prayer:
        parts.append(AgendaPart(ParticipationType.CLOSING_PRAYER.value, ParticipationType.CLOSING_PRAYER))

    if any(p.type == ParticipationType.BIBLE_STUDY_CONDUCTOR for p in parts):
        parts.append(AgendaPart(READER_TITLE, ParticipationType.BIBLE_STUDY_READER))
    return parts


def parse_workbook_pdf(pdf_path: str | Path) -> List[AgendaPart]:
    """A pauta fica na 1ª página da apostila."""
    pages = extract_fragments_from_pdf(pdf_path)
    return parse_workbook_page(pages[0]) if pages else []
