# -*- coding: utf-8 -*-
"""
Regras: seção de cada parte, pareamento estudante/ajudante e dirigente/leitor,
e validação de sugestões externas contra o cadastro de publicadores.

Cânticos são registros idênticos usados em três papéis; a seção sai da
posição: 1º abertura, 2º transição, 3º em diante encerramento.
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from .dates import normalize_name
from .records import (
    SATELLITE_TYPES,
    ParticipationRecord,
    ParticipationType,
    Publisher,
    build_publisher_lookup,
)

logger = logging.getLogger(__name__)


class Section(str, Enum):
    OPENING = "OPENING"
    TREASURES = "TREASURES"
    TRANSITION = "TRANSITION"
    MINISTRY = "MINISTRY"
    LIFE = "LIFE"
    CLOSING = "CLOSING"
    COMMENTS = "COMMENTS"


SECTION_BY_TYPE = {
    ParticipationType.PRESIDENT: Section.OPENING,
    ParticipationType.OPENING_PRAYER: Section.OPENING,
    ParticipationType.TREASURES: Section.TREASURES,
    ParticipationType.MINISTRY: Section.MINISTRY,
    ParticipationType.CHRISTIAN_LIFE: Section.LIFE,
    ParticipationType.BIBLE_STUDY_CONDUCTOR: Section.LIFE,
    ParticipationType.CLOSING_PRAYER: Section.CLOSING,
    ParticipationType.FINAL_COMMENTS: Section.CLOSING,
}

SONG_SECTIONS = (Section.OPENING, Section.TRANSITION, Section.CLOSING)

RENDERABLE_TYPES = (
    ParticipationType.TREASURES,
    ParticipationType.MINISTRY,
    ParticipationType.CHRISTIAN_LIFE,
    ParticipationType.BIBLE_STUDY_CONDUCTOR,
    ParticipationType.FINAL_COMMENTS,
)


@dataclass
class RenderablePart(ParticipationRecord):
    """Registro com o ajudante/leitor anexado. Só existe para exibição."""
    pair: Optional[ParticipationRecord] = None

    @classmethod
    def from_record(
        cls,
        record: ParticipationRecord,
        pair: Optional[ParticipationRecord] = None,
    ) -> "RenderablePart":
        values = {f.name: getattr(record, f.name) for f in fields(ParticipationRecord)}
        if isinstance(record, RenderablePart) and pair is None:
            pair = record.pair
        return cls(**values, pair=pair)


@dataclass
class PairingValidation:
    is_valid: bool
    reason: str = ""


@dataclass
class AcceptedAssignment:
    part_title: str
    student_name: str
    helper_name: Optional[str] = None


def section_for(record: ParticipationRecord, song_position: int = 0) -> Optional[Section]:
    """Seção da parte; song_position é a posição (0, 1, 2...) entre os cânticos da reunião."""
    if record.type == ParticipationType.SONG:
        return SONG_SECTIONS[min(song_position, len(SONG_SECTIONS) - 1)]
    return SECTION_BY_TYPE.get(record.type)


def _pairs(records: Sequence[ParticipationRecord]) -> List[RenderablePart]:
    """
    Anexa ajudante/leitor à parte principal; satélites que sobram são descartados.
    Ajudante com número de parte vai para a parte de mesmo número.
    """
    used_ids = set()
    paired: List[RenderablePart] = []

    def first_unused(
        part_type: ParticipationType,
        part_number: Optional[int] = None,
    ) -> Optional[ParticipationRecord]:
        unused = [p for p in records if p.type == part_type and p.id not in used_ids]
        if part_number is None:
            return unused[0] if unused else None
        # ajudante numerado só acompanha a parte de mesmo número
        return next(
            (p for p in unused if p.part_number == part_number),
            next((p for p in unused if p.part_number is None), None),
        )

    for current in records:
        if current.id in used_ids or current.type in SATELLITE_TYPES:
            continue
        pair = None
        if current.type == ParticipationType.MINISTRY and "discurso" not in current.part_title.lower():
            pair = first_unused(ParticipationType.HELPER, current.part_number)
        elif current.type == ParticipationType.BIBLE_STUDY_CONDUCTOR:
            pair = first_unused(ParticipationType.BIBLE_STUDY_READER)
        if pair is not None:
            used_ids.add(pair.id)
        paired.append(RenderablePart.from_record(current, pair))
    return paired


def get_ordered_and_paired_parts(records: Sequence[ParticipationRecord]) -> List[RenderablePart]:
    """Partes com horário próprio dentro das seções (sem presidente, orações e cânticos)."""
    return [p for p in _pairs(records) if p.type in RENDERABLE_TYPES]


def classify(records: Sequence[ParticipationRecord]) -> Dict[Section, List[RenderablePart]]:
    """Todas as partes não satélites, pareadas, agrupadas por seção."""
    grouped: Dict[Section, List[RenderablePart]] = {s: [] for s in Section if s is not Section.COMMENTS}
    song_position = 0
    for part in _pairs(records):
        section = section_for(part, song_position)
        if part.type == ParticipationType.SONG:
            song_position += 1
        if section is not None:
            grouped[section].append(part)
    return grouped


# ---------------------------------------------------------------------------
# Validação de pareamento e de sugestões
# ---------------------------------------------------------------------------

def validate_pairing(student: Publisher, helper: Publisher) -> PairingValidation:
    """Criança só faz parte com um dos pais, ou com adulto se houver autorização."""
    if student.age_group != "Criança":
        return PairingValidation(True)
    if helper.id in student.parent_ids:
        return PairingValidation(True)
    is_adult = helper.age_group == "Adulto"
    if student.can_pair_with_non_parent and is_adult:
        return PairingValidation(True)
    if not student.can_pair_with_non_parent:
        return PairingValidation(
            False,
            "Crianças só podem ter um dos pais como ajudante. Autorização para terceiros não concedida.",
        )
    return PairingValidation(False, "O ajudante de uma criança deve ser um adulto.")


def is_publisher_available(publisher: Publisher, meeting_date: str) -> bool:
    """meeting_date no formato YYYY-MM-DD."""
    if not publisher.is_serving:
        return False
    exceptions = publisher.availability.exception_dates
    if publisher.availability.mode == "always":
        return meeting_date not in exceptions
    return meeting_date in exceptions


def validate_suggestions(
    suggestions: Iterable[dict],
    parts: Sequence[ParticipationRecord],
    publishers: Iterable[Publisher],
    meeting_date: str,
) -> List[AcceptedAssignment]:
    """
    Confere as sugestões {partTitle, studentName, helperName} de um
    colaborador externo. Só passam as que apontam para uma parte da pauta e
    para publicadores cadastrados, disponíveis e com pareamento válido.
    """
    lookup = build_publisher_lookup(publishers)
    parts_by_title = {normalize_name(p.part_title): p for p in parts}
    accepted: List[AcceptedAssignment] = []
    taken = set()

    for s in suggestions:
        part = parts_by_title.get(normalize_name(s.get("partTitle", "")))
        student = lookup.get(normalize_name(s.get("studentName", "")))
        if part is None or student is None:
            logger.info("Sugestão descartada (parte ou publicador desconhecido): %s", s)
            continue
        if not is_publisher_available(student, meeting_date) or student.id in taken:
            logger.info("Sugestão descartada (%s indisponível)", student.name)
            continue

        helper_name = s.get("helperName")
        helper = None
        if helper_name and helper_name != "N/A":
            helper = lookup.get(normalize_name(helper_name))
            if helper is None or helper.id == student.id or not is_publisher_available(helper, meeting_date):
                logger.info("Sugestão descartada (ajudante inválido): %s", helper_name)
                continue
            check = validate_pairing(student, helper)
            if not check.is_valid:
                logger.info("Sugestão descartada: %s", check.reason)
                continue

        taken.add(student.id)
        if helper is not None:
            taken.add(helper.id)
        accepted.append(AcceptedAssignment(
            part_title=part.part_title,
            student_name=student.name,
            helper_name=helper.name if helper else None,
        ))
    return accepted
