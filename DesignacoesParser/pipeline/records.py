# -*- coding: utf-8 -*-
"""
Registros de participação e importação do histórico.

A importação transforma as semanas lidas do PDF em ParticipationRecord:
resolve o publicador pelo nome ou apelido, descarta duplicatas pela chave
"semana|título|publicador" normalizada e infere o tipo da parte.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from .dates import calculate_part_date, normalize_name

logger = logging.getLogger(__name__)


class ParticipationType(str, Enum):
    PRESIDENT = "Presidente"
    OPENING_PRAYER = "Oração Inicial"
    CLOSING_PRAYER = "Oração Final"
    SONG = "Cântico"
    TREASURES = "Tesouros da Palavra de Deus"
    MINISTRY = "Faça Seu Melhor no Ministério"
    CHRISTIAN_LIFE = "Nossa Vida Cristã"
    BIBLE_STUDY_CONDUCTOR = "Dirigente do EBC"
    BIBLE_STUDY_READER = "Leitor do EBC"
    HELPER = "Ajudante"
    FINAL_COMMENTS = "Comentários Finais"


# Registros que não têm horário próprio: aparecem junto da parte principal
SATELLITE_TYPES = (ParticipationType.HELPER, ParticipationType.BIBLE_STUDY_READER)
# O número impresso não se sobrepõe a estes tipos (o EBC também é numerado)
_KEEP_INFERRED_TYPES = SATELLITE_TYPES + (ParticipationType.BIBLE_STUDY_CONDUCTOR,)

HELPER_TITLE = "Ajudante"
CONDUCTOR_TITLE = "Estudo bíblico de congregação"
READER_TITLE = "Leitor do EBC"
FINAL_COMMENTS_TITLE = "Comentários Finais"

_TREASURES_KEYWORDS = (
    "tesouros", "pacto", "salvador", "agradeçam", "rei jesus",
    "retribuir", "caminho", "perseverar", "sofrimento",
)
_LIFE_KEYWORDS = ("amor", "dinheiro", "promessas", "necessidades locais", "organização", "sofrer")


def generate_id() -> str:
    return str(uuid.uuid4())


@dataclass
class ParticipationRecord:
    """Uma designação de uma semana."""
    week: str
    part_title: str
    type: ParticipationType
    publisher_name: str = ""
    date: str = ""
    order: float = 0.0
    duration: Optional[int] = None
    part_number: Optional[int] = None
    id: str = field(default_factory=generate_id)


@dataclass
class Availability:
    """mode 'always': disponível exceto nas datas; 'never': só nas datas."""
    mode: str = "always"
    exception_dates: List[str] = field(default_factory=list)


@dataclass
class Publisher:
    id: str
    name: str
    aliases: List[str] = field(default_factory=list)
    availability: Availability = field(default_factory=Availability)
    age_group: str = "Adulto"
    parent_ids: List[str] = field(default_factory=list)
    can_pair_with_non_parent: bool = False
    is_serving: bool = True


@dataclass
class ImportResult:
    records: List[ParticipationRecord]
    skipped: int = 0


def type_for_part_number(part_number: int) -> ParticipationType:
    """Faixas fixas da apostila: 1–3 Tesouros, 4–6 Ministério, 7+ Vida Cristã."""
    if part_number <= 3:
        return ParticipationType.TREASURES
    if part_number <= 6:
        return ParticipationType.MINISTRY
    return ParticipationType.CHRISTIAN_LIFE


def infer_participation_type(part_title: str) -> ParticipationType:
    """Tipo a partir do título impresso; na dúvida, Vida Cristã."""
    title = (part_title or "").lower()

    if "presidente" in title:
        return ParticipationType.PRESIDENT
    if "oração inicial" in title:
        return ParticipationType.OPENING_PRAYER
    if "oração final" in title:
        return ParticipationType.CLOSING_PRAYER
    if "cântico" in title or "cantico" in title:
        return ParticipationType.SONG
    if "comentários finais" in title:
        return ParticipationType.FINAL_COMMENTS
    if "ajudante" in title:
        return ParticipationType.HELPER
    if "leitor" in title:
        return ParticipationType.BIBLE_STUDY_READER

    if "leitura da bíblia" in title or "joias espirituais" in title:
        return ParticipationType.TREASURES
    if any(kw in title for kw in (
        "iniciando conversas", "cultivando o interesse", "fazendo discípulos",
        "explicando suas crenças", "discurso",
    )):
        return ParticipationType.MINISTRY
    if "estudo bíblico de congregação" in title:
        return ParticipationType.BIBLE_STUDY_CONDUCTOR

    if any(kw in title for kw in _TREASURES_KEYWORDS):
        return ParticipationType.TREASURES
    if any(kw in title for kw in _LIFE_KEYWORDS):
        return ParticipationType.CHRISTIAN_LIFE
    return ParticipationType.CHRISTIAN_LIFE


def dedup_key(week: str, part_title: str, publisher_name: str) -> str:
    return f"{week}|{normalize_name(part_title)}|{normalize_name(publisher_name)}"


def record_key(record: ParticipationRecord) -> str:
    return dedup_key(record.week, record.part_title, record.publisher_name)


def build_publisher_lookup(publishers: Iterable[Publisher]) -> Dict[str, Publisher]:
    """Nome e apelidos normalizados -> publicador."""
    lookup: Dict[str, Publisher] = {}
    for p in publishers:
        lookup[normalize_name(p.name)] = p
        for alias in p.aliases:
            lookup[normalize_name(alias)] = p
    return lookup


def _allows_nameless(part_title: str) -> bool:
    title = part_title.lower()
    return "cântico" in title or "cantico" in title


def import_historical_weeks(
    weeks,
    existing: Iterable[ParticipationRecord] = (),
    publishers: Optional[Iterable[Publisher]] = None,
) -> ImportResult:
    """
    Converte semanas do parser (HistoricalWeek) em novos registros.

    Sem cadastro de publicadores os nomes são aceitos como vieram do PDF.
    Registros cuja chave já existe (no banco ou no próprio lote) são ignorados.
    """
    seen: Set[str] = {record_key(r) for r in existing}
    lookup = build_publisher_lookup(publishers) if publishers is not None else None
    new_records: List[ParticipationRecord] = []
    skipped = 0

    for week_data in weeks:
        meeting_date = calculate_part_date(week_data.week)
        principal_order = 0.0
        order_by_number: Dict[int, float] = {}
        position = 0
        for p in week_data.participations:
            if not p.part_title:
                skipped += 1
                continue

            raw_name = (p.publisher_name or "").strip()
            if not raw_name and not _allows_nameless(p.part_title):
                logger.debug("Parte sem publicador ignorada: %s / %s", week_data.week, p.part_title)
                skipped += 1
                continue

            resolved_name = raw_name
            if raw_name and lookup is not None:
                found = lookup.get(normalize_name(raw_name))
                if found is None:
                    logger.warning("Publicador %r não encontrado. Ignorando.", raw_name)
                    skipped += 1
                    continue
                resolved_name = found.name

            key = dedup_key(week_data.week, p.part_title, resolved_name)
            if key in seen:
                logger.debug("Duplicata ignorada: %s", key)
                skipped += 1
                continue
            seen.add(key)

            part_type = infer_participation_type(p.part_title)
            part_number = getattr(p, "part_number", None)
            if part_number is not None and part_type not in _KEEP_INFERRED_TYPES:
                part_type = type_for_part_number(part_number)

            if part_type in SATELLITE_TYPES:
                # ajudante resolvido depois (cabeçalho AJUDANTES) volta para junto da sua parte
                base = order_by_number.get(part_number, principal_order)
                order = base + 0.1
            else:
                order = float(position)
                principal_order = order
                if part_number is not None:
                    order_by_number[part_number] = order
            position += 1

            new_records.append(ParticipationRecord(
                week=week_data.week,
                part_title=p.part_title,
                type=part_type,
                publisher_name=resolved_name,
                date=meeting_date,
                order=order,
                duration=getattr(p, "duration", None),
                part_number=part_number,
            ))

    logger.info("Importação: %d registros novos, %d ignorados", len(new_records), skipped)
    return ImportResult(records=new_records, skipped=skipped)
