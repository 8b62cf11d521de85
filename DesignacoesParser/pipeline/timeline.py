# -*- coding: utf-8 -*-
"""
Pauta cronometrada: registros de uma semana -> lista de TimedEvent.

Ordem fixa: cântico e oração iniciais, comentários iniciais, Tesouros,
cântico do meio, Ministério, Vida Cristã (EBC por último), comentários
finais, cântico e oração finais. Cada item avança o relógio, que começa em
config.MEETING_START. As durações padrão das seções e os aconselhamentos
reproduzem a reunião impressa, mesmo quando a importação veio incompleta.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import config
from .dates import normalize_name
from .events import EventTemplate, SpecialEvent, apply_event_impact, find_event_for_week
from .records import ParticipationRecord, ParticipationType, Publisher, build_publisher_lookup
from .relations import RenderablePart, Section, get_ordered_and_paired_parts

logger = logging.getLogger(__name__)

INITIAL_COMMENTS_TITLE = "Comentários Iniciais"
COUNSELING_TITLE = "Aconselhamento"
BIBLE_READING_MARKER = "leitura da biblia"

_FIXED_MINUTES = {
    ParticipationType.SONG: config.SONG_MINUTES,
    ParticipationType.FINAL_COMMENTS: config.FINAL_COMMENTS_MINUTES,
    ParticipationType.OPENING_PRAYER: config.PRAYER_MINUTES,
    ParticipationType.CLOSING_PRAYER: config.PRAYER_MINUTES,
}


@dataclass
class TimedEvent:
    """Uma linha da pauta com horário de início."""
    id: str
    start_time: str
    part_title: str
    publisher_name: str
    duration_text: str
    section_type: Section
    is_counseling: bool = False
    raw_part: Optional[ParticipationRecord] = None


def _duration_text(minutes: int) -> str:
    return f"({minutes} min)" if minutes > 0 else ""


class _TimelineCursor:
    """Relógio da reunião e lista de eventos emitidos."""

    def __init__(self, display_name):
        self.current = datetime.combine(date(2000, 1, 1), config.MEETING_START)
        self.events: List[TimedEvent] = []
        self.display_name = display_name

    def emit(
        self,
        event_id: str,
        title: str,
        publisher_name: str,
        minutes: int,
        section_type: Section,
        raw_part: Optional[ParticipationRecord] = None,
        is_counseling: bool = False,
    ) -> None:
        self.events.append(TimedEvent(
            id=event_id,
            start_time=self.current.strftime("%H:%M"),
            part_title=title,
            publisher_name=publisher_name,
            duration_text=_duration_text(minutes),
            section_type=section_type,
            is_counseling=is_counseling,
            raw_part=raw_part,
        ))
        self.current += timedelta(minutes=minutes)

    def emit_part(
        self,
        part: ParticipationRecord,
        section_type: Section,
        default_minutes: int,
        number: Optional[int] = None,
    ) -> None:
        minutes = _FIXED_MINUTES.get(part.type)
        if minutes is None:
            minutes = part.duration if part.duration is not None else default_minutes
        name = self.display_name(part.publisher_name)
        pair = getattr(part, "pair", None)
        if pair is not None:
            name = f"{name} / {self.display_name(pair.publisher_name)}"
        title = f"{number}. {part.part_title}" if number else part.part_title
        self.emit(part.id, title, name, minutes, section_type, raw_part=part)

    def emit_counseling(self, part: ParticipationRecord, section_type: Section, president_name: str) -> None:
        self.emit(
            f"counsel-{part.id}",
            COUNSELING_TITLE,
            president_name,
            config.COUNSELING_MINUTES,
            section_type,
            raw_part=part,
            is_counseling=True,
        )


def _name_resolver(publishers: Optional[Iterable[Publisher]]):
    """Apelidos viram o nome do cadastro; sem cadastro, o nome fica como está."""
    if not publishers:
        return lambda name: name
    lookup = build_publisher_lookup(publishers)

    def resolve(name: str) -> str:
        found = lookup.get(normalize_name(name)) if name else None
        return found.name if found else name
    return resolve


def build_timeline(
    records: Sequence[ParticipationRecord],
    publishers: Optional[Iterable[Publisher]] = None,
    special_events: Sequence[SpecialEvent] = (),
    event_templates: Sequence[EventTemplate] = (),
) -> List[TimedEvent]:
    """Pauta cronometrada de uma reunião. Determinística: mesma entrada, mesmos horários."""
    if not records:
        return []

    cursor = _TimelineCursor(_name_resolver(publishers))

    president = next((p for p in records if p.type == ParticipationType.PRESIDENT), None)
    opening_prayer = next((p for p in records if p.type == ParticipationType.OPENING_PRAYER), None)
    closing_prayer = next(
        (p for p in reversed(records) if p.type == ParticipationType.CLOSING_PRAYER), None
    )
    songs = [p for p in records if p.type == ParticipationType.SONG]
    opening_song = songs[0] if len(songs) > 0 else None
    middle_song = songs[1] if len(songs) > 1 else None
    final_song = songs[2] if len(songs) > 2 else None
    president_name = cursor.display_name(president.publisher_name) if president else ""

    main_parts: List[RenderablePart] = get_ordered_and_paired_parts(records)
    event, template = find_event_for_week(records[0].week, special_events, event_templates)
    if event is not None and template is not None:
        main_parts = apply_event_impact(main_parts, event, template)

    final_comments = next((p for p in main_parts if p.type == ParticipationType.FINAL_COMMENTS), None)
    treasures = [p for p in main_parts if p.type == ParticipationType.TREASURES]
    ministry = [p for p in main_parts if p.type == ParticipationType.MINISTRY]
    life = [
        p for p in main_parts
        if p.type in (ParticipationType.CHRISTIAN_LIFE, ParticipationType.BIBLE_STUDY_CONDUCTOR)
    ]
    # sort estável: o EBC vai para o fim sem mexer no resto
    life.sort(key=lambda p: p.type == ParticipationType.BIBLE_STUDY_CONDUCTOR)

    durations = config.SECTION_DEFAULT_DURATIONS
    number = 1

    if opening_song:
        cursor.emit_part(opening_song, Section.OPENING, config.SONG_MINUTES)
    if opening_prayer:
        cursor.emit_part(opening_prayer, Section.OPENING, config.PRAYER_MINUTES)
    if president:
        cursor.emit(
            f"initial-comments-{president.id}",
            INITIAL_COMMENTS_TITLE,
            president_name,
            config.INITIAL_COMMENTS_MINUTES,
            Section.COMMENTS,
            raw_part=president,
        )

    for part in treasures:
        cursor.emit_part(part, Section.TREASURES, durations["treasures"], number)
        number += 1
        if BIBLE_READING_MARKER in normalize_name(part.part_title):
            cursor.emit_counseling(part, Section.TREASURES, president_name)

    if middle_song:
        cursor.emit_part(middle_song, Section.TRANSITION, config.SONG_MINUTES)

    for part in ministry:
        cursor.emit_part(part, Section.MINISTRY, durations["ministry"], number)
        number += 1
        cursor.emit_counseling(part, Section.MINISTRY, president_name)

    for part in life:
        cursor.emit_part(part, Section.LIFE, durations["life"], number)
        number += 1

    if final_comments:
        cursor.emit_part(final_comments, Section.CLOSING, config.FINAL_COMMENTS_MINUTES, number)
    if final_song:
        cursor.emit_part(final_song, Section.CLOSING, config.SONG_MINUTES)
    if closing_prayer:
        cursor.emit_part(closing_prayer, Section.CLOSING, config.PRAYER_MINUTES)

    logger.debug("Pauta de %s: %d itens, término %s", records[0].week, len(cursor.events),
                 cursor.current.strftime("%H:%M"))
    return cursor.events


def group_records_by_week(records: Iterable[ParticipationRecord]) -> Dict[str, List[ParticipationRecord]]:
    """Registros por semana, cada grupo ordenado por order."""
    weeks: Dict[str, List[ParticipationRecord]] = {}
    for r in records:
        weeks.setdefault(r.week, []).append(r)
    for items in weeks.values():
        items.sort(key=lambda r: r.order)
    return weeks


def timeline_to_rows(events: Iterable[TimedEvent]) -> List[dict]:
    """Eventos achatados para JSON/CSV; raw_part vira só o id, semana, data e tipo."""
    rows: List[dict] = []
    for e in events:
        row = asdict(e)
        row.pop("raw_part")
        raw = e.raw_part
        row["section_type"] = e.section_type.value
        row["raw_part"] = {
            "id": raw.id,
            "week": raw.week,
            "date": raw.date,
            "type": raw.type.value if hasattr(raw.type, "value") else raw.type,
        } if raw is not None else None
        rows.append(row)
    return rows
