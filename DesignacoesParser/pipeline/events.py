# -*- coding: utf-8 -*-
"""Eventos especiais: modelo (template) que substitui ou acrescenta partes numa semana."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import config
from .dates import calculate_part_date
from .records import ParticipationRecord, ParticipationType
from .relations import SECTION_BY_TYPE, RenderablePart

logger = logging.getLogger(__name__)

# Convenção fixa: visita do superintendente assume os comentários finais
SUPERVISOR_TEMPLATE_MARKER = "superintendente"


class ImpactAction(str, Enum):
    ADD_PART = "ADD_PART"
    REPLACE_PART = "REPLACE_PART"
    REPLACE_SECTION = "REPLACE_SECTION"


@dataclass
class EventImpact:
    action: ImpactAction
    target_type: Union[ParticipationType, List[ParticipationType], None] = None

    @property
    def target_types(self) -> List[ParticipationType]:
        if self.target_type is None:
            return []
        if isinstance(self.target_type, (list, tuple)):
            return list(self.target_type)
        return [self.target_type]


@dataclass
class EventTemplate:
    id: str
    name: str
    impact: EventImpact


@dataclass
class TimeReduction:
    target_type: ParticipationType
    minutes: int


@dataclass
class SpecialEvent:
    id: str
    week: str
    template_id: str
    assigned_to: str
    theme: str
    duration: Optional[int] = None
    time_reduction: Optional[TimeReduction] = None


def default_duration(part_type: ParticipationType) -> int:
    """Duração padrão da seção a que o tipo pertence."""
    section = SECTION_BY_TYPE.get(part_type)
    key = section.value.lower() if section is not None else ""
    return config.SECTION_DEFAULT_DURATIONS.get(key, config.SECTION_DEFAULT_DURATIONS["life"])


def find_event_for_week(
    week: str,
    special_events: Sequence[SpecialEvent],
    event_templates: Sequence[EventTemplate],
) -> Tuple[Optional[SpecialEvent], Optional[EventTemplate]]:
    event = next((e for e in special_events if e.week == week), None)
    if event is None:
        return None, None
    template = next((t for t in event_templates if t.id == event.template_id), None)
    if template is None:
        logger.warning("Evento %s sem modelo %s", event.id, event.template_id)
    return event, template


def _index_of(parts: Sequence[ParticipationRecord], part_type: ParticipationType) -> int:
    return next((i for i, p in enumerate(parts) if p.type == part_type), -1)


def _last_index_of(parts: Sequence[ParticipationRecord], part_type: ParticipationType) -> int:
    return next((i for i in range(len(parts) - 1, -1, -1) if parts[i].type == part_type), -1)


def apply_event_impact(
    parts: Sequence[RenderablePart],
    event: SpecialEvent,
    template: EventTemplate,
) -> List[RenderablePart]:
    """
    Aplica o impacto do modelo às partes classificadas da semana.

    A lista recebida não é alterada; partes modificadas são cópias.
    """
    modified = list(parts)

    reduction = event.time_reduction
    if reduction and reduction.minutes > 0:
        idx = _index_of(modified, reduction.target_type)
        if idx != -1:
            target = modified[idx]
            base = target.duration if target.duration is not None else default_duration(target.type)
            modified[idx] = replace(target, duration=max(0, base - reduction.minutes))

    special_part = RenderablePart(
        id=event.id,
        week=event.week,
        part_title=event.theme,
        type=ParticipationType.CHRISTIAN_LIFE,
        publisher_name=event.assigned_to,
        duration=event.duration,
        date=calculate_part_date(event.week),
    )

    action = template.impact.action
    targets = template.impact.target_types
    if action == ImpactAction.REPLACE_PART:
        idx = _index_of(modified, targets[0]) if targets else -1
        if idx != -1:
            modified[idx] = special_part
        else:
            # A parte alvo não existe: o evento entra no fim da Vida Cristã
            last_life = _last_index_of(modified, ParticipationType.CHRISTIAN_LIFE)
            if last_life != -1:
                modified.insert(last_life + 1, special_part)
            else:
                modified.append(special_part)
    elif action == ImpactAction.REPLACE_SECTION:
        modified = [p for p in modified if p.type not in targets]
        modified.append(special_part)
    elif action == ImpactAction.ADD_PART:
        idx = _index_of(modified, ParticipationType.BIBLE_STUDY_CONDUCTOR)
        if idx != -1:
            modified.insert(idx, special_part)
        else:
            modified.append(special_part)

    if SUPERVISOR_TEMPLATE_MARKER in template.name.lower():
        idx = _index_of(modified, ParticipationType.FINAL_COMMENTS)
        if idx != -1:
            modified[idx] = replace(modified[idx], publisher_name=event.assigned_to)

    logger.debug("Evento %r aplicado à semana %s (%s)", event.theme, event.week, action)
    return modified
