# -*- coding: utf-8 -*-
"""Impacto dos eventos especiais nas partes da semana."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from pipeline.events import (
    EventImpact,
    EventTemplate,
    ImpactAction,
    SpecialEvent,
    TimeReduction,
    apply_event_impact,
    find_event_for_week,
)
from pipeline.records import ParticipationRecord, ParticipationType as T
from pipeline.relations import get_ordered_and_paired_parts

WEEK = "4-10 de NOV, 2024"


def rec(part_type, title, name="", duration=None):
    return ParticipationRecord(
        week=WEEK, part_title=title, type=part_type, publisher_name=name, duration=duration
    )


def parts():
    return get_ordered_and_paired_parts([
        rec(T.TREASURES, "Joias espirituais", "Carlos", 10),
        rec(T.MINISTRY, "Discurso", "Rui", 5),
        rec(T.CHRISTIAN_LIFE, "Necessidades locais", "Paulo", 15),
        rec(T.BIBLE_STUDY_CONDUCTOR, "Estudo bíblico de congregação", "Tiago", 30),
        rec(T.FINAL_COMMENTS, "Comentários Finais", "João"),
    ])


def event(**kwargs):
    values = dict(id="ev1", week=WEEK, template_id="t1", assigned_to="Visitante", theme="Tema especial")
    values.update(kwargs)
    return SpecialEvent(**values)


def titles(items):
    return [p.part_title for p in items]


def test_add_part_goes_before_bible_study():
    template = EventTemplate("t1", "Relatório", EventImpact(ImpactAction.ADD_PART))
    result = apply_event_impact(parts(), event(duration=10), template)
    assert titles(result) == [
        "Joias espirituais", "Discurso", "Necessidades locais",
        "Tema especial", "Estudo bíblico de congregação", "Comentários Finais",
    ]
    special = result[3]
    assert special.type == T.CHRISTIAN_LIFE
    assert special.publisher_name == "Visitante"
    assert special.duration == 10
    assert special.date == "2024-11-07T00:00:00.000Z"


def test_replace_part():
    template = EventTemplate("t1", "Substituição", EventImpact(ImpactAction.REPLACE_PART, T.CHRISTIAN_LIFE))
    result = apply_event_impact(parts(), event(), template)
    assert "Necessidades locais" not in titles(result)
    assert titles(result)[2] == "Tema especial"


def test_replace_part_without_target_goes_after_life():
    template = EventTemplate("t1", "Substituição", EventImpact(ImpactAction.REPLACE_PART, T.HELPER))
    result = apply_event_impact(parts(), event(), template)
    assert titles(result)[3] == "Tema especial"
    assert len(result) == 6


def test_replace_section():
    template = EventTemplate(
        "t1",
        "Assembleia",
        EventImpact(ImpactAction.REPLACE_SECTION, [T.CHRISTIAN_LIFE, T.BIBLE_STUDY_CONDUCTOR]),
    )
    result = apply_event_impact(parts(), event(), template)
    assert titles(result) == ["Joias espirituais", "Discurso", "Comentários Finais", "Tema especial"]


def test_supervisor_visit_takes_final_comments():
    template = EventTemplate(
        "t1",
        "Visita do Superintendente de Circuito",
        EventImpact(ImpactAction.REPLACE_PART, T.BIBLE_STUDY_CONDUCTOR),
    )
    original = parts()
    result = apply_event_impact(original, event(assigned_to="Superintendente"), template)
    final = [p for p in result if p.type == T.FINAL_COMMENTS][0]
    assert final.publisher_name == "Superintendente"
    # a lista recebida fica como estava
    assert original[-1].publisher_name == "João"


def test_time_reduction():
    template = EventTemplate("t1", "Relatório", EventImpact(ImpactAction.ADD_PART))
    reduced = apply_event_impact(
        parts(), event(time_reduction=TimeReduction(T.BIBLE_STUDY_CONDUCTOR, 5)), template
    )
    study = [p for p in reduced if p.type == T.BIBLE_STUDY_CONDUCTOR][0]
    assert study.duration == 25

    no_duration = get_ordered_and_paired_parts([rec(T.CHRISTIAN_LIFE, "Necessidades locais", "Paulo")])
    reduced = apply_event_impact(
        no_duration, event(time_reduction=TimeReduction(T.CHRISTIAN_LIFE, 20)), template
    )
    assert reduced[0].duration == 0


def test_find_event_for_week():
    template = EventTemplate("t1", "Relatório", EventImpact(ImpactAction.ADD_PART))
    ev = event()
    assert find_event_for_week(WEEK, [ev], [template]) == (ev, template)
    assert find_event_for_week("11-17 de NOV, 2024", [ev], [template]) == (None, None)
    assert find_event_for_week(WEEK, [ev], []) == (ev, None)
