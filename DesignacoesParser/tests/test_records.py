# -*- coding: utf-8 -*-
"""Importação do histórico: duplicatas, apelidos, tipos e ordem."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from pipeline.entities import HistoricalWeek, ParsedParticipation
from pipeline.records import (
    ParticipationType,
    Publisher,
    import_historical_weeks,
    infer_participation_type,
    type_for_part_number,
)

WEEK = "4-10 de NOV, 2024"


def week(*items, label=WEEK):
    participations = []
    for order, item in enumerate(items):
        title, name = item[0], item[1]
        part_number = item[2] if len(item) > 2 else None
        participations.append(ParsedParticipation(title, name, order, part_number))
    return HistoricalWeek(week=label, participations=participations)


def test_type_for_part_number():
    assert type_for_part_number(1) == ParticipationType.TREASURES
    assert type_for_part_number(3) == ParticipationType.TREASURES
    assert type_for_part_number(4) == ParticipationType.MINISTRY
    assert type_for_part_number(6) == ParticipationType.MINISTRY
    assert type_for_part_number(7) == ParticipationType.CHRISTIAN_LIFE


def test_infer_participation_type():
    assert infer_participation_type("Presidente") == ParticipationType.PRESIDENT
    assert infer_participation_type("Oração Inicial") == ParticipationType.OPENING_PRAYER
    assert infer_participation_type("Cântico 12") == ParticipationType.SONG
    assert infer_participation_type("Leitura da Bíblia") == ParticipationType.TREASURES
    assert infer_participation_type("Iniciando conversas") == ParticipationType.MINISTRY
    assert infer_participation_type("Estudo bíblico de congregação") == ParticipationType.BIBLE_STUDY_CONDUCTOR
    assert infer_participation_type("Leitor do EBC") == ParticipationType.BIBLE_STUDY_READER
    assert infer_participation_type("Ajudante") == ParticipationType.HELPER
    assert infer_participation_type("Algo novo") == ParticipationType.CHRISTIAN_LIFE


def test_reimport_creates_nothing():
    data = [week(("Presidente", "João Silva"), ("Cântico 12", ""), ("Leitura da Bíblia", "José", 3))]
    first = import_historical_weeks(data)
    assert len(first.records) == 3

    again = import_historical_weeks(data, existing=first.records)
    assert again.records == []
    assert again.skipped == 3


def test_dedup_ignores_accents_and_case():
    first = import_historical_weeks([week(("Leitura da Bíblia", "José", 3))])
    second = import_historical_weeks(
        [week(("LEITURA DA BIBLIA", "jose", 3))], existing=first.records
    )
    assert second.records == []


def test_dedup_within_batch():
    result = import_historical_weeks([
        week(("Presidente", "João Silva")),
        week(("Presidente", "JOAO SILVA")),
    ])
    assert len(result.records) == 1
    assert result.skipped == 1


def test_nameless_parts():
    result = import_historical_weeks([week(("Cântico 12", ""), ("Cultivando o interesse", "", 5), ("", "X"))])
    assert [r.part_title for r in result.records] == ["Cântico 12"]
    assert result.skipped == 2


def test_publisher_aliases_and_unknown_names():
    publishers = [
        Publisher(id="p1", name="João Silva", aliases=["Joãozinho"]),
        Publisher(id="p2", name="Maria Souza"),
    ]
    result = import_historical_weeks(
        [week(("Presidente", "JOÃOZINHO"), ("Leitura da Bíblia", "maria souza", 3), ("Discurso", "Fulano", 6))],
        publishers=publishers,
    )
    assert [r.publisher_name for r in result.records] == ["João Silva", "Maria Souza"]
    assert result.skipped == 1


def test_part_number_overrides_title_keywords():
    result = import_historical_weeks([week(
        ("Vídeo: amor ao próximo", "Ana Costa", 5),
        ("Estudo bíblico de congregação", "Tiago Melo", 8),
        ("Leitor do EBC", "Ivo Sales"),
    )])
    types = [r.type for r in result.records]
    assert types == [
        ParticipationType.MINISTRY,
        ParticipationType.BIBLE_STUDY_CONDUCTOR,
        ParticipationType.BIBLE_STUDY_READER,
    ]
    assert result.records[0].part_number == 5


def test_satellites_follow_their_principal():
    result = import_historical_weeks([week(
        ("Presidente", "João Silva"),
        ("Iniciando conversas", "Ana Costa", 4),
        ("Ajudante", "Bia Nunes"),
        ("Discurso", "Rui Mota", 6),
    )])
    assert [r.order for r in result.records] == [0.0, 1.0, 1.1, 3.0]


def test_late_helper_goes_back_to_its_part():
    result = import_historical_weeks([week(
        ("Iniciando conversas", "Ana Lima", 4),
        ("Cultivando o interesse", "Bia Costa", 5),
        ("Ajudante", "Carol Dias", 5),
        ("Ajudante", "Dani Reis", 4),
    )])
    orders = {r.publisher_name: r.order for r in result.records}
    assert orders == {"Ana Lima": 0.0, "Bia Costa": 1.0, "Carol Dias": 1.1, "Dani Reis": 0.1}
    assert [r.part_number for r in result.records] == [4, 5, 5, 4]


def test_meeting_date_from_week():
    result = import_historical_weeks([week(("Presidente", "João Silva"))])
    record = result.records[0]
    assert record.date == "2024-11-07T00:00:00.000Z"
    assert record.week == WEEK
    assert record.id
