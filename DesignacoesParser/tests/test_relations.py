# -*- coding: utf-8 -*-
"""Seções, pareamento e validação de sugestões."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from pipeline.records import Availability, ParticipationRecord, ParticipationType as T, Publisher
from pipeline.relations import (
    Section,
    classify,
    get_ordered_and_paired_parts,
    is_publisher_available,
    validate_pairing,
    validate_suggestions,
)

WEEK = "4-10 de NOV, 2024"


def rec(part_type, title, name=""):
    return ParticipationRecord(week=WEEK, part_title=title, type=part_type, publisher_name=name)


def test_song_section_comes_from_position():
    records = [
        rec(T.SONG, "Cântico 12"),
        rec(T.TREASURES, "Joias espirituais", "Carlos"),
        rec(T.SONG, "Cântico 45"),
        rec(T.SONG, "Cântico 100"),
    ]
    grouped = classify(records)
    assert [p.part_title for p in grouped[Section.OPENING]] == ["Cântico 12"]
    assert [p.part_title for p in grouped[Section.TRANSITION]] == ["Cântico 45"]
    assert [p.part_title for p in grouped[Section.CLOSING]] == ["Cântico 100"]
    assert [p.part_title for p in grouped[Section.TREASURES]] == ["Joias espirituais"]


def test_ministry_parts_pair_with_helpers_in_order():
    records = [
        rec(T.MINISTRY, "Iniciando conversas", "Ana"),
        rec(T.HELPER, "Ajudante", "Bia"),
        rec(T.MINISTRY, "Discurso", "Rui"),
        rec(T.MINISTRY, "Cultivando o interesse", "Clara"),
        rec(T.HELPER, "Ajudante", "Eva"),
        rec(T.HELPER, "Ajudante", "Sobra"),
    ]
    parts = get_ordered_and_paired_parts(records)
    assert [(p.part_title, p.pair.publisher_name if p.pair else None) for p in parts] == [
        ("Iniciando conversas", "Bia"),
        ("Discurso", None),
        ("Cultivando o interesse", "Eva"),
    ]


def test_numbered_helper_pairs_with_same_part():
    iniciando = rec(T.MINISTRY, "Iniciando conversas", "Ana")
    iniciando.part_number = 4
    cultivando = rec(T.MINISTRY, "Cultivando o interesse", "Bia")
    cultivando.part_number = 5
    carol = rec(T.HELPER, "Ajudante", "Carol")
    carol.part_number = 5
    dani = rec(T.HELPER, "Ajudante", "Dani")
    dani.part_number = 4

    parts = get_ordered_and_paired_parts([iniciando, cultivando, carol, dani])
    assert [(p.publisher_name, p.pair.publisher_name) for p in parts] == [("Ana", "Dani"), ("Bia", "Carol")]


def test_conductor_pairs_with_reader():
    records = [
        rec(T.PRESIDENT, "Presidente", "João"),
        rec(T.BIBLE_STUDY_CONDUCTOR, "Estudo bíblico de congregação", "Tiago"),
        rec(T.BIBLE_STUDY_READER, "Leitor do EBC", "Ivo"),
        rec(T.FINAL_COMMENTS, "Comentários Finais", "João"),
    ]
    parts = get_ordered_and_paired_parts(records)
    assert [p.type for p in parts] == [T.BIBLE_STUDY_CONDUCTOR, T.FINAL_COMMENTS]
    assert parts[0].pair.publisher_name == "Ivo"
    # o registro original não é alterado
    assert not hasattr(records[1], "pair")


def test_validate_pairing():
    parent = Publisher(id="mae", name="Marta")
    adult = Publisher(id="a1", name="Lia")
    young = Publisher(id="j1", name="Teo", age_group="Jovem")
    child = Publisher(id="c1", name="Davi", age_group="Criança", parent_ids=["mae"])
    allowed = Publisher(
        id="c2", name="Sara", age_group="Criança", parent_ids=["mae"], can_pair_with_non_parent=True
    )

    assert validate_pairing(adult, young).is_valid
    assert validate_pairing(child, parent).is_valid
    assert not validate_pairing(child, adult).is_valid
    assert validate_pairing(allowed, adult).is_valid
    result = validate_pairing(allowed, young)
    assert not result.is_valid
    assert "adulto" in result.reason


def test_is_publisher_available():
    always = Publisher(id="1", name="A", availability=Availability("always", ["2024-11-07"]))
    never = Publisher(id="2", name="B", availability=Availability("never", ["2024-11-07"]))
    retired = Publisher(id="3", name="C", is_serving=False)
    assert not is_publisher_available(always, "2024-11-07")
    assert is_publisher_available(always, "2024-11-14")
    assert is_publisher_available(never, "2024-11-07")
    assert not is_publisher_available(never, "2024-11-14")
    assert not is_publisher_available(retired, "2024-11-14")


def test_validate_suggestions():
    publishers = [
        Publisher(id="1", name="Ana Costa"),
        Publisher(id="2", name="Bia Nunes"),
        Publisher(id="3", name="Clara Dias", availability=Availability("always", ["2024-11-07"])),
        Publisher(id="4", name="Davi", age_group="Criança", parent_ids=["9"]),
    ]
    parts = [
        rec(T.MINISTRY, "Iniciando conversas"),
        rec(T.MINISTRY, "Cultivando o interesse"),
        rec(T.MINISTRY, "Discurso"),
    ]
    suggestions = [
        {"partTitle": "iniciando conversas", "studentName": "ana costa", "helperName": "Bia Nunes"},
        {"partTitle": "Cultivando o interesse", "studentName": "Clara Dias", "helperName": "N/A"},
        {"partTitle": "Discurso", "studentName": "Davi", "helperName": "Ana Costa"},
        {"partTitle": "Parte inexistente", "studentName": "Ana Costa"},
        {"partTitle": "Discurso", "studentName": "Ana Costa", "helperName": "N/A"},
    ]
    accepted = validate_suggestions(suggestions, parts, publishers, "2024-11-07")
    assert len(accepted) == 1
    assert accepted[0].part_title == "Iniciando conversas"
    assert accepted[0].student_name == "Ana Costa"
    assert accepted[0].helper_name == "Bia Nunes"
