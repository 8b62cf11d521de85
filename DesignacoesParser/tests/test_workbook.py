# -*- coding: utf-8 -*-
"""Partes da reunião lidas da 1ª página da apostila."""

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from pipeline.records import ParticipationType as T
from pipeline.segment import Fragment
from pipeline.workbook import AgendaPart, parse_workbook_page


def _page(*texts):
    return [Fragment(text, 40, 800 - 20 * i, 6.0 * len(text)) for i, text in enumerate(texts)]


def test_parse_workbook_page():
    page = _page(
        "4-10 DE NOVEMBRO | ECLESIASTES 1-2",
        "Presidente:",
        "• Cântico 12",
        "Oração:",
        "• Comentários iniciais (1 min)",
        "TESOUROS DA PALAVRA DE DEUS",
        "1. Tudo tem seu tempo (10 min)",
        "2. Joias espirituais (10 min)",
        "3. Leitura da Bíblia (4 min)",
        "FAÇA SEU MELHOR NO MINISTÉRIO",
        "4. Iniciando conversas (3 min)",
        "5. Discurso (5 min)",
        "NOSSA VIDA CRISTÃ",
        "• Cântico 45",
        "6. Necessidades locais (15 min)",
        "7. Estudo bíblico de congregação (30 min)",
        "• Comentários finais (3 min)",
        "• Cântico 100",
        "Oração:",
    )
    parts = parse_workbook_page(page)
    agenda = [(p.part_title, p.type, p.duration) for p in parts]

    assert agenda[:9] == [
        ("Cântico 12", T.SONG, None),
        ("Tudo tem seu tempo", T.TREASURES, 10),
        ("Joias espirituais", T.TREASURES, 10),
        ("Leitura da Bíblia", T.TREASURES, 4),
        ("Iniciando conversas", T.MINISTRY, 3),
        ("Discurso", T.MINISTRY, 5),
        ("Cântico 45", T.SONG, None),
        ("Necessidades locais", T.CHRISTIAN_LIFE, 15),
        ("Estudo bíblico de congregação", T.BIBLE_STUDY_CONDUCTOR, 30),
    ]
    types = [p.type for p in parts]
    assert types.count(T.SONG) == 3
    assert T.FINAL_COMMENTS in types
    assert T.PRESIDENT in types
    assert T.OPENING_PRAYER in types
    assert T.CLOSING_PRAYER in types
    assert T.BIBLE_STUDY_READER in types


def test_parse_workbook_page_without_sections():
    assert parse_workbook_page(_page("Capa", "Apostila")) == []


def test_cli_writes_agenda_for_each_week(tmp_path, monkeypatch):
    import main

    pdf = tmp_path / "apostila.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    monkeypatch.setattr(
        main, "parse_workbook_pdf", lambda path: [AgendaPart("Leitura da Bíblia", T.TREASURES, 4)]
    )
    out_dir = tmp_path / "out"
    monkeypatch.setattr(
        sys, "argv", ["main.py", str(pdf), "--workbook", "Janeiro/Fevereiro 2025", "-o", str(out_dir)]
    )
    assert main.main() == 0

    data = json.loads((out_dir / "apostila.json").read_text(encoding="utf-8"))
    assert len(data) == 9
    assert list(data)[0] == "30 de DEZ, 2024 - 5 de JAN, 2025"
    assert data["6-12 de JAN, 2025"] == [
        {"part_title": "Leitura da Bíblia", "type": "Tesouros da Palavra de Deus", "duration": 4}
    ]


def test_cli_rejects_unknown_workbook_name(tmp_path, monkeypatch):
    import main

    pdf = tmp_path / "apostila.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    monkeypatch.setattr(sys, "argv", ["main.py", str(pdf), "--workbook", "Apostila", "-o", str(tmp_path)])
    assert main.main() == 1
    assert not (tmp_path / "apostila.json").exists()
