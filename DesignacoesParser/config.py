# -*- coding: utf-8 -*-
"""Configuração central: tolerâncias de layout do PDF, início e durações da reunião."""

import json
from datetime import time
from pathlib import Path

# Geometria do PDF (unidades do PDF, pontos)
# Fragmentos a menos de 5 unidades na vertical estão na mesma linha (entrelinha da fonte)
LINE_Y_TOLERANCE = 5
# Distância horizontal acima da qual começa outra coluna (Estudante | Ajudante)
COLUMN_GAP = 40
# Espaço visível entre fragmentos até o qual ainda é o mesmo nome (espaço entre palavras)
WORD_SPACE_GAP = 10
# Margem depois do "(N min)" antes de procurar nomes
ANCHOR_PADDING = 5
# Âncora fixa para procurar nomes na linha seguinte à parte numerada
NEXT_LINE_ANCHOR_X = 250
# Âncora estimada quando o ")" da duração não aparece em nenhum fragmento
FALLBACK_ANCHOR_X = 300
# Blocos de semana com menos linhas são ruído (capa, índice)
MIN_BLOCK_LINES = 3

# Durações fixas (min), não dependem do que foi importado
SONG_MINUTES = 3
PRAYER_MINUTES = 1
FINAL_COMMENTS_MINUTES = 3
INITIAL_COMMENTS_MINUTES = 1
COUNSELING_MINUTES = 1

_DEFAULT_MEETING_START = time(19, 30)

# Duração padrão por seção quando a parte não tem "duration"
_DEFAULT_SECTION_DURATIONS = {
    "treasures": 10,
    "ministry": 5,
    "life": 15,
}


def _parse_time(s: str) -> time:
    """Converte 'HH:MM' ou 'H:MM' em time."""
    s = s.strip()
    if ":" in s:
        parts = s.split(":", 1)
        h = int(parts[0].strip())
        m = int(parts[1].strip()) if len(parts) > 1 else 0
        return time(h, m)
    return time(int(s), 0)


def _read_overrides() -> dict:
    """Lê meeting_config.json ao lado deste arquivo; dict vazio se não existir ou for inválido."""
    json_path = Path(__file__).resolve().parent / "meeting_config.json"
    if not json_path.exists():
        return {}
    try:
        with open(json_path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _load_meeting_start(data: dict) -> time:
    raw = data.get("meeting_start")
    if not raw:
        return _DEFAULT_MEETING_START
    try:
        return _parse_time(str(raw))
    except ValueError:
        return _DEFAULT_MEETING_START


def _load_section_durations(data: dict) -> dict:
    result = _DEFAULT_SECTION_DURATIONS.copy()
    overrides = data.get("section_durations")
    if not isinstance(overrides, dict):
        return result
    for name in result:
        value = overrides.get(name)
        if isinstance(value, int) and value > 0:
            result[name] = value
    return result


_OVERRIDES = _read_overrides()

MEETING_START = _load_meeting_start(_OVERRIDES)
SECTION_DEFAULT_DURATIONS = _load_section_durations(_OVERRIDES)
