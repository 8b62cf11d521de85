# -*- coding: utf-8 -*-
"""
Datas: normalização do rótulo da semana e cálculo do dia da reunião.

O rótulo canônico tem a forma "4-10 de NOV, 2024" (mesmo mês) ou
"30 de DEZ, 2024 - 5 de JAN, 2025" (meses diferentes). Nenhuma função
deste módulo lança exceção: entradas ruins viram um valor sentinela.
"""

import logging
import re
import unicodedata
from datetime import datetime, timedelta, timezone
from typing import List

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MONTH_MAP = {
    "JAN": 1, "JANEIRO": 1,
    "FEV": 2, "FEVEREIRO": 2,
    "MAR": 3, "MARÇO": 3, "MARCO": 3,
    "ABR": 4, "ABRIL": 4,
    "MAI": 5, "MAIO": 5,
    "JUN": 6, "JUNHO": 6,
    "JUL": 7, "JULHO": 7,
    "AGO": 8, "AGOSTO": 8,
    "SET": 9, "SETEMBRO": 9,
    "OUT": 10, "OUTUBRO": 10,
    "NOV": 11, "NOVEMBRO": 11,
    "DEZ": 12, "DEZEMBRO": 12,
}

MONTH_ABBR = ["JAN", "FEV", "MAR", "ABR", "MAI", "JUN", "JUL", "AGO", "SET", "OUT", "NOV", "DEZ"]

RE_WEEK_PREFIX = re.compile(r"^SEMANA\s+(DE\s+)?", re.IGNORECASE)
RE_HAS_YEAR = re.compile(r"\d{4}")
# "30 DE DEZEMBRO - 5 DE JANEIRO"
RE_CROSS_MONTH = re.compile(r"(\d+)\s+DE\s+([A-ZÇ]+)\s*-\s*(\d+)\s+DE\s+([A-ZÇ]+)")
# "4-10 DE NOVEMBRO", "4-10 NOVEMBRO", "4 A 10 DE NOVEMBRO"
RE_SAME_MONTH = re.compile(r"(\d+)\s*(?:-|A)\s*(\d+)\s+(?:DE\s+)?([A-ZÇ]+)")
RE_LEADING_INT = re.compile(r"^\d+")
RE_WORKBOOK_NAME = re.compile(r"(\w+)/(\w+)\s+(\d{4})")


def _month_abbr(month_name: str) -> str:
    """'NOVEMBRO' -> 'NOV'; nomes desconhecidos ficam com as 3 primeiras letras."""
    upper = month_name.upper()
    number = MONTH_MAP.get(upper)
    if number:
        return MONTH_ABBR[number - 1]
    return upper[:3]


def standardize_week_date(raw_label: str, year_context: int) -> str:
    """
    Padroniza o rótulo de semana extraído do PDF.

    "SEMANA DE 4-10 DE NOVEMBRO" -> "4-10 de NOV, 2024". Um rótulo que já
    tem ano de 4 dígitos e vírgula volta sem alteração (idempotente).
    """
    if not raw_label or not raw_label.strip():
        return f"Semana Indefinida, {year_context}"

    label = raw_label.strip()
    if RE_HAS_YEAR.search(label) and "," in label:
        return label

    cleaned = RE_WEEK_PREFIX.sub("", label).strip()

    upper = cleaned.upper().replace("–", "-").replace("—", "-")

    m = RE_CROSS_MONTH.search(upper)
    if m:
        day1, month1, day2, month2 = m.groups()
        m1, m2 = _month_abbr(month1), _month_abbr(month2)
        second_year = year_context + 1 if (m1 == "DEZ" and m2 == "JAN") else year_context
        return f"{day1} de {m1}, {year_context} - {day2} de {m2}, {second_year}"

    m = RE_SAME_MONTH.search(upper)
    if m:
        day1, day2, month = m.groups()
        return f"{day1}-{day2} de {_month_abbr(month)}, {year_context}"

    if not RE_HAS_YEAR.search(cleaned):
        return f"{cleaned}, {year_context}"
    return cleaned


def _leading_int(token: str):
    m = RE_LEADING_INT.match(token)
    return int(m.group(0)) if m else None


def parse_week_date(label: str) -> datetime:
    """
    Primeiro dia da semana (meia-noite UTC) a partir do rótulo.
    Devolve EPOCH quando não há dia ou mês reconhecível.
    """
    if not label:
        return EPOCH

    tokens = [t for t in re.split(r"[\s\-–]+", label.replace(",", " ").upper()) if t]

    day = 0
    for t in tokens:
        d = _leading_int(t)
        if d is not None and 0 < d <= 31:
            day = d
            break
    if day == 0:
        return EPOCH

    month = next((MONTH_MAP[t] for t in tokens if t in MONTH_MAP), None)
    if month is None:
        return EPOCH

    year = None
    for t in tokens:
        y = _leading_int(t)
        if y is not None and 2000 < y < 2100:
            year = y
            break
    if year is None and tokens:
        last = _leading_int(tokens[-1])
        if last is not None and last > 2000:
            year = last
    if year is None:
        return EPOCH

    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return EPOCH


def to_iso(dt: datetime) -> str:
    """Formato ISO com milissegundos e 'Z', igual ao que o app grava."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def calculate_part_date(week_label: str) -> str:
    """
    Data da reunião dentro da semana: quarta-feira em anos ímpares,
    quinta-feira em anos pares. Conta a partir da segunda-feira do rótulo.
    """
    start = parse_week_date(week_label)
    if start == EPOCH:
        return to_iso(EPOCH)
    target_weekday = 3 if start.year % 2 != 0 else 4
    try:
        meeting = start + timedelta(days=target_weekday - 1)
    except OverflowError:
        logger.warning("Data fora do intervalo para a semana %r", week_label)
        return to_iso(EPOCH)
    return to_iso(meeting)


def format_week_range(monday: datetime) -> str:
    """Rótulo canônico da semana de segunda a domingo."""
    sunday = monday + timedelta(days=6)
    m1, m2 = MONTH_ABBR[monday.month - 1], MONTH_ABBR[sunday.month - 1]
    if m1 == m2 and monday.year == sunday.year:
        return f"{monday.day}-{sunday.day} de {m1}, {monday.year}"
    return f"{monday.day} de {m1}, {monday.year} - {sunday.day} de {m2}, {sunday.year}"


def generate_weeks_for_workbook(workbook_name: str) -> List[str]:
    """
    Semanas cobertas por uma apostila, ex. "Janeiro/Fevereiro 2025".
    Começa na segunda-feira da semana do dia 1 e vai até o fim do último mês.
    """
    m = RE_WORKBOOK_NAME.search(workbook_name or "")
    if not m:
        return []
    start_name, end_name, year_str = m.groups()
    start_month = MONTH_MAP.get(start_name.upper())
    end_month = MONTH_MAP.get(end_name.upper())
    if start_month is None or end_month is None:
        return []

    year = int(year_str)
    first_day = datetime(year, start_month, 1, tzinfo=timezone.utc)
    if end_month == 12:
        last_day = datetime(year, 12, 31, tzinfo=timezone.utc)
    else:
        last_day = datetime(year, end_month + 1, 1, tzinfo=timezone.utc) - timedelta(days=1)

    monday = first_day - timedelta(days=first_day.weekday())
    weeks: List[str] = []
    while monday <= last_day:
        weeks.append(format_week_range(monday))
        monday += timedelta(days=7)
    return weeks


def normalize_name(text: str) -> str:
    """Minúsculas, sem acentos e com espaços simples. Base das chaves de comparação."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())
