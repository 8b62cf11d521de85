# -*- coding: utf-8 -*-
"""Pipeline: PDF de histórico de designações -> semanas -> registros -> pauta cronometrada."""

from .dates import (
    calculate_part_date,
    generate_weeks_for_workbook,
    normalize_name,
    parse_week_date,
    standardize_week_date,
)
from .ingest import extract_fragments_from_pdf, detect_year_context
from .segment import group_items_by_lines, split_names_by_gap, split_week_blocks
from .entities import parse_week_block, parse_historic_pages, parse_historic_pdf
from .records import import_historical_weeks
from .relations import classify, get_ordered_and_paired_parts, validate_suggestions
from .events import apply_event_impact
from .timeline import build_timeline
from .workbook import parse_workbook_page, parse_workbook_pdf

__all__ = [
    "calculate_part_date",
    "parse_week_date",
    "standardize_week_date",
    "generate_weeks_for_workbook",
    "normalize_name",
    "extract_fragments_from_pdf",
    "detect_year_context",
    "group_items_by_lines",
    "split_names_by_gap",
    "split_week_blocks",
    "parse_week_block",
    "parse_historic_pages",
    "parse_historic_pdf",
    "import_historical_weeks",
    "classify",
    "get_ordered_and_paired_parts",
    "validate_suggestions",
    "apply_event_impact",
    "build_timeline",
    "parse_workbook_page",
    "parse_workbook_pdf",
]
