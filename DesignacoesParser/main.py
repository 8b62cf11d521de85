# -*- coding: utf-8 -*-
"""
Ponto de entrada: converte o PDF de histórico de designações em JSON.
Uso: python main.py [caminho_do_PDF] [--output-dir DIR] [--year AAAA] [--csv] [--timeline]
     python main.py [apostila.pdf] --workbook "Janeiro/Fevereiro 2025"
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

# Adicionar raiz do projeto ao path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from pipeline.ingest import extract_fragments_from_pdf, detect_year_context
from pipeline.entities import parse_historic_pages
from pipeline.records import import_historical_weeks
from pipeline.timeline import build_timeline, group_records_by_week, timeline_to_rows
from pipeline.dates import generate_weeks_for_workbook
from pipeline.workbook import parse_workbook_pdf


def write_workbook_agenda(pdf_path: Path, workbook_name: str, out_dir: Path) -> int:
    """Partes da apostila repetidas para cada semana que ela cobre (apostila.json)."""
    weeks = generate_weeks_for_workbook(workbook_name)
    if not weeks:
        print(f"Erro: nome de apostila não reconhecido: {workbook_name!r} (ex. 'Janeiro/Fevereiro 2025')",
              file=sys.stderr)
        return 1
    try:
        parts = parse_workbook_pdf(pdf_path)
    except (ImportError, OSError) as e:
        print(f"Erro extraindo o PDF: {e}", file=sys.stderr)
        return 1
    if not parts:
        print("Nenhuma parte reconhecida na apostila.", file=sys.stderr)
        return 1

    agenda = [
        {"part_title": p.part_title, "type": p.type.value, "duration": p.duration}
        for p in parts
    ]
    out_dir.mkdir(parents=True, exist_ok=True)
    out_json = out_dir / "apostila.json"
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump({week: agenda for week in weeks}, f, ensure_ascii=False, indent=2)
    print(f"Apostila salva: {out_json} ({len(weeks)} semanas, {len(parts)} partes)")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Converte PDF de histórico de designações em JSON")
    parser.add_argument("pdf_path", help="Caminho do PDF (ex. historico_2024.pdf)")
    parser.add_argument(
        "--output-dir",
        "-o",
        default="output",
        help="Pasta de saída para o JSON (e CSV se --csv)",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Ano do histórico; por padrão vem do nome do arquivo ou da 1ª página",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Gerar também um CSV com uma linha por designação",
    )
    parser.add_argument(
        "--timeline",
        action="store_true",
        help="Gerar também a pauta cronometrada de cada semana (pauta.json)",
    )
    parser.add_argument(
        "--workbook",
        default=None,
        metavar="NOME",
        help="Tratar o PDF como apostila (ex. 'Janeiro/Fevereiro 2025') e gerar apostila.json",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log detalhado")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    pdf_path = Path(args.pdf_path)
    if not pdf_path.exists():
        print(f"Erro: PDF não encontrado: {pdf_path}", file=sys.stderr)
        return 1

    if args.workbook:
        return write_workbook_agenda(pdf_path, args.workbook, Path(args.output_dir))

    try:
        pages = extract_fragments_from_pdf(pdf_path)
    except (ImportError, OSError) as e:
        print(f"Erro extraindo o PDF: {e}", file=sys.stderr)
        return 1

    year = args.year or detect_year_context(pdf_path, pages)
    weeks = parse_historic_pages(pages, year)
    if not weeks:
        print("Nenhuma semana reconhecida no PDF.", file=sys.stderr)
        return 1

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_json = out_dir / "historico.json"
    with open(out_json, "w", encoding="utf-8") as f:
        json.dump([asdict(w) for w in weeks], f, ensure_ascii=False, indent=2)
    print(f"JSON salvo: {out_json} ({len(weeks)} semanas)")

    if args.csv:
        import csv
        out_csv = out_dir / "historico.csv"
        with open(out_csv, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["week", "part_number", "part_title", "publisher_name"])
            for week in weeks:
                for p in week.participations:
                    w.writerow([week.week, p.part_number or "", p.part_title, p.publisher_name])
        print(f"CSV salvo: {out_csv}")

    if args.timeline:
        result = import_historical_weeks(weeks)
        schedule = {
            week: timeline_to_rows(build_timeline(records))
            for week, records in group_records_by_week(result.records).items()
        }
        out_timeline = out_dir / "pauta.json"
        with open(out_timeline, "w", encoding="utf-8") as f:
            json.dump(schedule, f, ensure_ascii=False, indent=2)
        print(f"Pauta salva: {out_timeline}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
