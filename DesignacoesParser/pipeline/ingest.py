# -*- coding: utf-8 -*-
"""Ingestão: ler o PDF e extrair fragmentos posicionados por página."""

import logging
import re
from datetime import date
from pathlib import Path
from typing import List, Optional

try:
    import pdfplumber
except ImportError:
    pdfplumber = None

from .segment import Fragment

logger = logging.getLogger(__name__)

RE_YEAR = re.compile(r"20\d{2}")


def extract_fragments_from_pdf(pdf_path: str | Path) -> List[List[Fragment]]:
    """
    Devolve, para cada página, os fragmentos de texto com posição.
    Usa pdfplumber; se não estiver instalado, lança ImportError com mensagem clara.

    O y de cada fragmento é a linha de base medida a partir do rodapé da
    página (cresce para cima), como no agrupamento por linhas.
    """
    if pdfplumber is None:
        raise ImportError("É preciso o pdfplumber. Execute: pip install pdfplumber")

    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF não encontrado: {path}")

    pages: List[List[Fragment]] = []
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            # keep_blank_chars: nomes com espaço ficam num único fragmento
            words = page.extract_words(keep_blank_chars=True)
            pages.append([
                Fragment(
                    text=w["text"],
                    x=float(w["x0"]),
                    y=float(page.height) - float(w["bottom"]),
                    width=float(w["x1"]) - float(w["x0"]),
                )
                for w in words
            ])
    logger.debug("%s: %d páginas extraídas", path.name, len(pages))
    return pages


def detect_year_context(
    filename: str | Path,
    pages: List[List[Fragment]],
    today: Optional[date] = None,
) -> int:
    """Ano do histórico: pelo nome do arquivo, depois pelo texto da 1ª página, depois o ano atual."""
    m = RE_YEAR.search(Path(filename).name)
    if m:
        return int(m.group(0))
    if pages:
        first_page_text = " ".join(f.text for f in pages[0])
        m = RE_YEAR.search(first_page_text)
        if m:
            return int(m.group(0))
        logger.warning("Ano não detectado na página 1")
    return (today or date.today()).year
