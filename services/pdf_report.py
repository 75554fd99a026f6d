# services/pdf_report.py

from __future__ import annotations

import logging
import re

from fpdf import FPDF

from models.pillar_models import PILLARS
from models.report_models import FullAuditReport

logger = logging.getLogger(__name__)

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 20
TEXT_WIDTH = 170
MAX_PDF_KEYWORDS = 5

# コアフォント（helvetica）は Latin-1 しか出せないので、よく出る記号だけ置き換える
_REPLACEMENTS = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": "\"",
    "\u201d": "\"",
    "\u2013": "-",
    "\u2014": "-",
    "\u2022": "-",
    "\u2026": "...",
    "\u00a0": " ",
}


def report_filename(domain: str) -> str:
    """GrowthStack_KeywordsAudit_<英数字以外を _ に置換したドメイン>.pdf"""
    return f"GrowthStack_KeywordsAudit_{re.sub(r'[^A-Za-z0-9]', '_', domain or '')}.pdf"


def _latin1(text: str) -> str:
    for src, dst in _REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", "replace").decode("latin-1")


def _cover_page(pdf: FPDF, domain: str) -> None:
    pdf.add_page()
    pdf.set_fill_color(15, 23, 42)
    pdf.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, style="F")

    pdf.set_text_color(59, 130, 246)
    pdf.set_font("helvetica", style="B", size=36)
    pdf.text(MARGIN, 80, "GROWTHSTACK")

    pdf.set_text_color(255, 255, 255)
    pdf.set_font("helvetica", style="B", size=18)
    pdf.text(MARGIN, 95, "FORENSIC DOMAIN AUDIT")

    pdf.set_font("helvetica", size=12)
    pdf.text(MARGIN, 110, _latin1(domain))


def _pillar_page(pdf: FPDF, title: str, keywords, narrative: str) -> None:
    pdf.add_page()
    pdf.set_fill_color(30, 41, 59)
    pdf.rect(0, 0, PAGE_WIDTH, 50, style="F")

    pdf.set_text_color(255, 255, 255)
    pdf.set_font("helvetica", style="B", size=22)
    pdf.text(MARGIN, 30, _latin1(title.upper()))

    pdf.set_text_color(15, 23, 42)
    pdf.set_font("helvetica", style="B", size=12)
    pdf.text(MARGIN, 65, "KEYWORDS")

    pdf.set_font("helvetica", size=12)
    key_y = 75
    for kw in keywords[:MAX_PDF_KEYWORDS]:
        pdf.text(MARGIN + 5, key_y, _latin1(f"- {kw.term} ({kw.intent})"))
        key_y += 7

    pdf.set_font("helvetica", style="B", size=12)
    pdf.text(MARGIN, key_y + 10, "STRATEGY")

    # 本文は幅 170mm で折り返し。長い場合は自動改ページに任せる
    pdf.set_font("helvetica", size=9)
    pdf.set_xy(MARGIN, key_y + 16)
    pdf.multi_cell(TEXT_WIDTH, 4, _latin1(narrative or ""))


def build_pdf_report(report: FullAuditReport) -> bytes:
    """表紙 + ピラーごとに 1 ページ（キーワード上位 5 件 + 戦略本文）の PDF を作る。"""
    pdf = FPDF(format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_title(_latin1(f"GrowthStack Forensic Audit - {report.domain}"))

    _cover_page(pdf, report.domain)

    for pillar in PILLARS:
        result = report.results.get(pillar.id)
        if result is None:
            continue
        _pillar_page(pdf, pillar.title, result.keywords, result.text)

    data = bytes(pdf.output())
    logger.info(
        "[pdf_report] built domain=%s pages=%d size=%d",
        report.domain,
        pdf.page_no(),
        len(data),
    )
    return data
