from __future__ import annotations

"""
pdf_helper.py

PDF text extraction (PyMuPDF) feeding the CJK reflow engine.

No reflow logic lives here: extraction returns raw page text, optionally
prefixed with ``=== [Page i/N] ===`` markers, and hosts decide whether to
sanitize / reflow it.
"""

import logging
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

import pymupdf

logger = logging.getLogger(__name__)

# =============================================================================
# Types
# =============================================================================

ProgressCallback = Callable[[int, int], None]  # (current_page, total_pages)
CancelCallback = Callable[[], bool]  # return True => cancel requested


class ExtractResult(NamedTuple):
    text: str
    cancelled: bool = False


# =============================================================================
# Extraction helpers (top)
# =============================================================================

def get_progress_block(total_pages: int) -> int:
    if total_pages <= 20:
        return 1
    if total_pages <= 100:
        return 3
    if total_pages <= 300:
        return 5
    return max(1, total_pages // 20)


def build_progress_bar(current: int, total: int, width: int = 10) -> str:
    if total <= 0:
        return "[" + "🟨" * width + "]"
    filled = current * width // total
    filled = max(0, min(width, filled))
    return "[" + "🟩" * filled + "🟨" * (width - filled) + "]"


def format_page_header(page_no: int, total: int) -> str:
    return f"=== [Page {page_no}/{total}] ==="


# -----------------------------------------------
# Remove Invisible Chars from extracted PDF text
# -----------------------------------------------

INVISIBLE_CHARS = (
    "\u200b",  # ZERO WIDTH SPACE
    "\ufeff",  # BOM / ZERO WIDTH NO-BREAK SPACE
    "\u200e",  # LEFT-TO-RIGHT MARK
    "\u200f",  # RIGHT-TO-LEFT MARK
    "\u202a",  # LRE
    "\u202b",  # RLE
    "\u202c",  # PDF
    "\u202d",  # LRO
    "\u202e",  # RLO
)

_INVISIBLE_TABLE = dict.fromkeys(map(ord, INVISIBLE_CHARS))


def sanitize_invisible(text: str) -> str:
    return text.translate(_INVISIBLE_TABLE)


# ---------------------------------------------------------------------------
# Core PDF extraction (reusable for batch)
# ---------------------------------------------------------------------------

def extract_pdf_text_core(
        filename: str,
        add_pdf_page_header: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        is_cancelled: Optional[CancelCallback] = None,
) -> ExtractResult:
    """
    Extract plain text from every page of a PDF.

    - ``on_progress(current, total)`` fires on page 1, the last page and every
      ``get_progress_block(total)`` pages in between.
    - ``is_cancelled()`` is polled before each page; when it returns True the
      pages read so far are returned with ``cancelled=True``.

    Raises FileNotFoundError for a missing path and RuntimeError when PyMuPDF
    cannot open the file.
    """
    path = Path(filename)
    if not path.is_file():
        raise FileNotFoundError(f"PDF not found: {path}")

    try:
        doc = pymupdf.open(str(path))
    except Exception as e:  # noqa: BLE001
        raise RuntimeError(f"Failed to load PDF: {path} ({e})") from e

    try:
        total = doc.page_count
        logger.info("Opened %s (%d pages)", path, total)
        if total <= 0:
            return ExtractResult("")

        parts: List[str] = []
        block = get_progress_block(total)

        for i in range(total):
            if is_cancelled is not None and is_cancelled():
                logger.warning("Extraction cancelled at page %d/%d - %s", i, total, path)
                return ExtractResult("".join(parts), cancelled=True)

            page = doc[i]
            text = page.get_text("text") or ""  # type: ignore

            if add_pdf_page_header:
                parts.append(f"\n\n{format_page_header(i + 1, total)}\n\n")

            parts.append(text)

            current = i + 1
            if current % block == 0 or current == 1 or current == total:
                if on_progress is not None:
                    on_progress(current, total)

        return ExtractResult("".join(parts))

    finally:
        doc.close()
