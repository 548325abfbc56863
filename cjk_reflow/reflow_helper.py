from __future__ import annotations

"""
reflow_helper.py

CJK paragraph reflow for PDF/plain text extraction pipelines.

Design notes
------------
- Independent from PDF extraction backends; takes text, returns text.
- Rebuilds paragraphs from hard-wrapped lines, keeps headings / metadata /
  page markers / dividers standalone, and removes style-layer repeats.
- While any dialog quote or bracket is open the buffer is never flushed by
  punctuation or heading signals.
- Pure and re-entrant: all state lives inside one call.

The public entry point is:
    reflow_cjk_paragraphs_core(text, add_pdf_page_header=..., compact=...)
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional

from .cjk_text import (
    is_all_cjk,
    is_blank,
    is_cjk,
    last_non_whitespace,
    last_two_non_whitespace,
    lstrip_ws,
    rstrip_ws,
)
from .dialog_state import DialogState
from .line_rules import (
    ends_with_cjk_bracket_boundary,
    ends_with_sentence_boundary,
    is_chapter_ending,
    is_heading_like,
    is_metadata_line,
    is_page_marker,
    is_title_heading,
    is_visual_divider_line,
)
from .noise_collapse import collapse_consecutive_duplicate_lines, collapse_repeated_segments
from .punct_sets import (
    begins_with_dialog_opener,
    ends_with_allowed_postfix_closer,
    ends_with_colon_like,
    has_unclosed_bracket,
    is_clause_or_end_punct,
    is_comma_like,
    is_dialog_closer,
    is_strong_sentence_end,
)

logger = logging.getLogger(__name__)

CancelCallback = Callable[[], bool]  # return True => cancel requested

# Poll the cancel hook every N input lines
CANCEL_CHECK_INTERVAL = 1000


class ReflowCancelled(RuntimeError):
    """The caller's cancel hook asked the reflow to stop."""


# =============================================================================
# Line views
# =============================================================================

class ReflowLine(NamedTuple):
    raw: str
    visual: str  # right-trimmed
    text: str  # visual with style-layer repeats collapsed
    probe: str  # text without any left indent (incl. full-width)

    @classmethod
    def from_raw(cls, raw: str) -> "ReflowLine":
        visual = rstrip_ws(raw)
        text = collapse_repeated_segments(visual)
        # collapse may change leading layout; probe is recomputed from it
        return cls(raw, visual, text, lstrip_ws(text))

    @property
    def divider_probe(self) -> str:
        # Dividers are judged before collapse: "- - - - -" would collapse to "-"
        return lstrip_ws(self.visual)


# =============================================================================
# Reflow rule helpers (kept out of the main loop)
# =============================================================================

def _looks_like_continuation_marker(line: str) -> bool:
    return (
            is_all_cjk(line, allow_whitespace=True)
            or ends_with_colon_like(line)
            or ends_with_allowed_postfix_closer(line)
    )


def _heading_may_split(buffer: str, line: str, buffer_unsafe: bool) -> bool:
    """
    A weak heading only splits if the previous buffer is finished enough:
    a buffer ending with a comma, or a CJK continuation after an unpunctuated
    buffer, means the "heading" is really the tail of a sentence.
    """
    last = last_non_whitespace(buffer)
    if last is None:
        return True
    if buffer_unsafe or is_comma_like(last):
        return False
    return not _looks_like_continuation_marker(line) or is_clause_or_end_punct(last)


def _dialog_may_start(buffer: str) -> bool:
    last = last_non_whitespace(buffer)
    if last is None:
        return True
    return not is_comma_like(last) and not is_cjk(last)


def _ends_paragraph(buffer: str, buffer_has_unclosed_bracket: bool) -> bool:
    if not buffer_has_unclosed_bracket and ends_with_sentence_boundary(buffer):
        return True
    # （完）, 【番外】, 《後記》
    if ends_with_cjk_bracket_boundary(buffer):
        return True
    return is_chapter_ending(buffer)


# =============================================================================
# Reflow core
# =============================================================================

def reflow_segments(
        text: str,
        *,
        add_pdf_page_header: bool,
        is_cancelled: Optional[CancelCallback] = None,
        check_interval: int = CANCEL_CHECK_INTERVAL,
) -> List[str]:
    """
    Run the merge/flush state machine and return the ordered segments.

    Segments are appended exactly once and never touched again.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    check_interval = max(1, check_interval)

    segments: List[str] = []
    buffer = ""
    dialog_state = DialogState()

    def flush() -> None:
        nonlocal buffer
        if buffer:
            segments.append(buffer)
            buffer = ""
            dialog_state.reset()

    def start_paragraph(s: str) -> None:
        nonlocal buffer
        buffer = s
        dialog_state.reset()
        dialog_state.update(s)

    def append(s: str) -> None:
        nonlocal buffer
        buffer += s
        dialog_state.update(s)

    for line_no, raw_line in enumerate(lines, 1):
        if is_cancelled is not None and line_no % check_interval == 0 and is_cancelled():
            raise ReflowCancelled(f"Reflow cancelled at line {line_no}/{len(lines)}")

        line = ReflowLine.from_raw(raw_line)
        stripped = line.text
        probe = line.probe

        buffer_has_unclosed_bracket = has_unclosed_bracket(buffer)
        dialog_unclosed = dialog_state.is_unclosed

        # Dialog state as it would be with this line merged in
        after_line = dialog_state.copy()
        after_line.update(stripped)

        # 1) Empty line
        if not stripped:
            if not add_pdf_page_header and buffer:
                # Mid-enclosure, a blank line is only a soft wrap
                if dialog_unclosed or buffer_has_unclosed_bracket:
                    continue
                # Cross-page gap: keep accumulating unless a sentence ended
                if not is_strong_sentence_end(last_non_whitespace(buffer)):
                    continue
            flush()
            continue

        # 2) Divider line → ALWAYS its own segment
        divider = line.divider_probe
        if is_visual_divider_line(divider):
            flush()
            segments.append(divider)
            continue

        # 3) Page markers, strong title headings, metadata → standalone
        if is_page_marker(probe) or is_title_heading(probe) or is_metadata_line(probe):
            flush()
            segments.append(stripped)
            continue

        # 4) Weak heading-like: depends on how the previous buffer ends
        if (
                is_heading_like(stripped)
                and not dialog_unclosed
                and not after_line.is_unclosed
                and _heading_may_split(buffer, stripped, buffer_has_unclosed_bracket)
        ):
            flush()
            segments.append(stripped)
            continue

        # 5) Line finishes a sentence → merge it, then flush as a paragraph
        if not dialog_unclosed and is_strong_sentence_end(last_non_whitespace(stripped)):
            if not after_line.is_unclosed and not has_unclosed_bracket(buffer + stripped):
                append(stripped)
                flush()
                continue

        # 6) First line of a new paragraph
        if not buffer:
            start_paragraph(stripped)
            continue

        # 7) Dialog start: flush previous paragraph unless it was mid-clause
        if (
                begins_with_dialog_opener(stripped)
                and not dialog_unclosed
                and not buffer_has_unclosed_bracket
                and _dialog_may_start(buffer)
        ):
            flush()
            start_paragraph(stripped)
            continue

        # 8) Dialog end line: flush when the char before the closer ends a
        #    clause and bracket safety holds (with a narrow typo override)
        last2 = last_two_non_whitespace(stripped)
        if last2 is not None and is_dialog_closer(last2[0]):
            prev_ch = last2[1]
            line_has_bracket_issue = has_unclosed_bracket(stripped)

            append(stripped)

            if (
                    not dialog_state.is_unclosed
                    and is_clause_or_end_punct(prev_ch)
                    and (not buffer_has_unclosed_bracket or line_has_bracket_issue)
            ):
                flush()
            continue

        # 9) Previous buffer already ends a paragraph
        if not dialog_unclosed and _ends_paragraph(buffer, buffer_has_unclosed_bracket):
            flush()
            start_paragraph(stripped)
            continue

        # 10) Default: soft line wrap
        append(stripped)

    flush()

    logger.debug("reflow: %d lines -> %d segments", len(lines), len(segments))
    return segments


def join_segments(segments: List[str], *, compact: bool) -> str:
    return ("\n" if compact else "\n\n").join(segments)


def reflow_cjk_paragraphs_core(
        text: str,
        *,
        add_pdf_page_header: bool,
        compact: bool,
        is_cancelled: Optional[CancelCallback] = None,
        check_interval: int = CANCEL_CHECK_INTERVAL,
) -> str:
    """
    Reflow extracted text into CJK-friendly paragraphs.

    Parameters
    ----------
    text:
        Extracted text (already Unicode).
    add_pdf_page_header:
        If True, page markers like "=== [Page 1/20] ===" are expected to exist
        and every blank line is a hard paragraph break. If False, blank lines
        are treated as possible cross-page gaps and only break after a strong
        sentence end.
    compact:
        If True, join segments with single newlines; otherwise join paragraphs
        with blank lines (double newlines).
    is_cancelled:
        Optional hook polled every ``check_interval`` lines; returning True
        raises ReflowCancelled.

    Returns
    -------
    str:
        Reflowed text. Whitespace-only input is returned unchanged.
    """
    if is_blank(text):
        return text

    segments = reflow_segments(
        text,
        add_pdf_page_header=add_pdf_page_header,
        is_cancelled=is_cancelled,
        check_interval=check_interval,
    )
    return join_segments(segments, compact=compact)


def reflow_cjk_paragraphs_bytes(
        data: bytes,
        *,
        add_pdf_page_header: bool,
        compact: bool,
) -> bytes:
    """UTF-8 in / UTF-8 out; invalid sequences become U+FFFD instead of failing."""
    text = data.decode("utf-8", errors="replace")
    if is_blank(text):
        return data
    return reflow_cjk_paragraphs_core(
        text, add_pdf_page_header=add_pdf_page_header, compact=compact
    ).encode("utf-8")


# =============================================================================
# Options
# =============================================================================

@dataclass(frozen=True)
class ReflowOptions:
    """Reflow switches as exposed to hosts (menu toggles / CLI flags)."""

    add_pdf_page_header: bool = False
    compact: bool = False
    dedupe_lines: bool = False

    def reflow(self, text: str, is_cancelled: Optional[CancelCallback] = None) -> str:
        if self.dedupe_lines and not is_blank(text):
            text = collapse_consecutive_duplicate_lines(text)
        return reflow_cjk_paragraphs_core(
            text,
            add_pdf_page_header=self.add_pdf_page_header,
            compact=self.compact,
            is_cancelled=is_cancelled,
        )
