from __future__ import annotations

"""
line_rules.py

Single-line classifiers and buffer boundary predicates for the reflow
state machine. Every function takes a line (or the current buffer) and
answers one question; none of them keeps state.
"""

import re

from .cjk_text import (
    contains_any_cjk,
    is_all_ascii,
    is_all_ascii_digits,
    is_all_cjk,
    is_ascii_letter,
    is_cjk,
    is_mostly_cjk,
    is_whitespace,
    last_non_whitespace_index,
    prev_non_whitespace_index,
    strip_ws,
)
from .punct_sets import (
    contains_any_comma_like,
    contains_strong_sentence_end,
    ends_with_ellipsis,
    has_unclosed_bracket,
    is_allowed_postfix_closer,
    is_bracket_closer,
    is_bracket_type_balanced,
    is_clause_or_end_punct,
    is_colon_like,
    is_dialog_closer,
    is_dialog_opener,
    is_matching_bracket,
    is_strong_sentence_end,
    is_wrapped_by_matching_bracket,
)

# =============================================================================
# Tables
# =============================================================================

PAGE_MARKER_PREFIX = "=== "
PAGE_MARKER_SUFFIX = "==="

TITLE_MAX_LEN = 50

# ^(?!.*[,，])(?=.{1,50}$)
#   ( 前言 | 序章 | 楔子 | 终章 | 尾声 | 后记 | ...
#   | 番外.{0,15}
#   | .{0,10}?第.{0,5}?[章节部卷節回] not followed by 分/合/的
#   | [卷章][一..十].{0,20} )
TITLE_HEADING_REGEX = re.compile(
    r"^(?!.*[,，])(?=.{1,%d}$)" % TITLE_MAX_LEN
    + r"(?:"
      r"(?:前言|序章|楔子|终章|終章|尾声|尾聲|后记|後記)"
      r"|番外.{0,15}$"
      r"|.{0,10}?第.{0,5}?[章节部卷節回](?![分合的])"
      r"|[卷章][一二三四五六七八九十].{0,20}$"
      r")"
)

CHAPTER_MARKERS = frozenset("章节部卷節回")
CHAPTER_END_BRACKETS = "】》〗〕〉」』）］"
CHAPTER_ENDING_MAX_LEN = 15

# Short-heading caps: CJK / mixed text vs. pure ASCII
HEADING_MAX_LEN = 8
HEADING_MAX_LEN_ASCII = HEADING_MAX_LEN * 2

METADATA_MAX_LEN = 30
METADATA_MAX_KEY_POS = 10
METADATA_SEPARATORS = frozenset("：:\u3000")

METADATA_KEYS = frozenset({
    # Title / author / publishing
    "書名", "书名",
    "作者",
    "譯者", "译者",
    "校訂", "校订",
    "出版社",
    "出版時間", "出版时间",
    "出版日期",
    # Copyright / license
    "版權", "版权",
    "版權頁", "版权页",
    "版權信息", "版权信息",
    # Editor / pricing
    "責任編輯", "责任编辑",
    "編輯", "编辑",
    "責編", "责编",
    "定價", "定价",
    # Descriptions / forewords
    "簡介", "简介",
    "前言",
    "序章",
    "終章", "终章",
    "尾聲", "尾声",
    "後記", "后记",
    # Digital publishing
    "品牌方",
    "出品方",
    "授權方", "授权方",
    "電子版權", "数字版权",
    "掃描", "扫描",
    "OCR",
    # CIP / cataloging
    "CIP",
    "在版編目", "在版编目",
    "分類號", "分类号",
    "主題詞", "主题词",
    "類型", "类型",
    "系列",
    # Publishing cycle
    "發行日", "发行日",
    "初版",
    "ISBN",
})

_DIVIDER_CHARS = frozenset("-=_~～*＊★☆")


# =============================================================================
# Structural lines
# =============================================================================

def is_page_marker(s: str) -> bool:
    """``=== [Page 1/20] ===`` style markers inserted by the PDF extractor."""
    return (
            len(s) >= 7
            and s.startswith(PAGE_MARKER_PREFIX)
            and s.endswith(PAGE_MARKER_SUFFIX)
    )


def is_visual_divider_line(s: str) -> bool:
    """
    Detect visual divider lines (box drawing / ASCII separators / stars).

    If True, we force a paragraph break.
    """
    total = 0
    for ch in s:
        if is_whitespace(ch):
            continue
        total += 1

        if "\u2500" <= ch <= "\u257f":  # box drawing range
            continue
        if ch in _DIVIDER_CHARS:
            continue

        return False

    return total >= 3


def is_title_heading(s: str) -> bool:
    return TITLE_HEADING_REGEX.match(s) is not None


def is_metadata_line(line: str) -> bool:
    """
    Detect lines like:
        書名：假面遊戲
        作者 : 東野圭吾
        出版時間　2024-03-12
    Caller should pass the probe (left indent removed).
    """
    s = strip_ws(line)
    if not s or len(s) > METADATA_MAX_LEN:
        return False

    # First separator only; it must sit in 1..10
    idx = next((i for i, ch in enumerate(s) if ch in METADATA_SEPARATORS), -1)
    if idx <= 0 or idx > METADATA_MAX_KEY_POS:
        return False

    if strip_ws(s[:idx]) not in METADATA_KEYS:
        return False

    value = strip_ws(s[idx + 1:])
    if not value:
        return False

    # "作者：「……」" is dialogue, not metadata
    return not is_dialog_opener(value[0])


def is_chapter_ending(s: str) -> bool:
    """Short text ending with 章/节/部/卷/節/回, allowing trailing closing brackets."""
    s = strip_ws(s)
    if not s or len(s) > CHAPTER_ENDING_MAX_LEN:
        return False
    s = s.rstrip(CHAPTER_END_BRACKETS)
    return bool(s) and s[-1] in CHAPTER_MARKERS


# =============================================================================
# Weak heading heuristic
# =============================================================================

def is_heading_like(s: str) -> bool:
    """
    Weak signal for short heading-like lines ("目录", "物品准备：", "（上）",
    "Chapter 12", "03").

    Whether a heading-like line really splits is decided by the caller,
    based on how the previous buffer ends.
    """
    s = strip_ws(s)
    if not s:
        return False

    # Page markers are not headings
    if is_page_marker(s):
        return False

    # Unbalanced bracket lines are not headings
    if has_unclosed_bracket(s):
        return False

    all_ascii = is_all_ascii(s)
    max_len = HEADING_MAX_LEN_ASCII if all_ascii else HEADING_MAX_LEN
    if len(s) > max_len:
        return False

    last = s[-1]
    body = s[:-1]

    # Item-title like: "物品准备："
    if is_colon_like(last) and is_all_cjk(body):
        return True

    # Postfix closer with no comma-like before it: "附录(一)"
    if is_allowed_postfix_closer(last) and not contains_any_comma_like(body):
        return True

    # Bracket-wrapped titles: （上）, 【番外】
    if is_wrapped_by_matching_bracket(s):
        inner = strip_ws(s[1:-1])
        if inner and is_mostly_cjk(inner):
            return True

    if (
            is_clause_or_end_punct(last)
            or contains_any_comma_like(s)
            or contains_strong_sentence_end(s)
    ):
        return False

    if all_ascii:
        return is_all_ascii_digits(s) or any(is_ascii_letter(ch) for ch in s)

    # CJK / mixed short line
    return True


# =============================================================================
# Sentence boundary (buffer ending)
# =============================================================================

def _is_at_end_allowing_closers(s: str, index: int) -> bool:
    return all(
        is_whitespace(ch) or is_dialog_closer(ch) or is_bracket_closer(ch)
        for ch in s[index + 1:]
    )


def _is_ocr_cjk_ascii_punct_at_line_end(s: str, punct_index: int) -> bool:
    """Strict OCR: ASCII punct is the last char and follows CJK in mostly-CJK text."""
    return punct_index > 0 and is_cjk(s[punct_index - 1]) and is_mostly_cjk(s)


def _is_ocr_cjk_ascii_punct_before_closers(s: str, punct_index: int) -> bool:
    """Relaxed OCR: only whitespace / closers may follow, e.g. ``.”`` ``.」`` ``.）``."""
    if not _is_at_end_allowing_closers(s, punct_index):
        return False
    prev_i = prev_non_whitespace_index(s, punct_index)
    return prev_i is not None and is_cjk(s[prev_i]) and is_mostly_cjk(s)


def ends_with_sentence_boundary(s: str, level: int = 2) -> bool:
    """
    Leveled sentence boundary detection.

    level 3 (strict):  strong end, closer after strong end, OCR '.'/':'.
    level 2 (default): strong end, closer after strong end (or OCR '.'),
                       full-width colon in mostly-CJK text, ellipsis.
    level 1 (loose):   level 2 plus any trailing ；：;:

    A bare bracket closer is NOT a boundary (avoid "（亦作肥）" flushing).
    """
    last_i = last_non_whitespace_index(s)
    if last_i is None:
        return False
    last = s[last_i]

    if is_strong_sentence_end(last):
        return True

    if level >= 3 and last in ".:" and _is_ocr_cjk_ascii_punct_at_line_end(s, last_i):
        return True

    # Quote closer / allowed postfix closer after a strong end: “好。” （完。）
    if is_dialog_closer(last) or is_allowed_postfix_closer(last):
        prev_i = prev_non_whitespace_index(s, last_i)
        if prev_i is not None:
            prev = s[prev_i]
            if is_strong_sentence_end(prev):
                return True
            if prev == "." and _is_ocr_cjk_ascii_punct_before_closers(s, prev_i):
                return True

    if level >= 3:
        return False

    # "他说：" then dialog starts on the next line
    if last == "：" and is_mostly_cjk(s):
        return True

    if ends_with_ellipsis(s):
        return True

    if level >= 2:
        return False

    return last in "；：;:"


# =============================================================================
# Bracket boundary (buffer ending)
# =============================================================================

def ends_with_cjk_bracket_boundary(s: str) -> bool:
    """
    True if the whole text is a balanced CJK-style bracket unit,
    e.g. （完）, 【番外】, 《後記》.
    """
    t = strip_ws(s)
    if len(t) < 2:
        return False

    open_ch = t[0]
    if not is_matching_bracket(open_ch, t[-1]):
        return False

    inner = strip_ws(t[1:-1])
    if not inner:
        return False

    # Reject "(test)", "[1.2]" etc.
    if not is_mostly_cjk(inner):
        return False

    # ASCII pairs are suspicious → require real CJK inside
    if open_ch in "([" and not contains_any_cjk(inner):
        return False

    return is_bracket_type_balanced(t, open_ch)
