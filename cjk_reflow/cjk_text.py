from __future__ import annotations

"""
cjk_text.py

Character-class predicates used by the reflow heuristics.

Everything here is deterministic and locale-independent: whitespace is a
fixed set (not ``str.isspace``), CJK is three BMP ideograph blocks.
Designed for reflow heuristics, not full Unicode linguistics.
"""

from typing import Optional, Tuple

# =============================================================================
# Whitespace
# =============================================================================

IDEOGRAPHIC_SPACE = "\u3000"

WHITESPACE_CHARS = (
    " \t\n\r\f\v"
    "\u00a0"  # NO-BREAK SPACE
    "\u1680"  # OGHAM SPACE MARK
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028"  # LINE SEPARATOR
    "\u2029"  # PARAGRAPH SEPARATOR
    "\u202f"  # NARROW NO-BREAK SPACE
    "\u205f"  # MEDIUM MATHEMATICAL SPACE
    "\u3000"  # IDEOGRAPHIC SPACE
)

_WHITESPACE_SET = frozenset(WHITESPACE_CHARS)


def is_whitespace(ch: str) -> bool:
    return ch in _WHITESPACE_SET


def is_blank(s: str) -> bool:
    return all(ch in _WHITESPACE_SET for ch in s)


def rstrip_ws(s: str) -> str:
    return s.rstrip(WHITESPACE_CHARS)


def lstrip_ws(s: str) -> str:
    return s.lstrip(WHITESPACE_CHARS)


def strip_ws(s: str) -> str:
    return s.strip(WHITESPACE_CHARS)


# =============================================================================
# Last / previous non-whitespace lookups
# =============================================================================

def last_non_whitespace(s: str) -> Optional[str]:
    """Return the last non-whitespace character, or None."""
    t = rstrip_ws(s)
    return t[-1] if t else None


def last_non_whitespace_index(s: str) -> Optional[int]:
    i = len(rstrip_ws(s)) - 1
    return i if i >= 0 else None


def prev_non_whitespace_index(s: str, before: int) -> Optional[int]:
    """Index of the previous non-whitespace char strictly before ``before``."""
    i = len(rstrip_ws(s[:max(before, 0)])) - 1
    return i if i >= 0 else None


def last_two_non_whitespace(s: str) -> Optional[Tuple[str, Optional[str]]]:
    """
    Return ``(last, prev)`` non-whitespace characters.

    None only when there is no ``last``; ``prev`` is None when the text holds
    a single meaningful character.
    """
    last_i = last_non_whitespace_index(s)
    if last_i is None:
        return None
    prev_i = prev_non_whitespace_index(s, last_i)
    return s[last_i], (s[prev_i] if prev_i is not None else None)


# =============================================================================
# CJK / ASCII classifiers
# =============================================================================

def is_cjk(ch: str) -> bool:
    c = ord(ch)
    if 0x3400 <= c <= 0x4DBF:  # Extension A
        return True
    if 0x4E00 <= c <= 0x9FFF:  # Unified Ideographs
        return True
    return 0xF900 <= c <= 0xFAFF  # Compatibility Ideographs


def is_ascii_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_ascii_letter(ch: str) -> bool:
    return ("A" <= ch <= "Z") or ("a" <= ch <= "z")


def is_fullwidth_digit(ch: str) -> bool:
    return "０" <= ch <= "９"


def is_all_ascii(s: str) -> bool:
    return s.isascii()


def contains_any_cjk(s: str) -> bool:
    return any(is_cjk(ch) for ch in s)


def is_all_ascii_digits(s: str) -> bool:
    """
    ASCII space is neutral; ASCII and full-width digits are allowed; anything
    else rejects. At least one digit is required.
    """
    has_digit = False
    for ch in s:
        if ch == " ":
            continue
        if is_ascii_digit(ch) or is_fullwidth_digit(ch):
            has_digit = True
            continue
        return False
    return has_digit


_NEUTRAL_ASCII_FOR_MIXED = frozenset(" -/:.")


def is_mixed_cjk_ascii(s: str) -> bool:
    """
    True if ``s`` mixes CJK with ASCII letters/digits, e.g. "第3章 Chapter 1".

    - ' ', '-', '/', ':', '.' are neutral
    - other ASCII punctuation rejects
    - full-width digits count as ASCII content
    - any other non-ASCII, non-CJK character rejects

    Public helper for hosts. The reflow rules do not call it: mixed lines
    get the same short-heading cap as CJK lines.
    """
    has_cjk = False
    has_ascii = False

    for ch in s:
        if ch in _NEUTRAL_ASCII_FOR_MIXED:
            continue

        if ch.isascii():
            if is_ascii_digit(ch) or is_ascii_letter(ch):
                has_ascii = True
            else:
                return False
        elif is_fullwidth_digit(ch):
            has_ascii = True
        elif is_cjk(ch):
            has_cjk = True
        else:
            return False

    return has_cjk and has_ascii


def is_mostly_cjk(s: str) -> bool:
    cjk = 0
    ascii_letters = 0

    for ch in s:
        # Neutral: whitespace, ASCII and full-width digits
        if ch in _WHITESPACE_SET or is_ascii_digit(ch) or is_fullwidth_digit(ch):
            continue

        if is_cjk(ch):
            cjk += 1
        elif is_ascii_letter(ch):
            ascii_letters += 1
        # else: symbols / punctuation → neutral

    return cjk > 0 and cjk >= ascii_letters


def is_all_cjk(s: str, allow_whitespace: bool = False) -> bool:
    """
    True if every character of ``s`` is CJK.

    Whitespace is skipped when ``allow_whitespace`` is set, otherwise it
    rejects. Empty and whitespace-only text is never "all CJK".
    """
    seen = False
    for ch in s:
        if ch in _WHITESPACE_SET:
            if not allow_whitespace:
                return False
            continue
        if not is_cjk(ch):
            return False
        seen = True
    return seen
