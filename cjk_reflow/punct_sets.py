from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .cjk_text import is_mostly_cjk, lstrip_ws, rstrip_ws

# =============================================================================
# Sentence / clause punctuation tiers
# =============================================================================

# Tier 1: hard sentence enders (safe for "flush now")
STRONG_SENTENCE_END = frozenset("。！？!?")

# Tier 2: clause-or-end (looser, not always a true sentence end)
CLAUSE_OR_END_PUNCT = "。！？；：…—”」’』）】》〗〕〉］｝＞.!?):>"

_CLAUSE_OR_END_SET = frozenset(CLAUSE_OR_END_PUNCT)

_COMMA_LIKE = frozenset("，,、")

_COLON_LIKE = frozenset("：:")

_ALLOWED_POSTFIX_CLOSERS = frozenset(")）")


def is_strong_sentence_end(ch: Optional[str]) -> bool:
    return ch in STRONG_SENTENCE_END


def contains_strong_sentence_end(s: str) -> bool:
    return any(ch in STRONG_SENTENCE_END for ch in s)


def is_clause_or_end_punct(ch: Optional[str]) -> bool:
    """Return True if character is clause-ending or sentence-ending punctuation."""
    return ch in _CLAUSE_OR_END_SET


def is_comma_like(ch: Optional[str]) -> bool:
    return ch in _COMMA_LIKE


def contains_any_comma_like(s: str) -> bool:
    return any(ch in _COMMA_LIKE for ch in s)


def is_colon_like(ch: Optional[str]) -> bool:
    return ch in _COLON_LIKE


def ends_with_colon_like(s: str) -> bool:
    t = rstrip_ws(s)
    return bool(t) and t[-1] in _COLON_LIKE


def is_allowed_postfix_closer(ch: Optional[str]) -> bool:
    return ch in _ALLOWED_POSTFIX_CLOSERS


def ends_with_allowed_postfix_closer(s: str) -> bool:
    t = rstrip_ws(s)
    return bool(t) and t[-1] in _ALLOWED_POSTFIX_CLOSERS


def ends_with_ellipsis(s: str) -> bool:
    """
    Ellipsis as a weak boundary, only meaningful in CJK context.

    Accepts the Unicode ``…`` (so ``……`` too) and the OCR form ``...``.
    """
    if not is_mostly_cjk(s):
        return False
    t = rstrip_ws(s)
    return t.endswith("…") or t.endswith("...")


# =============================================================================
# Dialog quotes (tracked separately from generic brackets)
# =============================================================================

DIALOG_OPEN_TO_CLOSE: Dict[str, str] = {
    "“": "”",
    "‘": "’",
    "「": "」",
    "『": "』",
    "﹁": "﹂",
    "﹃": "﹄",
}

DIALOG_CLOSE_TO_OPEN: Dict[str, str] = {v: k for k, v in DIALOG_OPEN_TO_CLOSE.items()}

DIALOG_OPENERS = tuple(DIALOG_OPEN_TO_CLOSE)
DIALOG_CLOSERS = tuple(DIALOG_CLOSE_TO_OPEN)

_DIALOG_OPENER_SET = frozenset(DIALOG_OPENERS)
_DIALOG_CLOSER_SET = frozenset(DIALOG_CLOSERS)


def is_dialog_opener(ch: Optional[str]) -> bool:
    return ch in _DIALOG_OPENER_SET


def is_dialog_closer(ch: Optional[str]) -> bool:
    return ch in _DIALOG_CLOSER_SET


def begins_with_dialog_opener(s: str) -> bool:
    t = lstrip_ws(s)
    return bool(t) and t[0] in _DIALOG_OPENER_SET


# =============================================================================
# Bracket pairs (open → close), single source of truth
# =============================================================================

BRACKET_PAIRS: Tuple[Tuple[str, str], ...] = (
    # Parentheses
    ("（", "）"),
    ("(", ")"),
    # Square brackets
    ("［", "］"),
    ("[", "]"),
    # Curly braces
    ("｛", "｝"),
    ("{", "}"),
    # Angle brackets
    ("＜", "＞"),
    ("<", ">"),
    ("⟨", "⟩"),
    ("〈", "〉"),
    # CJK brackets
    ("【", "】"),
    ("《", "》"),
    ("〔", "〕"),
    ("〖", "〗"),
)

_BRACKET_OPEN_TO_CLOSE: Dict[str, str] = dict(BRACKET_PAIRS)
_BRACKET_CLOSE_TO_OPEN: Dict[str, str] = {close: open_ for open_, close in BRACKET_PAIRS}


def is_bracket_opener(ch: Optional[str]) -> bool:
    return ch in _BRACKET_OPEN_TO_CLOSE


def is_bracket_closer(ch: Optional[str]) -> bool:
    return ch in _BRACKET_CLOSE_TO_OPEN


def is_matching_bracket(open_ch: str, close_ch: str) -> bool:
    return _BRACKET_OPEN_TO_CLOSE.get(open_ch) == close_ch


def try_get_matching_closer(open_ch: str) -> Optional[str]:
    return _BRACKET_OPEN_TO_CLOSE.get(open_ch)


def is_wrapped_by_matching_bracket(s: str, min_len: int = 3) -> bool:
    """First and last char form a known pair; min_len=3 is open + 1 char + close."""
    return len(s) >= min_len and is_matching_bracket(s[0], s[-1])


def is_bracket_type_balanced(s: str, open_ch: str) -> bool:
    """
    Signed-depth scan for one bracket type.

    Returns False as soon as depth goes negative or if it does not end at 0.
    Unknown openers are treated as balanced.
    """
    close_ch = try_get_matching_closer(open_ch)
    if close_ch is None:
        return True

    depth = 0
    for ch in s:
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth < 0:
                return False

    return depth == 0


def has_unclosed_bracket(s: str) -> bool:
    """
    Strict bracket safety check over all known pairs.

    - Track openers on a stack.
    - Closer with no opener => unsafe.
    - Opener/closer mismatch => unsafe.
    - Anything left on the stack at the end => unsafe.
    """
    stack: List[str] = []

    for ch in s:
        if ch in _BRACKET_OPEN_TO_CLOSE:
            stack.append(ch)
        elif ch in _BRACKET_CLOSE_TO_OPEN:
            if not stack or _BRACKET_OPEN_TO_CLOSE[stack.pop()] != ch:
                return True

    return bool(stack)
