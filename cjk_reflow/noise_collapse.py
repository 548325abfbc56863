from __future__ import annotations

"""
noise_collapse.py

Style-layer repeat collapse for PDF headings / title lines.

Highlighted or outlined titles are often extracted several times in a row
("背负着一切的麒麟 背负着一切的麒麟 背负着一切的麒麟"), and some generators
glue the copies into a single token. Conceptually this is ``(.{4,10}?)\\1{2,}``
but done token- and phrase-aware so CJK titles and multi-word headings work.

Deliberately conservative: natural repetition like "哈哈哈哈哈哈" survives
(unit shorter than 4), as do tokens outside 4..200 chars and anything
repeated fewer than 3 times.
"""

import re
from typing import List, Optional, Sequence

MIN_REPEATS = 3
MAX_PHRASE_TOKENS = 8

TOKEN_MIN_LEN = 4
TOKEN_MAX_LEN = 200
UNIT_MIN_LEN = 4
UNIT_MAX_LEN = 10

# Only ASCII space / tab separate tokens; U+3000 is content (full-width indent)
_TOKEN_SPLIT_RE = re.compile(r"[ \t]+")


def collapse_repeated_token(token: str) -> str:
    """
    Collapse a token made of one unit repeated, e.g.
    'ABCDABCDABCD' → 'ABCD'.
    """
    length = len(token)
    if length < TOKEN_MIN_LEN or length > TOKEN_MAX_LEN:
        return token

    for unit_len in range(UNIT_MIN_LEN, UNIT_MAX_LEN + 1):
        if unit_len > length // MIN_REPEATS:
            break
        if length % unit_len:
            continue

        unit = token[:unit_len]
        if unit * (length // unit_len) == token:
            return unit

    return token


def _repeat_count(parts: Sequence[str], start: int, phrase_len: int) -> int:
    phrase = parts[start:start + phrase_len]
    count = 1
    while True:
        next_start = start + count * phrase_len
        if next_start + phrase_len > len(parts):
            return count
        if parts[next_start:next_start + phrase_len] != phrase:
            return count
        count += 1


def collapse_repeated_word_sequences(parts: Sequence[str]) -> List[str]:
    """
    Replace the first run of a 1..8 token phrase repeated 3+ times by a
    single copy, keeping whatever precedes and follows the run.
    """
    parts = list(parts)
    n = len(parts)
    if n < MIN_REPEATS:
        return parts

    for start in range(n):
        for phrase_len in range(1, MAX_PHRASE_TOKENS + 1):
            if start + phrase_len > n:
                break

            count = _repeat_count(parts, start, phrase_len)
            if count >= MIN_REPEATS:
                tail_start = start + count * phrase_len
                return parts[:start + phrase_len] + parts[tail_start:]

    return parts


def collapse_repeated_segments(line: str) -> str:
    """
    Line-level wrapper: split on spaces/tabs, collapse repeated phrases,
    then repeated units inside each token, and join with single spaces.

    A line with no tokens is returned untouched.
    """
    if not line:
        return line

    parts = [p for p in _TOKEN_SPLIT_RE.split(line) if p]
    if not parts:
        return line

    parts = collapse_repeated_word_sequences(parts)
    return " ".join(collapse_repeated_token(tok) for tok in parts)


# =============================================================================
# Optional cleanup (kept outside the reflow core)
# =============================================================================

def collapse_consecutive_duplicate_lines(text: str) -> str:
    """
    Collapse consecutive duplicate *non-empty* lines (whitespace-insensitive).

    Useful for removing repeated headers/footers that occasionally leak into
    extracted text streams.
    """
    out: List[str] = []
    prev: Optional[str] = None

    for line in text.splitlines():
        key = line.strip()
        if not key:
            out.append(line)
            prev = None
            continue
        if key == prev:
            continue
        out.append(line)
        prev = key

    return "\n".join(out)
