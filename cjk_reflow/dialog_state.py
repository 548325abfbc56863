from __future__ import annotations

from .punct_sets import DIALOG_CLOSE_TO_OPEN, DIALOG_OPEN_TO_CLOSE


class DialogState:
    """
    Track unclosed dialog quotes across concatenated lines.

    One counter per quote style, keyed by its opener. A closer only
    decrements a positive counter, so stray closers never go negative.
    """
    __slots__ = ("counts",)

    def __init__(self) -> None:
        self.counts = dict.fromkeys(DIALOG_OPEN_TO_CLOSE, 0)

    def reset(self) -> None:
        for k in self.counts:
            self.counts[k] = 0

    def update(self, s: str) -> None:
        counts = self.counts
        for ch in s:
            if ch in counts:
                counts[ch] += 1
            else:
                open_ch = DIALOG_CLOSE_TO_OPEN.get(ch)
                if open_ch is not None and counts[open_ch] > 0:
                    counts[open_ch] -= 1

    def copy(self) -> "DialogState":
        other = DialogState()
        other.counts.update(self.counts)
        return other

    @property
    def is_unclosed(self) -> bool:
        return any(v > 0 for v in self.counts.values())

    def __repr__(self) -> str:
        open_ = {k: v for k, v in self.counts.items() if v}
        return f"DialogState({open_})"
