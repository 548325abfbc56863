"""CJK paragraph reflow for text extracted from PDF / OCR sources."""

from .dialog_state import DialogState
from .noise_collapse import collapse_consecutive_duplicate_lines, collapse_repeated_segments
from .reflow_helper import (
    ReflowCancelled,
    ReflowOptions,
    join_segments,
    reflow_cjk_paragraphs_bytes,
    reflow_cjk_paragraphs_core,
    reflow_segments,
)

__all__ = [
    "DialogState",
    "ReflowCancelled",
    "ReflowOptions",
    "collapse_consecutive_duplicate_lines",
    "collapse_repeated_segments",
    "join_segments",
    "reflow_cjk_paragraphs_bytes",
    "reflow_cjk_paragraphs_core",
    "reflow_segments",
]

__version__ = "0.1.0"
