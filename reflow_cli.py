from __future__ import annotations

"""
reflow_cli.py

Command-line host for the CJK reflow engine.

    cjk-reflow novel.txt                      # reflow to stdout
    cjk-reflow book.pdf -o book.txt --compact
    cjk-reflow a.pdf b.txt --out-dir out/     # batch
    cat raw.txt | cjk-reflow -                # stdin

PDF inputs are extracted with pdf_helper first; everything else is read as
UTF-8 (invalid bytes become U+FFFD). Ctrl-C during a batch stops after the
current file: a PDF interrupted mid-extraction is still written with the
pages read so far and reported as ``partial``.
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple

from cjk_reflow import ReflowCancelled, ReflowOptions, collapse_consecutive_duplicate_lines
from pdf_helper import build_progress_bar, extract_pdf_text_core, sanitize_invisible

logger = logging.getLogger("cjk_reflow.cli")

STDIN_NAME = "-"
OUTPUT_SUFFIX = "_reflow.txt"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130

OK = "ok"
PARTIAL = "partial"
FAILED = "failed"


class FileOutcome(NamedTuple):
    source: str
    status: str  # ok / partial / failed
    output: Optional[str] = None
    message: str = ""


class CancelFlag:
    """Set from the SIGINT handler, polled by extraction and reflow."""
    __slots__ = ("requested",)

    def __init__(self) -> None:
        self.requested = False

    def request(self, *_args) -> None:
        self.requested = True

    def __call__(self) -> bool:
        return self.requested


# =============================================================================
# Argument parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cjk-reflow",
        description="Rebuild CJK paragraphs from hard-wrapped PDF / OCR text.",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="INPUT",
        help="Text or PDF files to reflow ('-' reads stdin).",
    )
    parser.add_argument("-o", "--output", help="Output file (single input only).")
    parser.add_argument("--out-dir", help=f"Write each result as <name>{OUTPUT_SUFFIX} here.")
    parser.add_argument(
        "--page-header",
        action="store_true",
        help="Insert '=== [Page i/N] ===' markers into PDF text and treat blank lines as hard breaks.",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Separate paragraphs with one newline instead of a blank line.",
    )
    parser.add_argument(
        "--no-reflow",
        action="store_true",
        help="Only extract / sanitize, do not reflow.",
    )
    parser.add_argument(
        "--dedupe-lines",
        action="store_true",
        help="Drop consecutive duplicate lines (leaked headers / footers) first.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def _validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.output and args.out_dir:
        parser.error("--output and --out-dir are mutually exclusive")
    if len(args.inputs) > 1 and not args.out_dir:
        parser.error("several inputs need --out-dir")
    if args.inputs.count(STDIN_NAME) > 1:
        parser.error("stdin ('-') can only be read once")


def options_from_args(args: argparse.Namespace) -> ReflowOptions:
    return ReflowOptions(
        add_pdf_page_header=args.page_header,
        compact=args.compact,
        dedupe_lines=args.dedupe_lines,
    )


# =============================================================================
# Input / output
# =============================================================================

def _is_pdf(source: str) -> bool:
    return source != STDIN_NAME and Path(source).suffix.lower() == ".pdf"


def _log_pdf_progress(current: int, total: int) -> None:
    percent = int(current / total * 100)
    logger.info("Loading PDF %s  %d%%", build_progress_bar(current, total, width=20), percent)


def read_source(source: str, options: ReflowOptions, cancel: CancelFlag) -> Tuple[str, bool]:
    """Return ``(text, cancelled)`` for a PDF, text file or stdin."""
    if source == STDIN_NAME:
        return sys.stdin.buffer.read().decode("utf-8", errors="replace"), False

    if _is_pdf(source):
        result = extract_pdf_text_core(
            source,
            add_pdf_page_header=options.add_pdf_page_header,
            on_progress=_log_pdf_progress,
            is_cancelled=cancel,
        )
        return result.text, result.cancelled

    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return path.read_bytes().decode("utf-8", errors="replace"), False


def output_path_for(source: str, out_dir: Path) -> Path:
    stem = "stdin" if source == STDIN_NAME else Path(source).stem
    return out_dir / f"{stem}{OUTPUT_SUFFIX}"


def write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        sys.stdout.write(text)
        if text and not text.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")


# =============================================================================
# Per-file processing
# =============================================================================

def process_one(
        source: str,
        output: Optional[Path],
        options: ReflowOptions,
        *,
        reflow: bool = True,
        cancel: Optional[CancelFlag] = None,
) -> FileOutcome:
    if cancel is None:
        cancel = CancelFlag()

    try:
        text, cancelled = read_source(source, options, cancel)
    except (OSError, RuntimeError) as e:
        return FileOutcome(source, FAILED, message=str(e))

    if not text.strip():
        return FileOutcome(source, FAILED, message="Empty or non-text input")

    text = sanitize_invisible(text)

    try:
        if reflow:
            text = options.reflow(text, is_cancelled=None if cancelled else cancel)
        elif options.dedupe_lines:
            text = collapse_consecutive_duplicate_lines(text)
    except ReflowCancelled as e:
        return FileOutcome(source, FAILED, message=str(e))

    try:
        write_output(text, output)
    except OSError as e:
        return FileOutcome(source, FAILED, message=f"Write error: {e}")

    target = str(output) if output is not None else "<stdout>"
    if cancelled:
        return FileOutcome(source, PARTIAL, target, "Extraction cancelled, partial text written")
    return FileOutcome(source, OK, target)


def _log_outcome(index: int, total: int, outcome: FileOutcome) -> None:
    if outcome.status == OK:
        logger.info("%d/%d: %s -> %s -> Done.", index, total, outcome.source, outcome.output)
    elif outcome.status == PARTIAL:
        logger.warning(
            "%d/%d: %s -> %s -> %s.", index, total, outcome.source, outcome.output, outcome.message
        )
    else:
        logger.error("%d/%d: %s -> Skip: %s.", index, total, outcome.source, outcome.message)


def run(args: argparse.Namespace, cancel: CancelFlag) -> List[FileOutcome]:
    options = options_from_args(args)
    out_dir = Path(args.out_dir) if args.out_dir else None
    total = len(args.inputs)
    outcomes: List[FileOutcome] = []

    for index, source in enumerate(args.inputs, 1):
        if cancel():
            logger.warning("Interrupted: %d file(s) not processed", total - index + 1)
            break

        if out_dir is not None:
            output: Optional[Path] = output_path_for(source, out_dir)
        else:
            output = Path(args.output) if args.output else None

        logger.debug("Processing %s (%d/%d)", source, index, total)
        outcome = process_one(source, output, options, reflow=not args.no_reflow, cancel=cancel)
        _log_outcome(index, total, outcome)
        outcomes.append(outcome)

    return outcomes


def exit_code_for(outcomes: Sequence[FileOutcome], interrupted: bool) -> int:
    if interrupted:
        return EXIT_INTERRUPTED
    if any(o.status == FAILED for o in outcomes):
        return EXIT_FAILED
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _validate_args(parser, args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cancel = CancelFlag()
    previous_handler = signal.signal(signal.SIGINT, cancel.request)
    try:
        outcomes = run(args, cancel)
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    done = sum(o.status == OK for o in outcomes)
    logger.info("Process completed: %d/%d ok", done, len(args.inputs))
    return exit_code_for(outcomes, cancel())


if __name__ == "__main__":
    sys.exit(main())
