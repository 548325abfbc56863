from __future__ import annotations

import io
import sys
from pathlib import Path

import pymupdf
import pytest

import reflow_cli
from cjk_reflow import ReflowOptions
from pdf_helper import ExtractResult
from reflow_cli import (
    EXIT_FAILED,
    EXIT_INTERRUPTED,
    EXIT_OK,
    FAILED,
    OK,
    PARTIAL,
    FileOutcome,
    exit_code_for,
    main,
    output_path_for,
    process_one,
)

RAW = "他走进房间，看见桌上\n放着一封信。\n"
REFLOWED = "他走进房间，看见桌上放着一封信。"


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_reflow_file_to_stdout(tmp_path: Path, capsys) -> None:
    src = _write(tmp_path / "in.txt", RAW)
    assert main([str(src), "--compact"]) == EXIT_OK
    assert capsys.readouterr().out == REFLOWED + "\n"


def test_reflow_file_to_output(tmp_path: Path) -> None:
    src = _write(tmp_path / "in.txt", RAW)
    out = tmp_path / "nested" / "out.txt"
    assert main([str(src), "-o", str(out)]) == EXIT_OK
    assert out.read_text(encoding="utf-8") == REFLOWED


def test_no_reflow_keeps_lines(tmp_path: Path) -> None:
    src = _write(tmp_path / "in.txt", RAW)
    out = tmp_path / "out.txt"
    assert main([str(src), "-o", str(out), "--no-reflow"]) == EXIT_OK
    assert out.read_text(encoding="utf-8") == RAW


def test_reflow_stdin(monkeypatch, capsys) -> None:
    stdin = io.TextIOWrapper(io.BytesIO(RAW.encode("utf-8")), encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", stdin)
    assert main(["-", "--compact"]) == EXIT_OK
    assert capsys.readouterr().out == REFLOWED + "\n"


def test_batch_reports_failures(tmp_path: Path) -> None:
    good = _write(tmp_path / "good.txt", RAW)
    empty = _write(tmp_path / "empty.txt", "  \n")
    missing = tmp_path / "missing.txt"
    out_dir = tmp_path / "out"

    code = main([str(good), str(empty), str(missing), "--out-dir", str(out_dir), "--compact"])

    assert code == EXIT_FAILED
    assert (out_dir / "good_reflow.txt").read_text(encoding="utf-8") == REFLOWED
    assert not (out_dir / "empty_reflow.txt").exists()
    assert not (out_dir / "missing_reflow.txt").exists()


def test_batch_pdf_input(tmp_path: Path) -> None:
    pdf_path = tmp_path / "book.pdf"
    doc = pymupdf.open()
    doc.new_page().insert_text((72, 72), "Hello page one")
    doc.save(str(pdf_path))
    doc.close()

    out_dir = tmp_path / "out"
    code = main([str(pdf_path), "--out-dir", str(out_dir), "--page-header", "--no-reflow"])

    assert code == EXIT_OK
    text = (out_dir / "book_reflow.txt").read_text(encoding="utf-8")
    assert "=== [Page 1/1] ===" in text
    assert "Hello page one" in text


@pytest.mark.parametrize(
    "argv",
    [
        ["a.txt", "b.txt"],
        ["a.txt", "-o", "x.txt", "--out-dir", "out"],
        ["-", "-", "--out-dir", "out"],
    ],
)
def test_invalid_argument_combinations(argv) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    assert exc_info.value.code == 2


def test_cancelled_pdf_extraction_is_partial(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(
        reflow_cli,
        "extract_pdf_text_core",
        lambda *args, **kwargs: ExtractResult("部分文字。", cancelled=True),
    )
    out = tmp_path / "out.txt"
    outcome = process_one(str(tmp_path / "book.pdf"), out, ReflowOptions(compact=True))

    assert outcome.status == PARTIAL
    assert out.read_text(encoding="utf-8") == "部分文字。"


def test_pdf_error_is_failed_outcome(tmp_path: Path) -> None:
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf at all")
    outcome = process_one(str(broken), tmp_path / "out.txt", ReflowOptions())
    assert outcome.status == FAILED
    assert "Failed to load PDF" in outcome.message


def test_output_path_for() -> None:
    assert output_path_for("dir/book.pdf", Path("out")) == Path("out") / "book_reflow.txt"
    assert output_path_for("-", Path("out")) == Path("out") / "stdin_reflow.txt"


def test_exit_code_for() -> None:
    ok = FileOutcome("a", OK)
    partial = FileOutcome("b", PARTIAL)
    failed = FileOutcome("c", FAILED)

    assert exit_code_for([ok, partial], interrupted=False) == EXIT_OK
    assert exit_code_for([ok, failed], interrupted=False) == EXIT_FAILED
    assert exit_code_for([ok], interrupted=True) == EXIT_INTERRUPTED
