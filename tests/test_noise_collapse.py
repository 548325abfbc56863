from __future__ import annotations

import pytest

from cjk_reflow.noise_collapse import (
    collapse_consecutive_duplicate_lines,
    collapse_repeated_segments,
    collapse_repeated_token,
    collapse_repeated_word_sequences,
)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("ABCDABCDABCD", "ABCD"),
        ("同一句话同一句话同一句话同一句话", "同一句话"),
        # too short a unit / too few repeats
        ("哈哈哈哈哈哈", "哈哈哈哈哈哈"),
        ("ABCDABCD", "ABCDABCD"),
        ("abc", "abc"),
        ("", ""),
    ],
)
def test_collapse_repeated_token(token: str, expected: str) -> None:
    assert collapse_repeated_token(token) == expected


def test_collapse_repeated_token_ignores_huge_tokens() -> None:
    token = "ABCD" * 60
    assert collapse_repeated_token(token) == token


def test_word_sequences_keep_prefix_and_suffix() -> None:
    parts = ["序", "标题", "标题", "标题", "完"]
    assert collapse_repeated_word_sequences(parts) == ["序", "标题", "完"]


def test_word_sequences_multi_token_phrase() -> None:
    parts = ["Chapter", "One"] * 3
    assert collapse_repeated_word_sequences(parts) == ["Chapter", "One"]


def test_word_sequences_need_three_repeats() -> None:
    parts = ["标题", "标题"]
    assert collapse_repeated_word_sequences(parts) == parts


@pytest.mark.parametrize(
    "line, expected",
    [
        ("同一句话 同一句话 同一句话 同一句话", "同一句话"),
        ("背负着一切的麒麟 背负着一切的麒麟 背负着一切的麒麟", "背负着一切的麒麟"),
        ("Chapter One Chapter One Chapter One", "Chapter One"),
        ("a  b\tc", "a b c"),
        ("", ""),
        ("   ", "   "),
    ],
)
def test_collapse_repeated_segments(line: str, expected: str) -> None:
    assert collapse_repeated_segments(line) == expected


def test_fullwidth_space_is_not_a_token_separator() -> None:
    line = "　　正文第一行"
    assert collapse_repeated_segments(line) == line


def test_collapse_consecutive_duplicate_lines() -> None:
    text = "页眉\n页眉\n 页眉 \n正文\n\n正文"
    assert collapse_consecutive_duplicate_lines(text) == "页眉\n正文\n\n正文"
