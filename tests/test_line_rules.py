from __future__ import annotations

import pytest

from cjk_reflow.line_rules import (
    ends_with_cjk_bracket_boundary,
    ends_with_sentence_boundary,
    is_chapter_ending,
    is_heading_like,
    is_metadata_line,
    is_page_marker,
    is_title_heading,
    is_visual_divider_line,
)


@pytest.mark.parametrize(
    "s, expected",
    [
        ("=== [Page 1/20] ===", True),
        ("=== ===", True),
        ("===", False),
        ("== [Page 1/2] ==", False),
    ],
)
def test_is_page_marker(s: str, expected: bool) -> None:
    assert is_page_marker(s) is expected


@pytest.mark.parametrize(
    "s, expected",
    [
        ("──────", True),
        ("- - - -", True),
        ("＊＊＊", True),
        ("★ ☆ ★", True),
        ("···", False),
        ("• • •", False),
        ("--", False),
        ("---a", False),
        ("", False),
    ],
)
def test_is_visual_divider_line(s: str, expected: bool) -> None:
    assert is_visual_divider_line(s) is expected


@pytest.mark.parametrize(
    "s",
    ["第十章 终章", "前言", "序章", "番外 篇一", "卷一 风起", "第3回", "楔子"],
)
def test_title_headings(s: str) -> None:
    assert is_title_heading(s)


@pytest.mark.parametrize(
    "s",
    ["今天天气很好，", "第一部分", "这是第一次见面", "第一章，开始", "普通的一句话"],
)
def test_not_title_headings(s: str) -> None:
    assert not is_title_heading(s)


@pytest.mark.parametrize(
    "s",
    ["書名：假面遊戲", "作者 : 東野圭吾", "出版時間　2024-03-12", "ISBN：978-7-0000-0000-0"],
)
def test_metadata_lines(s: str) -> None:
    assert is_metadata_line(s)


@pytest.mark.parametrize(
    "s",
    ["作者：「你好」", "他说：你好", "作者：", "：作者", "作者：" + "很" * 40],
)
def test_not_metadata_lines(s: str) -> None:
    assert not is_metadata_line(s)


@pytest.mark.parametrize(
    "s, expected",
    [
        ("第三章", True),
        ("第三章】", True),
        ("你好", False),
        ("这是一个很长很长很长很长很长的句子章", False),
        ("", False),
    ],
)
def test_is_chapter_ending(s: str, expected: bool) -> None:
    assert is_chapter_ending(s) is expected


@pytest.mark.parametrize(
    "s",
    ["目录", "物品准备：", "（上）", "Chapter 12", "03", "附录(一)"],
)
def test_heading_like(s: str) -> None:
    assert is_heading_like(s)


@pytest.mark.parametrize(
    "s",
    [
        "今天天气很好。",
        "这是一个超过八个字的句子",
        "他说，好",
        "=== [Page 1/2] ===",
        "（未完",
        "hello.",
        "   ",
    ],
)
def test_not_heading_like(s: str) -> None:
    assert not is_heading_like(s)


@pytest.mark.parametrize(
    "s, level, expected",
    [
        ("他走了。", 2, True),
        ("他说：“好。”", 2, True),
        ("他说：", 2, True),
        ("他说:", 2, False),
        ("他说:", 1, True),
        ("他沉默了……", 2, True),
        ("（亦作肥）", 2, False),
        ("他走了", 2, False),
        ("他走了.", 2, False),
        ("他走了.", 3, True),
        ("他走了.”", 2, True),
        ("他说：", 3, False),
        ("", 2, False),
    ],
)
def test_ends_with_sentence_boundary(s: str, level: int, expected: bool) -> None:
    assert ends_with_sentence_boundary(s, level) is expected


@pytest.mark.parametrize(
    "s, expected",
    [
        ("（完）", True),
        ("【番外】", True),
        ("《後記》", True),
        ("(test)", False),
        ("（完", False),
        ("（）", False),
        ("他说（完）", False),
    ],
)
def test_ends_with_cjk_bracket_boundary(s: str, expected: bool) -> None:
    assert ends_with_cjk_bracket_boundary(s) is expected
