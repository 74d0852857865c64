"""Quote-aware scanning helpers shared by the statement parsers.

SQL literals use single quotes, with a doubled quote (`''`) standing for one
literal quote character. Nothing inside a quoted literal, a `--` line comment
or a `/* */` block comment counts as a comma or parenthesis for the purposes
of these helpers.
"""
from __future__ import annotations

import re
from typing import Iterator

QUOTE = "'"
UNICODE_PREFIX = "N"
LINE_COMMENT = "--"
BLOCK_COMMENT_START = "/*"
BLOCK_COMMENT_END = "*/"


def split_row_values(row_content: str) -> list[str]:
    """Split the text between a row's outer parentheses into literal tokens.

    Whitespace outside quotes is dropped, whitespace inside quotes is kept,
    `''` inside a literal becomes `'`, and an `N` immediately before an
    opening quote is dropped. Bare words such as NULL are returned verbatim.
    An unterminated literal runs to the end of the input. Input holding
    nothing but whitespace yields no tokens.

    Examples:
        >>> split_row_values("1, 'Proposal', 'Proposal', 10")
        ['1', 'Proposal', 'Proposal', '10']
        >>> split_row_values("2, N'Planning/Design', 'Plan, Design'")
        ['2', 'Planning/Design', 'Plan, Design']
    """
    if not row_content.strip():
        return []

    values: list[str] = []
    current: list[str] = []
    in_string = False
    i = 0
    length = len(row_content)

    while i < length:
        char = row_content[i]

        if in_string:
            if char == QUOTE:
                if i + 1 < length and row_content[i + 1] == QUOTE:
                    current.append(QUOTE)
                    i += 2
                    continue
                in_string = False
            else:
                current.append(char)
        elif char == QUOTE:
            in_string = True
        elif char == UNICODE_PREFIX and i + 1 < length and row_content[i + 1] == QUOTE:
            i += 1
            in_string = True
        elif char == ",":
            values.append("".join(current))
            current = []
        elif not char.isspace():
            current.append(char)

        i += 1

    values.append("".join(current))
    return values


def comment_end(text: str, i: int) -> int:
    """End offset of a comment starting at `i`, or -1 when none starts there.

    A `--` comment stops before its newline; an unterminated `/* ... */`
    comment runs to the end of the text.
    """
    if text.startswith(LINE_COMMENT, i):
        newline = text.find("\n", i)
        return len(text) if newline < 0 else newline
    if text.startswith(BLOCK_COMMENT_START, i):
        close = text.find(BLOCK_COMMENT_END, i + len(BLOCK_COMMENT_START))
        return len(text) if close < 0 else close + len(BLOCK_COMMENT_END)
    return -1


def mask_comments(text: str) -> str:
    """Blank out comments outside quoted literals.

    Every comment character except line breaks becomes a space, so offsets
    and line structure are unchanged.
    """
    chars = list(text)
    in_string = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if in_string:
            if char == QUOTE:
                if i + 1 < length and text[i + 1] == QUOTE:
                    i += 2
                    continue
                in_string = False
        elif char == QUOTE:
            in_string = True
        else:
            end = comment_end(text, i)
            if end >= 0:
                for j in range(i, end):
                    if chars[j] not in "\r\n":
                        chars[j] = " "
                i = end
                continue
        i += 1

    return "".join(chars)


def find_closing_paren(text: str, start: int) -> int:
    """Find the `)` that closes a `(` located just before `start`.

    Scanning begins at `start` with depth 1. Parentheses inside quoted
    literals or comments are ignored.

    Returns:
        Index of the closing parenthesis, or -1 if the parentheses never balance
    """
    depth = 1
    in_string = False
    i = start
    length = len(text)

    while i < length:
        char = text[i]
        if in_string:
            if char == QUOTE:
                if i + 1 < length and text[i + 1] == QUOTE:
                    i += 2
                    continue
                in_string = False
        elif char == QUOTE:
            in_string = True
        else:
            end = comment_end(text, i)
            if end >= 0:
                i = end
                continue
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return i
        i += 1

    return -1


def iter_paren_groups(text: str) -> Iterator[str]:
    """Yield the contents of each top-level parenthesized group in `text`.

    A group starts when depth goes 0 -> 1 and ends when it returns to 0.
    Stray closing parentheses at depth 0 are ignored; a group still open at
    the end of the text is dropped. Parentheses in literals and comments
    do not count.
    """
    depth = 0
    in_string = False
    group_start = -1
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if in_string:
            if char == QUOTE:
                if i + 1 < length and text[i + 1] == QUOTE:
                    i += 2
                    continue
                in_string = False
        elif char == QUOTE:
            in_string = True
        else:
            end = comment_end(text, i)
            if end >= 0:
                i = end
                continue
            if char == "(":
                if depth == 0:
                    group_start = i + 1
                depth += 1
            elif char == ")" and depth > 0:
                depth -= 1
                if depth == 0:
                    yield text[group_start:i]
        i += 1


def quoted_spans(text: str) -> list[tuple[int, int]]:
    """Return (start, end) offsets of every quoted literal, quotes included.

    A quote inside a comment neither opens nor closes a literal.
    """
    spans: list[tuple[int, int]] = []
    start = -1
    i = 0
    length = len(text)

    while i < length:
        if start < 0:
            end = comment_end(text, i)
            if end >= 0:
                i = end
                continue
            if text[i] == QUOTE:
                start = i
        elif text[i] == QUOTE:
            if i + 1 < length and text[i + 1] == QUOTE:
                i += 2
                continue
            spans.append((start, i + 1))
            start = -1
        i += 1

    if start >= 0:
        spans.append((start, length))
    return spans


def search_outside_quotes(pattern: re.Pattern[str], text: str, pos: int = 0) -> re.Match[str] | None:
    """First match of `pattern` at or after `pos` outside literals and comments.

    The match is taken against `text` with its comments blanked, so group
    values never include comment text.
    """
    spans = quoted_spans(text)
    for match in pattern.finditer(mask_comments(text), pos):
        if not any(start <= match.start() < end for start, end in spans):
            return match
    return None
