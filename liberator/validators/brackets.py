"""String- and comment-aware bracket balance check."""

from __future__ import annotations

from typing import List, Tuple

from .base import ERROR, ValidationIssue

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")": "(", "]": "[", "}": "{"}
_QUOTES = frozenset("'\"`")

_CODE = 0
_STRING = 1
_LINE_COMMENT = 2
_BLOCK_COMMENT = 3


def validate_bracket_balance(content: str, path: str) -> List[ValidationIssue]:
    """Scan ``content`` left to right and report mismatched or unclosed brackets.

    Brackets only count outside string literals and comments. A backslash
    escapes the following character inside a string, so an escaped quote never
    ends it. Regex literals are not recognised.
    """
    issues: List[ValidationIssue] = []
    stack: List[Tuple[str, int, int]] = []
    mode = _CODE
    quote = ""
    line = 1
    column = 0
    index = 0
    length = len(content)

    while index < length:
        char = content[index]
        if char == "\n":
            line += 1
            column = 0
        else:
            column += 1
        following = content[index + 1] if index + 1 < length else ""

        if mode == _STRING:
            if char == "\\" and following:
                # escaped character never closes the string
                index += 1
                if following == "\n":
                    line += 1
                    column = 0
                else:
                    column += 1
            elif char == quote:
                mode = _CODE
        elif mode == _LINE_COMMENT:
            if char == "\n":
                mode = _CODE
        elif mode == _BLOCK_COMMENT:
            if char == "*" and following == "/":
                index += 1
                column += 1
                mode = _CODE
        elif char in _QUOTES:
            mode = _STRING
            quote = char
        elif char == "/" and following == "/":
            mode = _LINE_COMMENT
            index += 1
            column += 1
        elif char == "/" and following == "*":
            mode = _BLOCK_COMMENT
            index += 1
            column += 1
        elif char in _OPENERS:
            stack.append((char, line, column))
        elif char in _CLOSERS:
            last = stack.pop() if stack else None
            if last is None or last[0] != _CLOSERS[char]:
                message = (
                    f"Mismatched bracket: expected '{_OPENERS[last[0]]}' but found '{char}'"
                    if last is not None
                    else f"Unexpected closing bracket '{char}'"
                )
                issues.append(ValidationIssue(path, line, column, message, ERROR, "BRACKET_MISMATCH"))
        index += 1

    for char, open_line, open_column in stack:
        issues.append(
            ValidationIssue(path, open_line, open_column, f"Unclosed bracket '{char}'", ERROR, "UNCLOSED_BRACKET")
        )
    return issues


__all__ = ["validate_bracket_balance"]
