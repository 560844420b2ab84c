"""Bracket scanning for TypeScript sources that skips strings and comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

_CLOSERS = {"}": "{", "]": "[", ")": "("}


@dataclass
class Bracket:
    """A bracketed range of source text."""

    kind: str
    start: int
    parent: Optional[int] = None
    end: int = -1


@dataclass
class BracketScan:
    brackets: List[Bracket]
    balanced: bool


def skip_string(text: str, index: int) -> int:
    """Return the index just past the string literal that starts at ``index``."""
    quote = text[index]
    position = index + 1
    while position < len(text):
        char = text[position]
        if char == "\\":
            position += 2
            continue
        if char == quote:
            return position + 1
        if char == "\n" and quote != "`":
            return position + 1
        position += 1
    return len(text)


def scan_brackets(text: str, start: int = 0, *, stop_at_close: bool = False) -> BracketScan:
    """Record every ``{``/``[``/``(`` range in ``text`` from ``start``.

    With ``stop_at_close`` the scan ends as soon as the first bracket opened
    at ``start`` is closed.
    """
    brackets: List[Bracket] = []
    stack: List[int] = []
    balanced = True
    position = start
    length = len(text)
    while position < length:
        char = text[position]
        if char in "'\"`":
            position = skip_string(text, position)
            continue
        if text.startswith("//", position):
            newline = text.find("\n", position)
            position = length if newline < 0 else newline
            continue
        if text.startswith("/*", position):
            close = text.find("*/", position + 2)
            position = length if close < 0 else close + 2
            continue
        if char in "{[(":
            parent = stack[-1] if stack else None
            brackets.append(Bracket(kind=char, start=position, parent=parent))
            stack.append(len(brackets) - 1)
        elif char in _CLOSERS:
            if not stack or brackets[stack[-1]].kind != _CLOSERS[char]:
                balanced = False
            else:
                brackets[stack.pop()].end = position
                if stop_at_close and not stack:
                    return BracketScan(brackets=brackets, balanced=balanced)
        position += 1
    if stack:
        balanced = False
        for index in stack:
            brackets[index].end = length
    return BracketScan(brackets=brackets, balanced=balanced)


def own_text(text: str, brackets: List[Bracket], index: int) -> str:
    """Text inside bracket ``index`` with its directly nested ``{}``/``[]`` blanked out."""
    outer = brackets[index]
    chars = list(text[outer.start + 1 : outer.end])
    for bracket in brackets:
        if bracket.parent != index or bracket.kind == "(":
            continue
        for offset in range(bracket.start - outer.start - 1, bracket.end - outer.start):
            if 0 <= offset < len(chars):
                chars[offset] = " "
    return "".join(chars)


__all__ = ["Bracket", "BracketScan", "own_text", "scan_brackets", "skip_string"]
