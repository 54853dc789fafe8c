"""Pattern-based code smell scan."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..scanning.languages import LanguageConfig, get_language_config
from .base import SignalResult

_MARKER_RE = re.compile(r"\b(TODO|FIXME|HACK|XXX)\b")

# One smell per this many lines of code maps to a score of 100.
_FULL_SCORE_DENSITY = 1 / 50
_IMPLICIT_PARAMS = frozenset({"self", "cls", "&self", "&mut self", "mut self", "this"})


@dataclass(frozen=True)
class SmellCounts:
    markers: int = 0
    god_functions: int = 0
    empty_handlers: int = 0
    long_param_lists: int = 0

    @property
    def total(self) -> int:
        return self.markers + self.god_functions + self.empty_handlers + self.long_param_lists

    def categories(self) -> list[tuple[int, str]]:
        return [
            (self.markers, "TODO/FIXME markers"),
            (self.god_functions, "god functions"),
            (self.empty_handlers, "empty exception handlers"),
            (self.long_param_lists, "long parameter lists"),
        ]


def count_markers(text: str, config: LanguageConfig) -> int:
    """Lines whose comment part carries a TODO-style marker."""
    count = 0
    in_block = False
    for line in text.splitlines():
        comment = _comment_part(line, config, in_block)
        in_block = _block_state(line, config, in_block)
        if comment and _MARKER_RE.search(comment):
            count += 1
    return count


def _comment_part(line: str, config: LanguageConfig, in_block: bool) -> Optional[str]:
    if in_block:
        return line
    positions = [line.find(m) for m in config.line_comments if m in line]
    positions += [line.find(open_) for open_, _ in config.block_comments if open_ in line]
    if not positions:
        return None
    return line[min(positions):]


def _block_state(line: str, config: LanguageConfig, in_block: bool) -> bool:
    for open_, close in config.block_comments:
        if in_block:
            if close in line:
                in_block = False
        elif open_ in line and close not in line[line.find(open_) + len(open_):]:
            in_block = True
    return in_block


def _param_count(params: str) -> int:
    parts = [p.strip() for p in params.split(",")]
    return sum(1 for p in parts if p and p not in _IMPLICIT_PARAMS)


def _python_function_length(lines: list[str], start: int) -> int:
    header = lines[start]
    indent = len(header) - len(header.lstrip())
    end = start
    for index in range(start + 1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue
        if len(line) - len(line.lstrip()) <= indent:
            break
        end = index
    return end - start + 1


def _brace_function_length(text: str, offset: int) -> int:
    """Lines from ``offset`` to the brace closing the first block opened after it."""
    open_at = text.find("{", offset)
    if open_at < 0:
        return 1
    depth = 0
    for index in range(open_at, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text.count("\n", offset, index) + 1
    return text.count("\n", offset) + 1


def count_smells(
    text: str, language: str, god_function_lines: int = 60, long_param_count: int = 5
) -> SmellCounts:
    config = get_language_config(language)
    if config is None:
        return SmellCounts()

    god = 0
    long_params = 0
    if config.function_pattern:
        lines = text.splitlines()
        for match in re.finditer(config.function_pattern, text, re.MULTILINE):
            groups = [g for g in match.groups()]
            # Patterns with alternatives put (name, params) in later group pairs.
            params = next((groups[i + 1] for i in range(0, len(groups), 2) if groups[i]), "")
            if _param_count(params or "") > long_param_count:
                long_params += 1
            if language == "python":
                start_line = text.count("\n", 0, match.start())
                length = _python_function_length(lines, start_line)
            else:
                length = _brace_function_length(text, match.start())
            if length > god_function_lines:
                god += 1

    empty = 0
    if config.empty_handler_pattern:
        empty = len(re.findall(config.empty_handler_pattern, text))

    return SmellCounts(
        markers=count_markers(text, config),
        god_functions=god,
        empty_handlers=empty,
        long_param_lists=long_params,
    )


def score_smells(counts: SmellCounts, loc: int) -> SignalResult:
    """Smell density, 100 at one smell per 50 lines of code.

    The first detail always reads ``"<total> smells in <loc> LOC"`` and
    the following ones ``"<count> <category>"``.
    """
    details = [f"{counts.total} smells in {loc} LOC"]
    details.extend(f"{count} {category}" for count, category in counts.categories() if count)
    if loc <= 0:
        return SignalResult(0.0, tuple(details))
    raw = counts.total / loc / _FULL_SCORE_DENSITY * 100.0
    return SignalResult(min(100.0, raw), tuple(details))
