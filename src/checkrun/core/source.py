"""Recover the source text of check call arguments for diagnostics."""
from __future__ import annotations

import ast
import functools
import inspect
import itertools
import logging
import textwrap
from dataclasses import dataclass
from types import CodeType, FrameType
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True)
class CallSite:
    """Where a check primitive was invoked from."""

    filename: str
    line: int
    arguments: Tuple[str, ...] = ()

    def argument(self, index: int) -> Optional[str]:
        if index < len(self.arguments):
            return self.arguments[index]
        return None


@dataclass(frozen=True)
class _Call:
    """A method call found in the source, with absolute file positions."""

    start: Position
    end: Position
    arguments: Tuple[str, ...]

    def covers(self, line: int) -> bool:
        return self.start[0] <= line <= self.end[0]

    def contains(self, start: Position, end: Position) -> bool:
        return self.start <= start and end <= self.end


def _removed_indent(original: str, dedented: str) -> int:
    for before, after in zip(original.splitlines(), dedented.splitlines()):
        if after.strip():
            return len(before) - len(after)
    return 0


@functools.lru_cache(maxsize=256)
def _parse_calls(code: CodeType) -> Dict[str, List[_Call]]:
    """Index the method calls of ``code`` by method name."""

    try:
        lines, start = inspect.getsourcelines(code)
    except (OSError, TypeError):
        return {}
    original = "".join(lines)
    source = textwrap.dedent(original)
    try:
        tree = ast.parse(source)
    except SyntaxError:
        logger.debug("could not parse source of %s", code.co_name)
        return {}
    line_offset = max(start, 1) - 1
    column_offset = _removed_indent(original, source)
    calls: Dict[str, List[_Call]] = {}
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        arguments = tuple(ast.get_source_segment(source, arg) or "" for arg in node.args)
        end_line = getattr(node, "end_lineno", None) or node.lineno
        end_col = getattr(node, "end_col_offset", None) or node.col_offset
        calls.setdefault(node.func.attr, []).append(
            _Call(
                start=(node.lineno + line_offset, node.col_offset + column_offset),
                end=(end_line + line_offset, end_col + column_offset),
                arguments=arguments,
            )
        )
    return calls


def _instruction_span(frame: FrameType) -> Optional[Tuple[Position, Position]]:
    """Source span of the instruction ``frame`` is executing, where the interpreter records one."""

    positions = getattr(frame.f_code, "co_positions", None)
    if positions is None or frame.f_lasti < 0:
        return None
    # one entry per two-byte code unit
    entry = next(itertools.islice(positions(), frame.f_lasti // 2, None), None)
    if entry is None or None in entry:
        return None
    line, end_line, col, end_col = entry
    return (line, col), (end_line, end_col)


def call_site(frame: FrameType, method: str) -> CallSite:
    """Describe the call to ``method`` currently executing in ``frame``.

    When several calls to ``method`` share the line and the interpreter
    cannot tell which one runs, no argument text is returned so callers
    fall back to labelling by value.
    """

    line = frame.f_lineno
    filename = frame.f_code.co_filename
    candidates = [call for call in _parse_calls(frame.f_code).get(method, ()) if call.covers(line)]
    span = _instruction_span(frame)
    if span is not None:
        enclosing = [call for call in candidates if call.contains(*span)]
        if enclosing:
            innermost = max(enclosing, key=lambda call: call.start)
            return CallSite(filename, innermost.start[0], innermost.arguments)
    if len(candidates) == 1:
        return CallSite(filename, candidates[0].start[0], candidates[0].arguments)
    if candidates:
        return CallSite(filename, min(call.start[0] for call in candidates))
    return CallSite(filename, line)
