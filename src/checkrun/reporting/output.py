"""Segmented output lines that render with or without terminal colors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Any, List, Optional

import click

CONTINUATION = "\n       "


@dataclass(frozen=True)
class Segment:
    text: str
    fg: Optional[str] = None
    bold: bool = False
    nospace: bool = False


def format_value(value: Any) -> str:
    """Render an operand for a diagnostic message."""

    if isinstance(value, (str, bytes)):
        return repr(value)
    return str(value)


class OutputLine:
    """Sequence of text segments joined by single spaces.

    Comparators receive one of these as the writer for their failure
    message, so operands are rendered at write time and never stored.
    """

    def __init__(self) -> None:
        self._segments: List[Segment] = []

    def write(
        self,
        *parts: Any,
        fg: Optional[str] = None,
        bold: bool = False,
        nospace: bool = False,
    ) -> "OutputLine":
        for index, part in enumerate(parts):
            text = part if isinstance(part, str) else str(part)
            self._segments.append(
                Segment(text, fg=fg, bold=bold, nospace=nospace and index == 0)
            )
        return self

    def value(self, value: Any, *, nospace: bool = False) -> "OutputLine":
        return self.write(format_value(value), nospace=nospace)

    def break_line(self) -> "OutputLine":
        """Continue on a new line indented under the status column."""

        self._segments.append(Segment(CONTINUATION))
        return self

    def extend(self, other: "OutputLine") -> "OutputLine":
        self._segments.extend(other._segments)
        return self

    def render(self, *, color: bool = False) -> str:
        pieces: List[str] = []
        for index, segment in enumerate(self._segments):
            if index and not segment.nospace:
                pieces.append(" ")
            if color and (segment.fg or segment.bold):
                pieces.append(click.style(segment.text, fg=segment.fg, bold=segment.bold))
            else:
                pieces.append(segment.text)
        return "".join(pieces)

    def __str__(self) -> str:
        return self.render()

    def __bool__(self) -> bool:
        return bool(self._segments)


class Printer:
    """Writes ``OutputLine`` objects to a stream honoring a color mode.

    Without an explicit stream, output goes to stdout or, with ``err``, stderr.
    """

    def __init__(
        self,
        stream: Optional[IO[str]] = None,
        *,
        color: Optional[bool] = None,
        err: bool = False,
    ) -> None:
        self.stream = stream
        self.color = color
        self.err = err

    def echo(self, line: OutputLine) -> None:
        # color=None lets click strip the styles when the stream is not a terminal
        styled = self.color is not False
        click.echo(line.render(color=styled), file=self.stream, err=self.err, color=self.color)
