"""Comparison of file contents."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from checkrun.core.comparator import Comparator
from checkrun.reporting.output import OutputLine

PathLike = Union[str, Path]


class File(Comparator):
    """Compares the text contents of two files.

    Both paths are taken relative to ``path_prefix``::

        self.compare_with("actual.txt", "expected.txt", File("tests/data"))
    """

    def __init__(self, path_prefix: PathLike = "", encoding: str = "utf-8") -> None:
        self.path_prefix = Path(path_prefix)
        self.encoding = encoding
        self._actual_path: Optional[Path] = None
        self._expected_path: Optional[Path] = None
        self._actual: Optional[str] = None
        self._expected: Optional[str] = None
        self._unreadable: Optional[Path] = None

    def __call__(self, actual: PathLike, expected: PathLike) -> bool:
        self._unreadable = None
        self._actual_path = self.path_prefix / actual
        self._expected_path = self.path_prefix / expected
        self._actual = self._read(self._actual_path)
        self._expected = self._read(self._expected_path)
        if self._actual is None or self._expected is None:
            return False
        return self._actual == self._expected

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding=self.encoding)
        except OSError:
            if self._unreadable is None:
                self._unreadable = path
            return None

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        if self._unreadable is not None:
            label = actual_label if self._unreadable == self._actual_path else expected_label
            out.write("File", label, f"({self._unreadable})", "cannot be read.")
            return
        actual = self._actual or ""
        expected = self._expected or ""
        if len(actual) != len(expected):
            out.write("Files", actual_label, "and", expected_label, "have different size, actual")
            out.write(len(actual), "but", len(expected), "expected.")
        else:
            out.write("Files", actual_label, "and", expected_label, "have different contents.")
        for index, (got, want) in enumerate(zip(actual, expected)):
            if got != want:
                out.write("Actual").value(got).write("but").value(want)
                out.write("expected on position", f"{index}.")
                return
        shorter = min(len(actual), len(expected))
        if len(actual) > shorter:
            out.write("Actual has").value(actual[shorter]).write("on position", f"{shorter}.")
        elif len(expected) > shorter:
            out.write("Expected has").value(expected[shorter]).write("on position", f"{shorter}.")
