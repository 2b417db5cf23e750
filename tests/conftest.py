import io
import re
from pathlib import Path

import pytest

from checkrun import bootstrap

NO_COLOR = ["--color", "off"]

SUITES_SOURCE = Path(__file__).with_name("suites.py")


@pytest.fixture(scope="session", autouse=True)
def setup_checkrun() -> None:
    """Bootstrap plugins once for the entire test session."""

    bootstrap()


@pytest.fixture()
def out() -> io.StringIO:
    return io.StringIO()


def marker_line(marker: str, path: Path = SUITES_SOURCE) -> int:
    """Line number of the line carrying ``# <marker>`` in ``path``."""

    pattern = re.compile(rf"# {re.escape(marker)}\b")
    for number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if pattern.search(line):
            return number
    raise LookupError(f"marker {marker!r} not found in {path}")
