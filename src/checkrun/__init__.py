"""checkrun package initialization."""
from __future__ import annotations

import importlib
import logging
import os
from typing import Optional, Sequence, Type

from .version import __version__
from .core import ExpectedFailure, Tester, TesterConfiguration
from . import compare  # noqa: F401  registers the built-in comparators

__all__ = [
    "__version__",
    "bootstrap",
    "ExpectedFailure",
    "Tester",
    "TesterConfiguration",
    "test_main",
]

logger = logging.getLogger(__name__)

_BOOTSTRAPPED = False


def bootstrap() -> None:
    """Initialize checkrun (idempotent)."""

    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return
    _load_plugins()
    _BOOTSTRAPPED = True


def _load_plugins() -> None:
    plugin_env = os.environ.get("CHECKRUN_PLUGINS")
    if not plugin_env:
        return
    for item in plugin_env.split(","):
        module_name = item.strip()
        if not module_name:
            continue
        logger.debug("loading plugin module %s", module_name)
        module = importlib.import_module(module_name)
        register = getattr(module, "register", None)
        if callable(register):
            register()


def test_main(suite_class: Type[Tester], argv: Optional[Sequence[str]] = None) -> None:
    """Instantiate ``suite_class``, run it and exit with its status.

    Meant for the bottom of a suite module::

        if __name__ == "__main__":
            test_main(MyTest)
    """

    bootstrap()
    suite = suite_class()
    raise SystemExit(suite.exec(argv))


# pytest would otherwise try to collect the helper above
test_main.__test__ = False  # type: ignore[attr-defined]
