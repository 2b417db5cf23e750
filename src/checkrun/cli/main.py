"""CLI entry point for checkrun."""
from __future__ import annotations

import sys
from typing import Optional, Tuple

import click

from checkrun import __version__, bootstrap
from checkrun.core.tester import Tester
from checkrun.utils.importing import import_string

from .options import CONTEXT_SETTINGS


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"checkrun {__version__}")
    raise click.exceptions.Exit()


def load_suite(path: str) -> type:
    """Resolve ``module:Class`` or ``file.py:Class`` to a ``Tester`` subclass."""

    try:
        suite_class = import_string(path)
    except (ImportError, AttributeError, ValueError, FileNotFoundError) as exc:
        raise click.BadParameter(str(exc), param_hint="SUITE") from exc
    if not isinstance(suite_class, type) or not issubclass(suite_class, Tester):
        raise click.BadParameter(f"'{path}' is not a Tester subclass", param_hint="SUITE")
    return suite_class


@click.command(
    context_settings={**CONTEXT_SETTINGS, "ignore_unknown_options": True, "allow_extra_args": True}
)
@click.argument("suite")
@click.argument("suite_args", nargs=-1, type=click.UNPROCESSED)
@click.option("--list", "list_only", is_flag=True, help="List the suite's test cases without running.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the checkrun version and exit.",
)
def cli(suite: str, suite_args: Tuple[str, ...], list_only: bool) -> None:
    """Run the test suite SUITE (``module:Class`` or ``file.py:Class``).

    Remaining arguments, such as --only, --skip and --color, are passed to
    the suite.
    """

    bootstrap()
    instance = load_suite(suite)()
    if list_only:
        for case in instance.test_cases:
            click.echo(f"[{case.id}] {case.name}()")
        raise click.exceptions.Exit(0)
    raise click.exceptions.Exit(instance.exec(list(suite_args)))


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="checkrun", standalone_mode=True)
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
