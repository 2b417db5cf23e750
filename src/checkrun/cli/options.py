"""Command line options understood by every suite's ``exec``."""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import click

from checkrun.core.models import Selection

if TYPE_CHECKING:
    from checkrun.core.tester import TesterConfiguration


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

COLOR_MODES = {"on": True, "off": False, "auto": None}


@dataclass(frozen=True)
class RunOptions:
    """Parsed command line of a suite run."""

    selection: Selection = field(default_factory=Selection)
    color: Optional[bool] = None
    verbose: bool = False
    json_report: Optional[str] = None
    extra_args: Tuple[str, ...] = ()


def parse_arguments(
    argv: Optional[Sequence[str]],
    configuration: "TesterConfiguration",
    *,
    prog_name: str = "checkrun",
) -> RunOptions:
    """Turn ``argv`` into ``RunOptions``.

    Raises ``click.ClickException`` on invalid input and
    ``click.exceptions.Exit`` when ``--help`` was requested.
    """

    args = list(argv) if argv is not None else sys.argv[1:]
    command = build_command(configuration.skipped_argument_prefixes)
    result = command.main(args=args, prog_name=prog_name, standalone_mode=False)
    if not isinstance(result, RunOptions):
        raise click.exceptions.Exit(result or 0)
    return result


def build_command(skipped_prefixes: Sequence[str] = ()) -> click.Command:
    prefixes = tuple(skipped_prefixes)
    settings = dict(CONTEXT_SETTINGS)
    if prefixes:
        settings.update(ignore_unknown_options=True, allow_extra_args=True)

    @click.command(context_settings=settings)
    @click.option("--only", "only", type=str, help="Space-separated ids of the only test cases to run.")
    @click.option("--skip", "skip", type=str, help="Space-separated ids of test cases to skip.")
    @click.option(
        "--color",
        type=click.Choice(sorted(COLOR_MODES)),
        default="auto",
        show_default=True,
        envvar="CHECKRUN_COLOR",
        help="Colored output.",
    )
    @click.option("--verbose", is_flag=True, help="Enable debug logging of the harness.")
    @click.option("--json-report", type=click.Path(dir_okay=False), help="Also write a JSON report to this path.")
    @click.pass_context
    def command(
        ctx: click.Context,
        only: Optional[str],
        skip: Optional[str],
        color: str,
        verbose: bool,
        json_report: Optional[str],
    ) -> RunOptions:
        """Run the test cases of this suite."""

        extra = _check_extra_args(ctx.args, prefixes)
        selection = Selection(
            only=_parse_ids(only, "--only") if only is not None else None,
            skip=frozenset(_parse_ids(skip, "--skip")) if skip is not None else frozenset(),
        )
        return RunOptions(
            selection=selection,
            color=_resolve_color(color),
            verbose=verbose,
            json_report=json_report,
            extra_args=extra,
        )

    return command


def _parse_ids(value: str, option: str) -> Tuple[int, ...]:
    ids = []
    for token in value.split():
        try:
            ids.append(int(token))
        except ValueError as exc:
            raise click.BadParameter(f"'{token}' is not a test case id", param_hint=option) from exc
    return tuple(ids)


def _resolve_color(mode: str) -> Optional[bool]:
    color = COLOR_MODES[mode]
    if color is None and os.environ.get("NO_COLOR"):
        return False
    return color


def _check_extra_args(args: Sequence[str], prefixes: Sequence[str]) -> Tuple[str, ...]:
    accepted = []
    expecting_value = False
    for token in args:
        if token.startswith("--"):
            name = token[2:].split("=", 1)[0]
            if not any(name.startswith(f"{prefix}-") for prefix in prefixes):
                raise click.NoSuchOption(token)
            expecting_value = "=" not in token
        elif expecting_value:
            expecting_value = False
        else:
            raise click.UsageError(f"Got unexpected extra argument ({token})")
        accepted.append(token)
    return tuple(accepted)
