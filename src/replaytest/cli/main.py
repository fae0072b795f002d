"""CLI entry point for replaytest."""
from __future__ import annotations

import json
import logging
import sys
from typing import List, Optional

import click
from colorama import init as colorama_init

from replaytest import Harness, __version__, bootstrap
from replaytest.config import REPORT_FORMATS, RunConfig, load_config
from replaytest.core import ConfigurationError, Cookie, NullBreakpoint
from replaytest.reporting import JsonReporter, ReportManager, Reporter, TerminalReporter
from replaytest.utils import resolve_target

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CliState:
    """Holds global CLI state."""

    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"replaytest {__version__}")
    raise click.exceptions.Exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the replaytest version and exit.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Run registered test cases and replay failures."""

    configure_logging(verbose)
    colorama_init()
    ctx.obj = CliState(verbose=verbose)


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML run configuration file.",
)
target_argument = click.argument("target", required=False)


@cli.command()
@target_argument
@config_option
@click.option(
    "--report",
    "report_format",
    type=click.Choice(REPORT_FORMATS),
    help="Report format (terminal by default).",
)
@click.option("--report-path", type=str, help="When --report json, write to this path.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.option("--no-stack", is_flag=True, help="Do not print stack traces of exceptions.")
@click.pass_obj
def run(
    state: CliState,
    target: Optional[str],
    config_path: Optional[str],
    report_format: Optional[str],
    report_path: Optional[str],
    no_color: Optional[bool],
    no_stack: Optional[bool],
) -> None:
    """Run every registered test case in TARGET (module:attr or file.py:attr)."""

    config = _load_config(
        config_path,
        target=target,
        report=report_format,
        report_path=report_path,
        color=False if no_color else None,
        show_stack=False if no_stack else None,
    )
    if config.report == "json" and not config.report_path:
        raise click.BadParameter("--report-path is required with --report json")
    harness = _load_harness(config)
    total = len(harness.registry)
    if not total:
        click.echo("No tests registered.")
        raise click.exceptions.Exit(1)
    manager = ReportManager(_build_reporters(config))
    manager.start(total)
    harness.run(manager)
    manager.complete()
    raise click.exceptions.Exit(0 if manager.summary.succeeded else 1)


@cli.command()
@target_argument
@config_option
@click.option("--cookie", "cookie_json", type=str, help="Failure cookie as printed by a previous run (JSON).")
@click.option("--name", type=str, help="Full name of the test to replay.")
@click.option("--offset", type=click.IntRange(min=0), help="Zero-based failure offset to stop at.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
@click.pass_obj
def debug(
    state: CliState,
    target: Optional[str],
    config_path: Optional[str],
    cookie_json: Optional[str],
    name: Optional[str],
    offset: Optional[int],
    no_color: Optional[bool],
) -> None:
    """Replay one test case and break at the failure named by the cookie."""

    cookie = _parse_cookie(cookie_json, name, offset)
    config = _load_config(config_path, target=target, color=False if no_color else None)
    harness = _load_harness(config)
    manager = ReportManager([TerminalReporter(use_color=config.color, show_stack=config.show_stack)])
    manager.start(1)
    try:
        harness.debug(cookie, manager)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.complete()
    raise click.exceptions.Exit(0 if manager.summary.succeeded else 1)


@cli.command(name="list")
@target_argument
@config_option
def list_tests(target: Optional[str], config_path: Optional[str]) -> None:
    """List registered test names in registration order."""

    harness = _load_harness(_load_config(config_path, target=target))
    for name in harness.registry.names():
        click.echo(name)


def main(argv: Optional[List[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="replaytest", standalone_mode=True)
    except click.ClickException as err:  # pragma: no cover - click handles display
        err.show()
        return err.exit_code
    except SystemExit as exc:  # click may raise exit code
        return int(exc.code or 0)
    return 0


def _load_config(config_path: Optional[str], **overrides: object) -> RunConfig:
    try:
        config = load_config(config_path) if config_path else RunConfig()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    return config.with_overrides(**overrides)


def _load_harness(config: RunConfig) -> Harness:
    if not config.target:
        raise click.UsageError("A TARGET is required (argument or 'target' in --config)")
    try:
        obj = resolve_target(config.target)
        if callable(obj) and not isinstance(obj, Harness):
            obj = obj()
        if not isinstance(obj, Harness):
            raise ConfigurationError(f"'{config.target}' is not a Harness (got {type(obj).__name__})")
        bootstrap(obj)
    except (ConfigurationError, ImportError, AttributeError, ValueError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc
    if not config.breakpoints:
        obj.services.breakpoints = NullBreakpoint()
    return obj


def _build_reporters(config: RunConfig) -> List[Reporter]:
    if config.report == "json":
        assert config.report_path  # checked by the caller
        return [JsonReporter(path=config.report_path)]
    return [TerminalReporter(use_color=config.color, show_stack=config.show_stack)]


def _parse_cookie(cookie_json: Optional[str], name: Optional[str], offset: Optional[int]) -> Cookie:
    if cookie_json:
        try:
            return Cookie.from_mapping(json.loads(cookie_json))
        except (json.JSONDecodeError, ValueError, AttributeError) as exc:
            raise click.BadParameter(f"Invalid cookie: {exc}", param_hint="--cookie") from exc
    if name is None or offset is None:
        raise click.UsageError("Pass --cookie, or both --name and --offset")
    return Cookie(name=name, offset=offset)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
