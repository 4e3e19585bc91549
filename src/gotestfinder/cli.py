"""gotestfinder CLI — list Go tests or pick some and run them."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, TypedDict, Unpack

import click
from rich.console import Console
from rich.logging import RichHandler

from gotestfinder import __version__
from gotestfinder.config import (
    SELECTOR_BACKENDS,
    ConfigError,
    FinderConfig,
    load_config,
    validate_config,
)
from gotestfinder.discovery import find_tests
from gotestfinder.gotest import build_go_test_command, execute_go_test, format_command
from gotestfinder.parsing import DiscoveryError
from gotestfinder.patterns import anchor, combine, flatten
from gotestfinder.reporters.terminal import reporter
from gotestfinder.selectors import get_selector
from gotestfinder.utils.subprocess_runner import SubprocessError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gotestfinder.models import TestRecord

logger = logging.getLogger(__name__)


class _CliKwargs(TypedDict):
    """Keyword arguments for the top-level command."""

    directory: Path
    subtests: bool | None
    parent: bool | None
    interactive: bool
    tags: str | None
    verbose: bool
    selector: str | None
    config_path: Path | None
    debug: bool


def _configure_logging(*, debug: bool) -> None:
    if not debug:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_and_validate_config(
    directory: Path,
    config_path: Path | None,
    *,
    selector: str | None,
    interactive: bool,
) -> FinderConfig:
    try:
        config = load_config(directory, config_path)
    except ConfigError as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if selector:
        config.selector.backend = selector

    errors = validate_config(config, check_selector=interactive)
    if errors:
        where = config.source or "environment defaults"
        reporter.print_errors(f"Invalid configuration ({where})", errors)
        raise click.Abort
    return config


def _discover(directory: Path, config: FinderConfig) -> list[TestRecord]:
    try:
        return find_tests(
            directory,
            suffix=config.discovery.file_suffix,
            exclude_dirs=config.discovery.exclude_dirs,
        )
    except DiscoveryError as e:
        reporter.print_error(str(e))
        raise click.Abort from e


def _print_listing(
    records: Sequence[TestRecord], *, show_subtests: bool, show_parent: bool
) -> None:
    for identifier in flatten(records, show_subtests=show_subtests, show_parent=show_parent):
        click.echo(anchor(identifier))


async def _run_interactive(
    records: Sequence[TestRecord],
    config: FinderConfig,
    *,
    tags: str,
    verbose: bool,
) -> int:
    """Let the user pick tests, run them, and return ``go test``'s exit code."""
    candidates = flatten(records, show_subtests=True, show_parent=True)
    if not candidates:
        reporter.print_info("No tests found")
        return 0

    selector = get_selector(config.selector)
    logger.debug("Selecting among %d identifier(s) with %s", len(candidates), selector.name)
    chosen = await selector.select(candidates)
    if not chosen:
        reporter.print_info("No tests selected")
        return 0

    command = build_go_test_command(
        combine(chosen),
        tags=tags,
        verbose=verbose,
        runner=config.runner,
    )
    reporter.print_command(format_command(command))
    return await execute_go_test(command)


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--subtests/--no-subtests",
    default=None,
    help="Show individual subtests (default: on).",
)
@click.option(
    "--parent/--no-parent",
    default=None,
    help="Show parent test patterns for tests that have subtests (default: on).",
)
@click.option(
    "--fzf",
    "interactive",
    is_flag=True,
    help="Pick tests interactively and run them with go test.",
)
@click.option("--tags", type=str, default=None, help="Build tags to pass to go test.")
@click.option("-v", "--verbose", is_flag=True, help="Pass -v to go test.")
@click.option(
    "--selector",
    type=click.Choice(SELECTOR_BACKENDS),
    default=None,
    help="Interactive selection backend (default: textual).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: DIRECTORY/.gotestfinder.yml).",
)
@click.option("--debug", is_flag=True, help="Log discovery and command details to stderr.")
@click.version_option(version=__version__, prog_name="gotestfinder")
@click.pass_context
def cli(ctx: click.Context, **kwargs: Unpack[_CliKwargs]) -> None:
    """Find Go tests and subtests under DIRECTORY.

    Without --fzf, prints one ^Name$ or ^Name/Sub$ pattern per line. With
    --fzf, opens a picker and runs go test -run with the chosen tests,
    exiting with go test's exit code.
    """
    directory = kwargs["directory"]
    _configure_logging(debug=kwargs["debug"])

    config = _load_and_validate_config(
        directory,
        kwargs.get("config_path"),
        selector=kwargs.get("selector"),
        interactive=kwargs["interactive"],
    )

    records = _discover(directory, config)

    if not kwargs["interactive"]:
        subtests = kwargs.get("subtests")
        parent = kwargs.get("parent")
        _print_listing(
            records,
            show_subtests=config.listing.subtests if subtests is None else subtests,
            show_parent=config.listing.parent if parent is None else parent,
        )
        return

    tags = kwargs.get("tags")
    try:
        exit_code = asyncio.run(
            _run_interactive(
                records,
                config,
                tags=config.runner.tags if tags is None else tags,
                verbose=kwargs["verbose"] or config.runner.verbose,
            )
        )
    except SubprocessError as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    ctx.exit(exit_code)
