"""Command-line interface for Zazzy.

This module defines the CLI commands using Click framework. Every command
works on the site in the current directory.

Commands:
- build: Build the whole site, or one file to standard output.
- watch: Build the site and rebuild changed files until interrupted.
- var: Print the variables of a file.
- anything else: Run as a plugin with the global variables.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import Config

LOG_FORMAT = "%(asctime)s %(message)s"
LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


class PluginGroup(click.Group):
    """Command group running unknown commands as plugins."""

    def get_command(self, ctx: click.Context, cmd_name: str):
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command
        return _plugin_command(cmd_name)


def _plugin_command(name: str) -> click.Command:
    def run(args: tuple[str, ...]):
        from .errors import PluginError
        from .plugins import run_plugin

        config = _load_config()
        try:
            output = run_plugin(config, config.globals, name, *args)
        except PluginError as exc:
            click.echo(click.style(f"ERROR: {exc}", fg="red"), err=True)
            raise SystemExit(1) from None
        click.echo(output)

    return click.Command(
        name,
        callback=run,
        params=[click.Argument(["args"], nargs=-1, type=click.UNPROCESSED)],
        context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
        add_help_option=False,
        help=f"Run the {name} plugin.",
    )


@click.group(cls=PluginGroup)
@click.version_option(version=__version__, prog_name="zazzy")
@click.option("-v", "--verbose", is_flag=True, help="Show debug messages")
def cli(verbose: bool):
    """Zazzy static site generator."""
    _setup_logging(verbose)


@cli.command()
@click.argument("file", required=False)
def build(file: str | None):
    """Build the site, or FILE to standard output."""
    config = _load_config()
    if file is None:
        from .orchestrator import Orchestrator

        Orchestrator(config).run(watch=False)
        return

    from .build import BuildError, Builder

    try:
        Builder(config).build(file, click.get_text_stream("stdout"), config.globals)
    except BuildError as exc:
        click.echo(click.style(f"ERROR: {exc.message}", fg="red"), err=True)
        raise SystemExit(1) from None


@cli.command()
def watch():
    """Build the site and rebuild changed files."""
    from .orchestrator import Orchestrator

    orchestrator = Orchestrator(_load_config())
    try:
        orchestrator.run(watch=True)
    except KeyboardInterrupt:
        orchestrator.stop()


@cli.command(name="var")
@click.argument("file")
@click.argument("names", nargs=-1)
def var(file: str, names: tuple[str, ...]):
    """Print the variables of FILE, or only the NAMES given."""
    from .errors import ZazzyError
    from .variables import resolve

    config = _load_config()
    try:
        values, _ = resolve(file, {}, config)
    except ZazzyError as exc:
        click.echo(f"var: {exc}", err=True)
        raise SystemExit(1) from None
    if names:
        lines = [values.get(name, "") for name in names]
    else:
        lines = [f"{key}:{value}" for key, value in sorted(values.items())]
    click.echo("\n".join(lines).strip())


def main():
    """Entry point for the CLI application."""
    cli()


def _load_config() -> Config:
    return Config.load(Path.cwd())


def _setup_logging(verbose: bool) -> None:
    """Send log records to standard error, timestamped."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
