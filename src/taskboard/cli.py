"""Root CLI group for taskboard with global flags and command registration."""

from __future__ import annotations

import click

from taskboard import __version__
from taskboard.commands import register_commands
from taskboard.commands._context import AppContext
from taskboard.config.settings import TaskboardSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="taskboard")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (IDs only).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--sync", is_flag=True, help="Send email synchronously.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("-u", "--user", default=None, help="Acting user (id, username, or email).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    sync: bool,
    config_path: str | None,
    user: str | None,
) -> None:
    """taskboard — collaborative boards, invitations, and tasks."""
    settings = TaskboardSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        sync=sync,
        user=user,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
