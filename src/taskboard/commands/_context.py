"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Opens the workspace lazily, resolves the acting user,
and routes results to stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskboard.config.logging import bind_principal, clear_context, configure_logging
from taskboard.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from taskboard.config.settings import TaskboardSettings
    from taskboard.infrastructure.workspace import Workspace
    from taskboard.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never open the database.
    """

    def __init__(self, settings: TaskboardSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        """The workspace (created lazily on first access)."""
        if self._workspace is None:
            from taskboard.infrastructure.workspace import Workspace

            self._workspace = Workspace(self.settings)
            self._workspace.init_mail_bus(sync=self.settings.sync)
        return self._workspace

    @property
    def principal_id(self) -> str:
        """ID of the acting user given by ``--user`` / ``TASKBOARD_USER``."""
        if not self.settings.user:
            msg = "No acting user. Pass --user or set TASKBOARD_USER."
            raise click.UsageError(msg)
        principal_id = self.resolve_user(self.settings.user)
        bind_principal(principal_id)
        return principal_id

    def resolve_user(self, user_ref: str) -> str:
        """Resolve an id, username, or email to a user ID; exit 1 if unknown."""
        from taskboard.domain.errors import NotFoundError
        from taskboard.services.result import ServiceResult
        from taskboard.services.users import UserService

        try:
            return UserService(self.workspace).resolve(user_ref).id
        except NotFoundError as exc:
            self.emit(ServiceResult.from_error("resolve_user", exc))
            raise  # pragma: no cover - emit() exits

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def close(self) -> None:
        """Drain pending email and release the store."""
        clear_context()
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None
