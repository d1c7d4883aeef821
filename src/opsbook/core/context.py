"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from opsbook.config import OpsbookConfig, get_default_config
from opsbook.core.output import OutputFormat, OutputFormatter
from opsbook.core.logging import LogLevel, setup_logging, StructuredLogger

if TYPE_CHECKING:
    from opsbook.runbooks.service import RunbookService


class OpsbookContext:
    """Shared context object for opsbook commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, output and the runbook service.
    """

    def __init__(
        self,
        config: OpsbookConfig | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._color = color

        log_level = LogLevel.from_flags(verbose, quiet, self._config.global_settings.verbosity)

        setup_logging(log_level, rich_output=color)
        self._logger = StructuredLogger("context")

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazy-loaded service
        self._service: RunbookService | None = None

    @property
    def config(self) -> OpsbookConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose

    @property
    def quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    @property
    def color(self) -> bool:
        """Check if color output is enabled."""
        return self._color

    @property
    def logger(self) -> StructuredLogger:
        """Get the context logger."""
        return self._logger

    @property
    def service(self) -> "RunbookService":
        """Get or create the runbook service."""
        if self._service is None:
            from opsbook.runbooks.service import create_service

            self._service = create_service(
                self._config.engine,
                base_dir=self._config.source_dir,
            )
        return self._service


# Click decorator for passing context
pass_context = click.make_pass_decorator(OpsbookContext, ensure=True)
