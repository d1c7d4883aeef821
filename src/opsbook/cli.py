"""Main CLI entry point for opsbook."""

import sys
from typing import Any

import click
from rich.console import Console

from opsbook import __version__
from opsbook.config import load_config
from opsbook.core.context import OpsbookContext
from opsbook.core.output import OutputFormat
from opsbook.core.exceptions import OpsbookError, ConfigError


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"opsbook version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="OPSBOOK_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """Opsbook - operational runbook orchestration.

    Runs multi-step operational procedures (disaster recovery, security
    incident response, performance remediation) with prerequisite checks,
    critical-step fail-fast and a structured execution log.

    \b
    Examples:
        opsbook runbook list
        opsbook runbook run emergency-db-restore --automated

    \b
    Configuration:
        ~/.opsbook/config.yaml   User configuration
        ./opsbook.yaml           Project configuration
        OPSBOOK_ENGINE_*         Engine settings from the environment
    """
    try:
        config = load_config(config_file)

        color = not no_color and config.global_settings.color != "never"
        ctx.obj = OpsbookContext(
            config=config,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            color=color,
        )

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all command groups."""
    from opsbook.commands.runbooks import runbook

    cli.add_command(runbook)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    opsbook_ctx: OpsbookContext = ctx.obj
    engine = opsbook_ctx.config.engine
    config_data = {
        "output_format": opsbook_ctx.output_format.value,
        "verbose": opsbook_ctx.verbose,
        "engine": {
            "command_delay": engine.command_delay,
            "step_delay": engine.step_delay,
            "validation_delay": engine.validation_delay,
            "load_builtin": engine.load_builtin,
            "reject_duplicate_ids": engine.reject_duplicate_ids,
            "runbook_paths": engine.runbook_paths,
        },
    }
    opsbook_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except OpsbookError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
