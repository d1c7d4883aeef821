"""Runbook command group."""

import getpass

import click

from opsbook.core.async_utils import run_sync
from opsbook.core.context import pass_context, OpsbookContext
from opsbook.core.exceptions import RunbookError, ValidationError
from opsbook.core.output import OutputFormat, format_duration, format_minutes
from opsbook.runbooks import ExecutionStatus
from opsbook.runbooks.loader import RunbookLoader


def _default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "cli"


@click.group()
@pass_context
def runbook(ctx: OpsbookContext) -> None:
    """Runbooks - list, show, run, validate.

    \b
    Examples:
        opsbook runbook list
        opsbook runbook show emergency-db-restore
        opsbook runbook run performance-degradation --automated
        opsbook runbook validate my-runbook.yaml
    """
    pass


@runbook.command("list")
@pass_context
def list_runbooks(ctx: OpsbookContext) -> None:
    """List registered runbooks.

    \b
    Examples:
        opsbook runbook list
        opsbook -o json runbook list
    """
    runbooks = ctx.service.get_all_runbooks()

    if not runbooks:
        ctx.output.print_info("No runbooks registered")
        return

    if ctx.output_format != OutputFormat.TABLE:
        ctx.output.print_data([rb.to_dict() for rb in runbooks])
        return

    rows = []
    for rb in runbooks:
        rows.append({
            "id": rb.id,
            "title": rb.title,
            "category": rb.category.value,
            "severity": rb.severity.value,
            "steps": len(rb.steps),
            "minutes": format_minutes(rb.total_estimated_time),
            "runs": rb.execution_count,
            "success": f"{rb.success_rate:.0f}%",
        })

    ctx.output.print_data(
        rows,
        headers=["id", "title", "category", "severity", "steps", "minutes", "runs", "success"],
        title="Runbooks",
    )


@runbook.command("show")
@click.argument("runbook_id")
@pass_context
def show(ctx: OpsbookContext, runbook_id: str) -> None:
    """Show a runbook and its steps.

    \b
    Examples:
        opsbook runbook show security-breach-response
    """
    rb = ctx.service.get_runbook(runbook_id)
    if rb is None:
        ctx.output.print_error(f"Runbook not found: {runbook_id}")
        raise click.Abort()

    if ctx.output_format != OutputFormat.TABLE:
        ctx.output.print_data(rb.to_dict())
        return

    ctx.output.print_header(rb.title)
    ctx.output.print(f"Category: {rb.category.value}  Severity: {rb.severity.value.upper()}")
    ctx.output.print(f"Description: {rb.description}")
    ctx.output.print(f"Estimated time: {format_minutes(rb.total_estimated_time)} minutes")

    rows = []
    for i, step in enumerate(rb.steps, start=1):
        rows.append({
            "#": i,
            "id": step.id,
            "title": step.title,
            "mode": "auto" if step.automated else "manual",
            "critical": "yes" if step.critical else "no",
            "minutes": format_minutes(step.estimated_minutes),
            "requires": ", ".join(step.prerequisite),
        })

    ctx.output.print_data(
        rows,
        headers=["#", "id", "title", "mode", "critical", "minutes", "requires"],
        title="Steps",
    )


@runbook.command("run")
@click.argument("runbook_id")
@click.option("--as", "executed_by", default=None, help="Identity recorded on the execution")
@click.option("--automated", is_flag=True, help="Also execute manual steps")
@click.option(
    "-f",
    "--file",
    "files",
    multiple=True,
    type=click.Path(exists=True),
    help="Register runbook file(s) before running",
)
@pass_context
def run(
    ctx: OpsbookContext,
    runbook_id: str,
    executed_by: str | None,
    automated: bool,
    files: tuple[str, ...],
) -> None:
    """Run a runbook.

    \b
    Examples:
        opsbook runbook run emergency-db-restore
        opsbook runbook run security-breach-response --automated --as oncall
        opsbook runbook run cache-failover -f cache-failover.yaml
    """
    service = ctx.service

    try:
        loader = RunbookLoader()
        for file in files:
            for rb in loader.load_path(file):
                service.register_runbook(rb)

        rb = service.get_runbook(runbook_id)
        if rb is not None and ctx.output_format == OutputFormat.TABLE:
            ctx.output.print_header(f"Running: {rb.title}")
            ctx.output.print(f"Steps: {len(rb.steps)}")

        execution = run_sync(
            service.execute_runbook(
                runbook_id,
                executed_by or _default_user(),
                automated=automated,
            )
        )

    except ValidationError as e:
        ctx.output.print_error(str(e))
        for issue in e.issues:
            ctx.output.print(f"  - {issue}")
        raise click.Abort()
    except RunbookError as e:
        ctx.output.print_error(str(e))
        raise click.Abort()

    if ctx.output_format != OutputFormat.TABLE:
        ctx.output.print_data(execution.to_dict())
    else:
        for entry in execution.logs:
            ctx.output.print_log_entry(
                entry.timestamp.strftime("%H:%M:%S"),
                entry.level.value,
                entry.message,
            )

        ctx.output.print("")
        duration = format_duration(execution.duration_seconds)
        if execution.status == ExecutionStatus.COMPLETED:
            ctx.output.print_success(f"Runbook completed in {duration}")
        else:
            ctx.output.print_error(f"Runbook {execution.status.value}: {execution.error}")

        ctx.output.print(
            f"Completed steps: {len(execution.completed_steps)}/{len(rb.steps) if rb else 0}"
            f"  Execution: {execution.id}"
        )

    if execution.status != ExecutionStatus.COMPLETED:
        raise click.exceptions.Exit(1)


@runbook.command("validate")
@click.argument("file", type=click.Path(exists=True))
@pass_context
def validate(ctx: OpsbookContext, file: str) -> None:
    """Validate a runbook definition file.

    \b
    Examples:
        opsbook runbook validate my-runbook.yaml
    """
    loader = RunbookLoader()

    try:
        rb = loader.load(file)
    except ValidationError as e:
        ctx.output.print_error(str(e))
        for issue in e.issues:
            ctx.output.print(f"  - {issue}")
        raise click.Abort()
    except RunbookError as e:
        ctx.output.print_error(f"Validation failed: {e}")
        raise click.Abort()

    issues = loader.validate(rb)

    ctx.output.print_header(f"Validating: {rb.title}")
    ctx.output.print(f"Steps: {len(rb.steps)}")

    if issues:
        ctx.output.print_error(f"Found {len(issues)} issue(s):")
        for issue in issues:
            ctx.output.print(f"  - {issue}")
        raise click.Abort()

    ctx.output.print_success("Runbook is valid")
