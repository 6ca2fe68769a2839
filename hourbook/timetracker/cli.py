"""Time Tracker CLI sub-commands."""

from typing import List

import typer

from hourbook.core.output import OutputFormat, format_result

app = typer.Typer(no_args_is_help=True)


@app.command("calendar-seed")
def calendar_seed(
    month: str = typer.Argument(None, help="Month as YYYY-MM (default: this month)"),
    holiday: List[str] = typer.Option(
        [], "--holiday", help="Non-working date YYYY-MM-DD (repeatable)"
    ),
):
    """Write the working-day calendar for one month."""
    from hourbook.cli.support import cli_services, parse_month
    from hourbook.core.errors import ValidationError
    from hourbook.timetracker.calendar import seed_calendar

    start = parse_month(month)
    with cli_services() as svc:
        try:
            count = seed_calendar(svc.records, start, holidays=holiday)
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {exc}") from exc
    typer.echo(f"Seeded {start[:7]}: {count} working day(s)")


@app.command()
def log(
    project: str = typer.Argument(..., help="Project ID"),
    hours: float = typer.Option(..., "--hours", "-h", help="Hours spent"),
    description: List[str] = typer.Option(
        ..., "--description", "-d", help="Work item (repeatable)"
    ),
    on: str = typer.Option(None, "--date", help="Date YYYY-MM-DD (default: today)"),
):
    """Log time against a project as the CLI user."""
    from datetime import date

    from hourbook.cli.support import cli_services
    from hourbook.core.errors import ValidationError

    with cli_services() as svc:
        try:
            entry = svc.logs.create_log(project, on or date.today(), hours, description)
        except ValueError as exc:
            raise ValidationError(f"Invalid date: {exc}") from exc
    typer.echo(f"Logged {entry['hours_spent']:g}h on {entry['date']} ({entry['id']})")


@app.command()
def logs(
    project: str = typer.Argument(..., help="Project ID"),
    month: str = typer.Argument(None, help="Month as YYYY-MM (default: this month)"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN, "--format", "-f", help="Output format"
    ),
):
    """List a project's logs for one month."""
    import json

    from hourbook.cli.support import cli_services, parse_month

    with cli_services() as svc:
        entries = svc.logs.fetch_month(project, parse_month(month))

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(entries, indent=2, default=str))
        return
    if not entries:
        typer.echo("No logs found.")
        return

    for e in entries:
        typer.echo(
            f"  {e['date']}  {e['user_id']:<20} {e['hours_spent']:>6.2f}h  "
            f"{'; '.join(e['work_description'])}"
        )
    total = sum(e["hours_spent"] for e in entries)
    typer.echo(f"\n  {len(entries)} log(s), {total:,.2f}h")


@app.command()
def summary(
    project: str = typer.Argument(..., help="Project ID"),
    month: str = typer.Argument(None, help="Month as YYYY-MM (default: this month)"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN, "--format", "-f", help="Output format"
    ),
):
    """Budget, spend, allocations and pacing for one project-month."""
    from hourbook.cli.support import cli_services, parse_month
    from hourbook.core.output import to_plain

    with cli_services() as svc:
        result = svc.reconciler.summary(project, parse_month(month))

    data = to_plain(result)
    data["working_days"] = result.working_days_label
    data["pacing"] = {
        user_id: (
            {"target": p.target_to_date, "logged": p.hours_logged, "on_track": p.on_track}
            if p is not None else None
        )
        for user_id, p in result.pacing.items()
    }
    typer.echo(format_result(data, output_format, title=f"Summary {result.month_date[:7]}"))
