"""Projects CLI sub-commands."""

from typing import List

import typer

from hourbook.core.output import OutputFormat, format_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def create(
    name: str = typer.Argument(..., help="Project name"),
    member: List[str] = typer.Option(
        [], "--member", "-m", help="Member as USER=RATE (repeatable)"
    ),
):
    """Create a project owned by the CLI user."""
    from hourbook.cli.support import cli_services, parse_pairs

    members = [
        {"user_id": user_id, "rate_per_hour": rate}
        for user_id, rate in parse_pairs(member, "member")
    ]
    with cli_services() as svc:
        project = svc.projects.create_project(name, members)
    typer.echo(f"Created project {project['id']}  {project['name']}")


@app.command("list")
def list_projects():
    """List all projects with their member count."""
    from hourbook.cli.support import cli_services

    with cli_services() as svc:
        projects = svc.projects.refresh_all()

    if not projects:
        typer.echo("No projects found.")
        return

    for p in projects:
        typer.echo(
            f"  {p.id}  {p.name:<30} {len(p.members):>3} member(s)  "
            f"{len(p.budgets):>3} budget month(s)"
        )
    typer.echo(f"\n  {len(projects)} project(s)")


@app.command("member-add")
def member_add(
    project: str = typer.Argument(..., help="Project ID"),
    user: str = typer.Argument(..., help="User ID"),
    rate: float = typer.Option(..., "--rate", "-r", help="Rate per hour"),
    hours: float = typer.Option(0, "--hours", help="Monthly hours budget"),
):
    """Add a member to a project, or update an existing member's rate."""
    from hourbook.cli.support import cli_services

    with cli_services() as svc:
        if user in svc.members.rates(project):
            svc.members.update_member(
                project, user, rate_per_hour=rate, monthly_hours_budget=hours
            )
            typer.echo(f"Updated {user} on {project} to {rate:,.2f}/h")
            return
        svc.projects.get_project(project)
        svc.members.add_member(project, user, rate, hours)
    typer.echo(f"Added {user} to {project} at {rate:,.2f}/h")


@app.command("member-remove")
def member_remove(
    project: str = typer.Argument(..., help="Project ID"),
    user: str = typer.Argument(..., help="User ID"),
):
    """Remove a member. Their allocations and logs are kept."""
    from hourbook.cli.support import cli_services

    with cli_services() as svc:
        svc.members.remove_member(project, user)
    typer.echo(f"Removed {user} from {project}")


@app.command("budget-set")
def budget_set(
    project: str = typer.Argument(..., help="Project ID"),
    budget: List[str] = typer.Option(
        ..., "--budget", "-b", help="Month budget as YYYY-MM=AMOUNT (repeatable)"
    ),
    keep_zero: bool = typer.Option(
        False, "--keep-zero", help="Store zero amounts instead of skipping them"
    ),
):
    """Replace the budget for each given month."""
    from hourbook.cli.support import cli_services, parse_month, parse_pairs
    from hourbook.projects.budgets import nonzero_budgets

    items = [
        {"month_date": parse_month(month), "budget_amount": amount}
        for month, amount in parse_pairs(budget, "budget")
    ]
    if not keep_zero:
        items = nonzero_budgets(items)

    with cli_services() as svc:
        rows = svc.budgets.replace_budgets(project, items)
    typer.echo(f"Saved {len(rows)} budget month(s) for {project}")


@app.command("budget-list")
def budget_list(
    project: str = typer.Argument(..., help="Project ID"),
    window: bool = typer.Option(
        False, "--window", "-w", help="Show the editable window from this month"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN, "--format", "-f", help="Output format"
    ),
):
    """List a project's monthly budgets."""
    from datetime import date

    from hourbook.cli.support import cli_services
    from hourbook.core.config import get_config_value

    with cli_services() as svc:
        if window:
            months = int(get_config_value("budgets", "edit_window_months", default=12))
            rows = svc.budgets.edit_window(project, date.today(), months)
        else:
            rows = svc.budgets.list_budgets(project)

    budgets = {r["month_date"]: float(r["budget_amount"]) for r in rows}
    if output_format == OutputFormat.HUMAN and not budgets:
        typer.echo("No budgets set.")
        return
    typer.echo(format_result({"budgets": budgets}, output_format, title=f"Budgets {project}"))


@app.command()
def allocate(
    project: str = typer.Argument(..., help="Project ID"),
    month: str = typer.Argument(..., help="Month as YYYY-MM"),
    hours: List[str] = typer.Option(
        ..., "--hours", "-h", help="Allocation as USER=HOURS, 0 clears (repeatable)"
    ),
):
    """Set allocated hours for members in one month, saving only what changed."""
    from hourbook.cli.support import cli_services, parse_month, parse_pairs
    from hourbook.core.errors import BatchError

    pairs = parse_pairs(hours, "allocation")
    start = parse_month(month)

    with cli_services() as svc:
        editor = svc.reconciler.editor(project, start)
        for user_id, value in pairs:
            editor.set_hours(user_id, value)
        try:
            changes = editor.save()
        except BatchError as exc:
            for err in exc.errors:
                typer.echo(f"  failed: {err}", err=True)
            raise

    if not changes:
        typer.echo("No changes.")
        return
    for user_id, value in changes.items():
        action = "cleared" if value == 0 else f"{value:g}h"
        typer.echo(f"  {user_id:<20} {action}")
    flag = "  OVER BUDGET" if editor.over_budget else ""
    typer.echo(f"\n  Remaining budget: {editor.remaining_budget:,.2f}{flag}")
