"""
Hourbook CLI - Main Entry Point

Unified Typer CLI that assembles all module sub-commands.

Usage:
    hourbook version
    hourbook migrate
    hourbook projects [command]
    hourbook timetracker [command]
"""

import typer

import hourbook

app = typer.Typer(
    name="hourbook",
    help="Project time logs against monthly budgets.",
    no_args_is_help=True,
)


@app.command()
def version():
    """Show Hourbook version."""
    typer.echo(f"hourbook {hourbook.__version__}")


@app.command()
def migrate():
    """Run database schema migrations for all modules."""
    from hourbook.core.db import get_db_path, migrate_all

    migrate_all()
    typer.echo(f"Database migration complete: {get_db_path()}")


def _register_modules():
    """Register module CLI sub-apps."""
    import importlib

    module_registry = [
        ("hourbook.projects.cli", "projects", "Projects, members, budgets & allocations"),
        ("hourbook.timetracker.cli", "timetracker", "Time logs, calendar & monthly summary"),
    ]

    for module_path, name, help_text in module_registry:
        mod = importlib.import_module(module_path)
        app.add_typer(mod.app, name=name, help=help_text)


_register_modules()


def main():
    """Entry point for the hourbook CLI."""
    app()


if __name__ == "__main__":
    main()
