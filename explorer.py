#!/usr/bin/env python3
"""
Explorer - Shell-style File Explorer

Main entry point for the Explorer CLI application.
"""

import click
from rich.console import Console
from rich.table import Table

from explorer_core import ActionType, AuditLogger, ExplorerConfig, Session, load_config, __version__
from explorer_ops import CommandDispatcher


console = Console()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="Explorer")
@click.option(
    "--config",
    "config_path",
    default="config.yaml",
    show_default=True,
    help="YAML settings file (optional).",
)
@click.pass_context
def explorer(ctx, config_path: str):
    """
    Explorer - A Shell-style File Explorer

    Lists, creates, deletes, copies and moves files in the current
    directory, tracking an advisory permission string for each name.
    """
    ctx.obj = load_config(config_path)
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell)


@explorer.command()
@click.pass_obj
def shell(config: ExplorerConfig):
    """Start the interactive shell in the current directory."""
    session = Session.open(config)
    CommandDispatcher(session, console=console).run()


@explorer.command()
@click.option("--limit", default=20, show_default=True, help="Number of entries to show.")
@click.option("--denied", is_flag=True, help="Only show permission denials.")
@click.option(
    "--action",
    "action_type",
    type=click.Choice([t.value for t in ActionType]),
    default=None,
    help="Only show one kind of action.",
)
@click.option(
    "--export",
    "export_format",
    type=click.Choice(["json", "csv"]),
    default=None,
    help="Print the log in an export format instead of a table.",
)
@click.pass_obj
def audit(config: ExplorerConfig, limit: int, denied: bool, action_type, export_format):
    """View the audit log."""
    if not config.audit_log:
        console.print("[dim]Audit logging is disabled.[/dim]")
        return

    try:
        logger = AuditLogger(log_path=config.audit_log)
    except OSError as e:
        console.print(f"[red]Cannot open audit log:[/red] {e}")
        return

    if export_format:
        click.echo(logger.export(format=export_format, limit=limit))
        return

    if denied:
        entries = logger.get_denied_actions(limit=limit)
    elif action_type:
        entries = logger.get_by_action_type(ActionType(action_type), limit=limit)
    else:
        entries = logger.get_recent(limit=limit)

    if not entries:
        console.print("[dim]No audit entries found.[/dim]")
        return

    table = Table(title="Recent Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("User")
    table.add_column("Action")
    table.add_column("Status")
    table.add_column("Sudo")

    for entry in entries:
        # Format timestamp
        time_str = entry.timestamp.split("T")[1].split(".")[0] if "T" in entry.timestamp else entry.timestamp

        # Status color
        status_str = entry.status
        if entry.status == "executed":
            status_str = f"[green]{entry.status}[/green]"
        elif entry.status in ("denied", "failed"):
            status_str = f"[red]{entry.status}[/red]"

        description = entry.action_description
        if len(description) > 50:
            description = description[:50] + "..."

        table.add_row(
            time_str,
            entry.user,
            description,
            status_str,
            "yes" if entry.sudo else "—"
        )

    console.print(table)


if __name__ == "__main__":
    explorer()
