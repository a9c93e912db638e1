"""covprov CLI — manage Coveralls repository settings from a TOML file."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from covprov.errors import ConfigurationError
from covprov.logs import configure_logging
from covprov.models import Diagnostic, RepositoryState
from covprov.plan import Change, apply_changes, desired_from_config, plan_changes, refresh
from covprov.provider import CoverallsProvider
from covprov.settings import DEFAULT_CONFIG, DEFAULT_STATE, get_settings, load_config
from covprov.state import load_state, save_state

app = typer.Typer(help="Manage Coveralls repository settings declaratively", no_args_is_help=True)

ConfigOpt = Annotated[
    Path,
    typer.Option("--config", "-c", help="TOML file with [provider] and [repository.<label>] tables"),
]
StateOpt = Annotated[Path, typer.Option("--state", "-s", help="JSON state file")]


@app.callback()
def main(
    debug: Annotated[bool, typer.Option("--debug", help="Log HTTP exchanges and lifecycle steps")] = False,
) -> None:
    configure_logging(level=logging.DEBUG if debug else logging.WARNING, force=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(path: Path) -> dict:
    return load_config(path).unwrap()


def _load_state(path: Path) -> dict[str, RepositoryState]:
    try:
        return load_state(path)
    except ConfigurationError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


def get_provider(config: dict | None = None) -> CoverallsProvider:
    try:
        return CoverallsProvider.from_settings(get_settings(config=config))
    except ConfigurationError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


def mask(val: str | None) -> str:
    if not val:
        return "[dim](not set)[/dim]"
    if len(val) <= 5:
        return "***"
    return f"...{val[-5:]}"


def _print_diagnostics(diagnostics: list[tuple[str | None, Diagnostic]]) -> bool:
    """Print diagnostics; return True if any of them is an error."""
    failed = False
    for label, diag in diagnostics:
        prefix = f"{label}: " if label else ""
        if diag.severity == "error":
            failed = True
            rprint(f"[red]Error:[/red] {escape(prefix + diag.summary)}")
        else:
            rprint(f"[yellow]Warning:[/yellow] {escape(prefix + diag.summary)}")
        if diag.detail:
            rprint(f"  {escape(diag.detail)}")
    return failed


def _value(val: object) -> str:
    return "[dim](not set)[/dim]" if val is None else escape(str(val))


def _state_table(title: str, state: RepositoryState, reveal_token: bool = False) -> Table:
    table = Table(title=title)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("id", _value(state.id))
    table.add_row("service", _value(state.service))
    table.add_row("name", _value(state.name))
    table.add_row("token", _value(state.token) if reveal_token else mask(state.token))
    table.add_row("comment_on_pull_requests", _value(state.comment_on_pull_requests))
    table.add_row("send_build_status", _value(state.send_build_status))
    table.add_row("commit_status_fail_threshold", _value(state.fail_threshold))
    table.add_row("commit_status_fail_change_threshold", _value(state.fail_change_threshold))
    table.add_row("created_at", _value(state.created_at))
    table.add_row("updated_at", _value(state.updated_at))
    return table


_ACTION_STYLE = {"create": "[green]+ create[/green]", "update": "[yellow]~ update[/yellow]", "delete": "[red]- forget[/red]"}


def _print_plan(changes: list[Change]) -> int:
    pending = [c for c in changes if c.action != "noop"]
    if not pending:
        rprint("[green]No changes.[/green] Repositories match the configuration.")
        return 0
    table = Table(title="Planned changes")
    table.add_column("Action")
    table.add_column("Label", style="cyan")
    table.add_column("Repository")
    table.add_column("Changes", style="dim")
    for change in pending:
        target = change.plan or change.prior
        repo = f"{target.service}:{target.name}" if target else "—"
        table.add_row(_ACTION_STYLE[change.action], change.label, escape(repo), ", ".join(change.changed_fields()))
    rprint(table)
    return len(pending)


def _refresh_and_plan(config: Path, state: Path) -> tuple[CoverallsProvider, list[Change], dict, bool]:
    doc = _load_config(config)
    try:
        desired = desired_from_config(doc)
    except ConfigurationError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)
    prior = _load_state(state)
    provider = get_provider(doc)
    refreshed, diagnostics = refresh(provider.repository_resource(), prior)
    failed = _print_diagnostics(diagnostics)
    return provider, plan_changes(desired, refreshed), refreshed, failed


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("show")
def show(
    service: Annotated[str, typer.Argument(help="Git provider, e.g. github")],
    name: Annotated[str, typer.Argument(help="Repository in the form owner/name")],
    config: ConfigOpt = DEFAULT_CONFIG,
    reveal_token: Annotated[bool, typer.Option("--reveal-token", help="Print the repository token")] = False,
) -> None:
    """Look up a repository without managing it."""
    provider = get_provider(_load_config(config))
    try:
        response = provider.repository_data_source().read(service, name)
    finally:
        provider.close()
    if _print_diagnostics([(None, d) for d in response.diagnostics]) or response.state is None:
        raise typer.Exit(1)
    rprint(_state_table(f"{service}:{name}", response.state, reveal_token))


@app.command("import")
def import_cmd(
    identifier: Annotated[str, typer.Argument(help="Repository id, e.g. github:owner/name")],
    label: Annotated[str | None, typer.Option("--as", help="Label to store it under (default: the id)")] = None,
    config: ConfigOpt = DEFAULT_CONFIG,
    state: StateOpt = DEFAULT_STATE,
) -> None:
    """Start tracking an existing repository."""
    states = _load_state(state)
    provider = get_provider(_load_config(config))
    try:
        response = provider.repository_resource().import_state(identifier)
    finally:
        provider.close()
    if _print_diagnostics([(label, d) for d in response.diagnostics]) or response.state is None:
        raise typer.Exit(1)

    states[label or identifier] = response.state
    save_state(state, states)
    rprint(f"[green]✓[/green] Imported {escape(identifier)} into {state}")


@app.command("plan")
def plan_cmd(config: ConfigOpt = DEFAULT_CONFIG, state: StateOpt = DEFAULT_STATE) -> None:
    """Refresh state and show what apply would change."""
    provider, changes, _refreshed, failed = _refresh_and_plan(config, state)
    provider.close()
    _print_plan(changes)
    if failed:
        raise typer.Exit(1)


@app.command("apply")
def apply_cmd(config: ConfigOpt = DEFAULT_CONFIG, state: StateOpt = DEFAULT_STATE) -> None:
    """Create or update repositories to match the configuration and save state."""
    provider, changes, refreshed, failed = _refresh_and_plan(config, state)
    try:
        if not _print_plan(changes):
            save_state(state, refreshed)
            if failed:
                raise typer.Exit(1)
            return
        new_state, diagnostics = apply_changes(provider.repository_resource(), changes, refreshed)
    finally:
        provider.close()

    save_state(state, new_state)
    if _print_diagnostics(diagnostics) or failed:
        raise typer.Exit(1)
    rprint(f"[green]✓[/green] Applied. State written to {state}")


@app.command("config-show")
def config_show(config: ConfigOpt = DEFAULT_CONFIG) -> None:
    """Show resolved provider configuration (masks credentials)."""
    try:
        settings = get_settings(config=_load_config(config))
    except ConfigurationError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Coveralls provider configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("endpoint", settings.endpoint)
    table.add_row("api_token", mask(settings.api_token.get_secret_value() if settings.api_token else None))
    table.add_row("timeout", f"{settings.timeout:g}s")
    rprint(table)
