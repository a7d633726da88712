"""azdep CLI: all commands."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.table import Table

from azdep.capabilities.registry import CapabilityRegistry
from azdep.errors import AzdepError
from azdep.log import configure_logging
from azdep.orchestrator import Orchestrator
from azdep.pipeline import UpdatePipeline
from azdep.policy import parse_update_config, translate
from azdep.providers.azure import AzureDevOpsProvider
from azdep.settings import AZURE_HOST, get_settings, select_credential
from azdep.tickets import TicketManager

app = typer.Typer(help="azdep: Dependabot-style dependency updates for Azure DevOps", no_args_is_help=True)

logger = logging.getLogger(__name__)

OrganisationOpt = Annotated[
    str | None,
    typer.Option("--organisation", "-o", help="Organisation / profile name from ~/.config/azdep/config.toml"),
]


def _parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not a YYYY-MM-DD date") from None


DateOpt = Annotated[
    str | None,
    typer.Option("--date", help="Evaluate update schedules as of this date (YYYY-MM-DD). Defaults to today."),
]


@app.command("run")
def run(organisation: OrganisationOpt = None, on: DateOpt = None) -> None:
    """Check every repository in the organisation and open dependency update pull requests."""
    today = _parse_date(on)
    settings = get_settings(organisation=organisation)
    configure_logging(settings.log_level)

    credentials = settings.credential_list()
    provider = AzureDevOpsProvider(
        settings.organisation,
        select_credential(credentials, AZURE_HOST),
        endpoint=settings.endpoint,
        timeout=settings.timeout,
        retries=settings.retries,
    )
    registry = CapabilityRegistry.from_entry_points(credentials)
    if not registry.installed():
        logger.warning("No update capabilities installed; only configuration checks will succeed")

    orchestrator = Orchestrator(
        provider,
        UpdatePipeline(provider, registry),
        TicketManager(provider),
        today=today,
    )
    try:
        failures = orchestrator.run()
    finally:
        provider.close()

    if failures:
        logger.warning(f"{settings.organisation} => {failures} repositories failed processing")


@app.command("validate")
def validate(
    path: Annotated[Path, typer.Argument(help="Path to a .dependabot/config.yml file")] = Path(".dependabot/config.yml"),
    on: DateOpt = None,
) -> None:
    """Validate a local Dependabot configuration file and show the resulting update policies."""
    today = _parse_date(on) or date.today()
    if not path.exists():
        rprint(f"[red]{path} does not exist[/red]")
        raise typer.Exit(1)

    try:
        config = parse_update_config(path.read_text())
        policies = [translate(entry, today) for entry in config.update_configs]
    except AzdepError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    table = Table(title=f"{path} ({today.isoformat()})")
    table.add_column("Package manager", style="cyan")
    table.add_column("Directory")
    table.add_column("Runs today")
    table.add_column("Ignored")
    table.add_column("Automerged")

    for policy in policies:
        table.add_row(
            policy.package_manager.value,
            policy.directory,
            "yes" if policy.runs_today else "no",
            ", ".join(sorted(policy.ignore_names)) or "—",
            ", ".join(sorted(policy.automerge_names)) or "—",
        )

    rprint(table)


@app.command("capabilities")
def capabilities() -> None:
    """List installed update capability plugins."""
    installed = CapabilityRegistry.from_entry_points([]).installed()
    if not installed:
        rprint("[yellow]No update capabilities installed.[/yellow]")
        return

    table = Table(title="Update capabilities")
    table.add_column("Package manager", style="cyan")
    for package_manager in installed:
        table.add_row(package_manager.value)
    rprint(table)


@app.command("config-show")
def config_show(organisation: OrganisationOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    try:
        settings = get_settings(organisation=organisation)
    except (SystemExit, typer.Exit):
        return

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    table = Table(title="azdep Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("organisation", settings.organisation or "[dim](not set)[/dim]")
    table.add_row("endpoint", settings.endpoint)
    table.add_row("username", settings.username)
    table.add_row("credentials", mask(settings.credentials.get_secret_value() if settings.credentials else None))
    table.add_row("timeout", str(settings.timeout))
    table.add_row("retries", str(settings.retries))
    table.add_row("log_level", settings.log_level)

    rprint(table)
