"""Main CLI entry point for the Flotilla reconciler."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import BaseModel, Field, ConfigDict
from rich.console import Console
from rich.table import Table

from ..core.config import ConfigManager
from ..core.context import ApplicationContext
from ..core.errors import ConfigurationError, FlotillaError, ValidationError
from ..core.log import configure_logging, get_logger
from ..core.specs import StorageFleetSpec, load_fleet_spec
from ..core.types import FlotillaConfig
from ..instances.identity import identity_of
from ..reconcile.report import ReconcileReport
from ..recovery.membership import RecordingCoordinator
from ..substrate.memory import InMemorySubstrate
from ..utils.codec import to_json_string, to_yaml_documents

# Exit codes
EXIT_ERRORS = 1
EXIT_INVALID = 2


class GlobalCliOptions(BaseModel):
    """Global CLI options that can be used across all commands."""

    verbose: int = Field(0, description="Increase verbosity level")
    config_file: Optional[Path] = Field(None, description="Configuration file path")
    log_level: str = Field(
        "WARNING", description="Reconciler logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    model_config = ConfigDict(use_enum_values=True)


app = typer.Typer(
    name="flotilla",
    help="Reconciler for storage node and NFS export gateway fleets",
    no_args_is_help=True,
    rich_markup_mode="markdown",
)
console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase verbosity level"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Reconciler logging level (DEBUG, INFO, WARNING, ERROR) - explicit level",
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
) -> None:
    """Flotilla: keep daemon fleets converged to their declared size."""
    if verbose > 0 and log_level is not None:
        console.print("[red]Error: Cannot specify both --verbose and --log-level[/red]")
        raise typer.Exit(EXIT_ERRORS)

    if log_level is None:
        resolved_log_level = (
            "DEBUG" if verbose >= 2 else "INFO" if verbose == 1 else "WARNING"
        )
    else:
        resolved_log_level = log_level.upper()

    cli_options = GlobalCliOptions(
        verbose=verbose,
        config_file=config_file,
        log_level=resolved_log_level,
    )
    ctx.ensure_object(dict)
    ctx.obj["cli_options"] = cli_options

    configure_logging(
        level=cli_options.log_level, enable_console=True, enable_json=False
    )


def _options(ctx: typer.Context) -> GlobalCliOptions:
    ctx.ensure_object(dict)
    return ctx.obj.get("cli_options") or GlobalCliOptions()


def _load_config(ctx: typer.Context) -> FlotillaConfig:
    options = _options(ctx)
    if options.config_file and not options.config_file.exists():
        raise ConfigurationError(f"Config file not found: {options.config_file}")
    return ConfigManager().load_config(config_file=options.config_file)


def _app_context(ctx: typer.Context, dry_run: bool) -> ApplicationContext:
    config = _load_config(ctx)
    if dry_run:
        return ApplicationContext.create(
            config, substrate=InMemorySubstrate(), membership=RecordingCoordinator()
        )
    return ApplicationContext.create(config)


def _fail_invalid(error: FlotillaError) -> None:
    console.print(f"[red]Error: {error.message}[/red]")
    raise typer.Exit(EXIT_INVALID)


def _print_report(report: ReconcileReport, title: str) -> None:
    table = Table(title=f"{title}: {report.fleet} ({report.role.value})")
    table.add_column("Target", style="cyan")
    table.add_column("Actions", style="green")
    table.add_column("Warnings", style="yellow")
    table.add_column("Error", style="red")
    for outcome in report.outcomes:
        table.add_row(
            outcome.target,
            "\n".join(outcome.actions),
            "\n".join(outcome.warnings),
            outcome.error or "",
        )
    console.print(table)
    console.print(
        f"State: {report.state.value}, desired {report.desired}, current {report.current}"
    )


def _finish(report: ReconcileReport, title: str) -> None:
    _print_report(report, title)
    if report.has_errors:
        console.print(
            f"[red]{len(report.errors)} target(s) failed; re-run to converge[/red]"
        )
        raise typer.Exit(EXIT_ERRORS)


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    import pydantic

    table = Table(title="Flotilla Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_row("Flotilla", __version__)
    table.add_row("pydantic", pydantic.VERSION)
    console.print(table)


@app.command()
def config(ctx: typer.Context) -> None:
    """Show current configuration."""
    try:
        current_config = _load_config(ctx)
    except ConfigurationError as e:
        _fail_invalid(e)
        return

    table = Table(title="Flotilla Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Substrate", current_config.substrate.kind)
    table.add_row("kubectl Path", current_config.substrate.kubectl_path)
    if current_config.substrate.context:
        table.add_row("kubectl Context", current_config.substrate.context)
    table.add_row("Recovery Tool", current_config.recovery.tool)
    table.add_row("Daemon Image", current_config.images.daemon)
    table.add_row("Gateway Image", current_config.images.gateway)
    table.add_row("Launcher Image", current_config.images.launcher)
    table.add_row("Substrate Call Timeout", f"{current_config.timeouts.substrate_call}s")
    table.add_row("Recovery Call Timeout", f"{current_config.timeouts.recovery_call}s")
    table.add_row("Update Existing Workloads", str(current_config.update_existing_workloads))
    table.add_row(
        "Host Paths Require Privileged", str(current_config.hostpath_requires_privileged)
    )
    table.add_row("Log Level", current_config.log_level)
    console.print(table)


@app.command()
def identity(
    ordinals: List[int] = typer.Argument(..., help="Fleet ordinals to name"),
) -> None:
    """Show the instance identity of fleet ordinals."""
    table = Table(title="Instance Identities")
    table.add_column("Ordinal", style="cyan")
    table.add_column("Identity", style="green")
    for ordinal in ordinals:
        if ordinal < 0:
            console.print(f"[red]Error: ordinal must be non-negative: {ordinal}[/red]")
            raise typer.Exit(EXIT_INVALID)
        table.add_row(str(ordinal), identity_of(ordinal))
    console.print(table)


@app.command()
def plan(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="Fleet specification (YAML)"),
    output_format: str = typer.Option("yaml", "--format", help="Output format: yaml or json"),
) -> None:
    """Print the descriptors a reconcile pass would apply."""
    if output_format not in ("yaml", "json"):
        console.print(f"[red]Error: unsupported format: {output_format}[/red]")
        raise typer.Exit(EXIT_INVALID)
    try:
        fleet = load_fleet_spec(spec_file)
        driver = _app_context(ctx, dry_run=True).create_driver()
        resource_sets = driver.desired_resource_sets(fleet)
    except (ValidationError, ConfigurationError) as e:
        _fail_invalid(e)
        return

    manifests = [m for rs in resource_sets for m in rs.to_manifests()]
    if output_format == "json":
        typer.echo(to_json_string(manifests))
    else:
        typer.echo(to_yaml_documents(manifests), nl=False)


@app.command()
def reconcile(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="Fleet specification (YAML)"),
    current: int = typer.Option(0, "--current", min=0, help="Currently deployed instances"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Apply to an in-memory substrate"),
) -> None:
    """Converge a fleet to its declared instance count."""
    try:
        fleet = load_fleet_spec(spec_file)
        driver = _app_context(ctx, dry_run).create_driver()
        report = driver.reconcile(fleet, current_count=current)
    except (ValidationError, ConfigurationError) as e:
        _fail_invalid(e)
        return
    _finish(report, "Reconcile")


@app.command()
def teardown(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="Fleet specification (YAML)"),
    current: int = typer.Option(..., "--current", min=0, help="Currently deployed instances"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Apply to an in-memory substrate"),
) -> None:
    """Remove every instance of a fleet, config artifacts included."""
    try:
        fleet = load_fleet_spec(spec_file)
        driver = _app_context(ctx, dry_run).create_driver()
        report = driver.teardown(fleet, current_count=current)
    except (ValidationError, ConfigurationError) as e:
        _fail_invalid(e)
        return
    _finish(report, "Teardown")


@app.command()
def provision(
    ctx: typer.Context,
    spec_file: Path = typer.Argument(..., help="Storage fleet specification (YAML)"),
    nodes: List[str] = typer.Argument(..., help="Nodes to prepare"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Apply to an in-memory substrate"),
) -> None:
    """Run the media provisioning job on storage nodes."""
    try:
        fleet = load_fleet_spec(spec_file)
        if not isinstance(fleet, StorageFleetSpec):
            raise ValidationError("Provisioning applies to storage fleets only")
        driver = _app_context(ctx, dry_run).create_driver()
        report = driver.provision(fleet, nodes)
    except (ValidationError, ConfigurationError) as e:
        _fail_invalid(e)
        return
    _finish(report, "Provision")


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except (FlotillaError, RuntimeError, OSError, ValueError) as e:
        logger.error("Unexpected error: %s", e)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(EXIT_ERRORS)


if __name__ == "__main__":
    cli_main()
