"""
Command Line Interface for PuckForge.

This module provides the main CLI interface using Click framework
for provisioning and inspecting Puck dedicated server hosts.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config.logging_config import setup_logging
from .config.settings import config
from .context import ProvisioningContext, ProvisioningSettings
from .exceptions import PuckForgeError
from .prompts import build_provider
from .rendering import build_server_configs, instance_specs, render_server_config, render_service_unit
from .steps.base import Step
from .utils.system import CommandRunner, SystemInfo
from .workflow import ProvisioningWorkflow, summarize

console = Console()
logger = logging.getLogger(__name__)


def _fail(error: PuckForgeError) -> None:
    """Report a PuckForge error and exit with its status."""
    logger.debug("Aborting", exc_info=True)
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(error.exit_code)


def _load_settings(**overrides) -> ProvisioningSettings:
    try:
        return ProvisioningSettings.from_config(config, **overrides)
    except PuckForgeError as e:
        _fail(e)


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.version_option(version=__version__, prog_name="puckforge")
def main(debug: bool, no_color: bool) -> None:
    """PuckForge - Provision a Linux host for two Puck dedicated servers."""

    # Setup logging
    log_level = "DEBUG" if debug else config.get("logging.level", "INFO")
    enable_rich = not no_color and config.get("ui.colored_output", True)
    setup_logging(log_level=log_level, enable_rich_logging=enable_rich)

    # Check system compatibility
    if not SystemInfo.is_supported_platform():
        console.print("[red]Error: This tool only supports Linux.[/red]")
        sys.exit(1)


@main.command()
@click.option('--answers', '-a', type=click.Path(exists=True, dir_okay=False),
              help='YAML answers file for an unattended install')
@click.option('--install-dir', '-d', type=click.Path(), help='Installation directory (default: /srv/puckserver)')
@click.option('--skip-swap', is_flag=True, help='Do not create a swapfile')
@click.option('--validate', 'validate_install', is_flag=True, help='Ask SteamCMD to validate the installed files')
@click.option('--dry-run', is_flag=True, help='Log every command and file write without performing it')
@click.option('--yes', '-y', 'assume_yes', is_flag=True, help='Do not ask for confirmation before starting')
def install(
    answers: Optional[str],
    install_dir: Optional[str],
    skip_swap: bool,
    validate_install: bool,
    dry_run: bool,
    assume_yes: bool,
) -> None:
    """Install SteamCMD, the Puck server and two systemd-managed instances."""

    console.print("[bold blue]=== Puck Server Installation ===[/bold blue]")

    settings = _load_settings(
        install_dir=install_dir,
        swap_enabled=False if skip_swap else None,
        validate_install=True if validate_install else None,
    )

    try:
        provider = build_provider(answers)
    except PuckForgeError as e:
        _fail(e)

    # Show installation info
    info_table = Table(title="Puck Server Installation")
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")

    info_table.add_row("Install Directory", str(settings.install_dir))
    info_table.add_row("Service User", settings.service_user)
    info_table.add_row("Steam App ID", str(settings.app_id))
    info_table.add_row("Swapfile", f"{settings.swap_path} ({settings.swap_size_mb} MB)" if settings.swap_enabled else "Skipped")
    info_table.add_row("Service Unit", str(settings.unit_directory / f"{settings.unit_name}@.service"))
    for spec in instance_specs(settings.base_port):
        info_table.add_row(spec.name, f"ports {spec.port}/{spec.ping_port}")
    if dry_run:
        info_table.add_row("Mode", "Dry run")

    console.print(info_table)
    console.print()

    if not assume_yes and not click.confirm("Proceed with installation?"):
        sys.exit(0)

    context = ProvisioningContext(
        settings=settings,
        runner=CommandRunner(dry_run=dry_run),
        provider=provider,
    )

    def announce(index: int, total: int, step: Step) -> None:
        console.print()
        console.print(f"[bold]Step {index}/{total}: {step.description}...[/bold]")

    try:
        ProvisioningWorkflow().run(context, on_step=announce)
    except PuckForgeError as e:
        console.print("[red]Installation failed. Check logs for details.[/red]")
        _fail(e)
    except (KeyboardInterrupt, click.Abort):
        console.print("\n[yellow]Installation interrupted; the host may be partially provisioned.[/yellow]")
        sys.exit(130)

    console.print()
    console.print(Panel(
        escape("\n".join(summarize(context))) + "\n\nSee you on the ice!",
        title="Installation Complete",
        border_style="green"
    ))


@main.command()
@click.option('--output', '-o', type=click.Path(file_okay=False), required=True,
              help='Directory to write server1.json and server2.json to')
@click.option('--answers', '-a', type=click.Path(exists=True, dir_okay=False),
              help='YAML answers file instead of interactive prompts')
@click.option('--base-port', '-p', type=int, help='Port of the first server (default: 7777)')
def render(output: str, answers: Optional[str], base_port: Optional[int]) -> None:
    """Render the two server configuration files without provisioning."""

    settings = _load_settings(base_port=base_port)

    try:
        provider = build_provider(answers)
        operator_input = provider.collect_operator_input()
    except PuckForgeError as e:
        _fail(e)

    output_dir = Path(output)
    output_dir.mkdir(parents=True, exist_ok=True)

    configs = build_server_configs(operator_input, settings.base_port)
    for instance, server_config in configs.items():
        path = output_dir / f"{instance}.json"
        path.write_text(render_server_config(server_config), encoding="utf-8")
        console.print(f"[green]Wrote {path}[/green] ({escape(server_config.name)}, ports {server_config.port}/{server_config.ping_port})")


@main.command()
@click.option('--install-dir', '-d', type=click.Path(), help='Installation directory (default: /srv/puckserver)')
def unit(install_dir: Optional[str]) -> None:
    """Print the systemd template unit that would be installed."""

    settings = _load_settings(install_dir=install_dir)
    click.echo(render_service_unit(settings.install_dir, settings.service_user, settings.server_executable), nl=False)


@main.command()
def system() -> None:
    """Display system information and configuration."""

    sys_info = SystemInfo.get_os_info()

    sys_table = Table(title="System Information")
    sys_table.add_column("Property", style="cyan")
    sys_table.add_column("Value", style="green")

    sys_table.add_row("Operating System", f"{sys_info['system']} {sys_info['release']}")
    sys_table.add_row("Distribution", sys_info["distribution"])
    sys_table.add_row("Architecture", sys_info["machine"])
    sys_table.add_row("Python Version", f"{sys.version.split()[0]}")
    sys_table.add_row("Running as root", "Yes" if SystemInfo.is_root() else "No")
    sys_table.add_row("Active swap", ", ".join(SystemInfo.get_active_swaps()) or "None")

    steamcmd_path = Path(config.get("steam.steamcmd_path"))
    sys_table.add_row("SteamCMD", str(steamcmd_path) if steamcmd_path.exists() else "Not installed")
    sys_table.add_row("systemctl", SystemInfo.find_executable("systemctl") or "Not found")

    console.print(sys_table)
    console.print()

    config_table = Table(title="Configuration")
    config_table.add_column("Setting", style="cyan")
    config_table.add_column("Value", style="green")

    config_table.add_row("Install Directory", str(config.get("install.directory")))
    config_table.add_row("Service User", str(config.get("install.service_user")))
    config_table.add_row("Steam App ID", str(config.get("steam.app_id")))
    config_table.add_row("Swapfile", f"{config.get('swap.path')} ({config.get('swap.size_mb')} MB)")
    config_table.add_row("Unit Name", f"{config.get('systemd.unit_name')}@.service")
    config_table.add_row("Base Port", str(config.get("servers.base_port")))
    config_table.add_row("Log Directory", str(config.get_log_directory()))

    console.print(config_table)


@main.command()
@click.option('--reset', is_flag=True, help='Reset configuration to defaults')
def config_cmd(reset: bool) -> None:
    """Manage configuration settings."""

    if reset:
        if click.confirm("Are you sure you want to reset configuration to defaults?"):
            config.reset_to_defaults()
            console.print("[green]Configuration reset to defaults.[/green]")
        return

    console.print(f"[blue]Configuration file: {config.config_file}[/blue]")
    console.print("Use --reset to reset to defaults or edit the file directly.")


if __name__ == "__main__":
    main()
