"""
Provisioning settings and run context.

ProvisioningSettings is the typed view of the configuration file plus CLI
overrides. ProvisioningContext is handed to every step; it carries the
collaborators steps act through and the results earlier steps produced.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config.settings import Config
from .constants import PROC_SWAPS_PATH
from .models import OperatorInput
from .prompts import ConfigProvider
from .utils.system import (
    AccountManager, AptManager, CommandRunner, SwapManager, SystemdManager
)
from .utils.steamcmd import SteamCMD
from .utils.validation import ProvisioningValidator


@dataclass
class ProvisioningSettings:
    """Everything the steps need to know about the target layout."""

    install_dir: Path
    service_user: str
    server_executable: str
    steamcmd_path: Path
    app_id: int
    validate_install: bool
    swap_enabled: bool
    swap_path: Path
    swap_size_mb: int
    fstab_path: Path
    unit_name: str
    unit_directory: Path
    base_port: int
    monitoring_package: str
    proc_swaps_path: Path = Path(PROC_SWAPS_PATH)

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "ProvisioningSettings":
        """Build settings from the configuration, applying non-None overrides."""
        values: Dict[str, Any] = {
            "install_dir": config.get("install.directory"),
            "service_user": config.get("install.service_user"),
            "server_executable": config.get("install.server_executable"),
            "steamcmd_path": config.get("steam.steamcmd_path"),
            "app_id": config.get("steam.app_id"),
            "validate_install": config.get("steam.validate", False),
            "swap_enabled": config.get("swap.enabled", True),
            "swap_path": config.get("swap.path"),
            "swap_size_mb": config.get("swap.size_mb"),
            "fstab_path": config.get("swap.fstab_path"),
            "unit_name": config.get("systemd.unit_name"),
            "unit_directory": config.get("systemd.unit_directory"),
            "base_port": config.get("servers.base_port"),
            "monitoring_package": config.get("monitoring.package"),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        return cls(
            install_dir=ProvisioningValidator.validate_absolute_path(values["install_dir"], "Install directory"),
            service_user=ProvisioningValidator.validate_service_user(values["service_user"]),
            server_executable=str(values["server_executable"]),
            steamcmd_path=Path(values["steamcmd_path"]),
            app_id=int(values["app_id"]),
            validate_install=bool(values["validate_install"]),
            swap_enabled=bool(values["swap_enabled"]),
            swap_path=ProvisioningValidator.validate_absolute_path(values["swap_path"], "Swap path"),
            swap_size_mb=ProvisioningValidator.validate_swap_size(values["swap_size_mb"]),
            fstab_path=Path(values["fstab_path"]),
            unit_name=str(values["unit_name"]),
            unit_directory=Path(values["unit_directory"]),
            base_port=ProvisioningValidator.validate_port(values["base_port"]),
            monitoring_package=str(values["monitoring_package"]),
            proc_swaps_path=Path(values.get("proc_swaps_path", PROC_SWAPS_PATH)),
        )


@dataclass
class ProvisioningContext:
    """State shared by the steps of one provisioning run."""

    settings: ProvisioningSettings
    runner: CommandRunner
    provider: ConfigProvider
    operator_input: Optional[OperatorInput] = None
    monitoring_installed: bool = False
    swap_created: bool = False
    service_user_created: bool = False
    written_files: List[Path] = field(default_factory=list)
    completed_steps: List[str] = field(default_factory=list)

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    @property
    def apt(self) -> AptManager:
        return AptManager(self.runner)

    @property
    def swap(self) -> SwapManager:
        return SwapManager(
            self.runner,
            self.settings.swap_path,
            self.settings.swap_size_mb,
            fstab_path=self.settings.fstab_path,
            proc_swaps_path=self.settings.proc_swaps_path,
        )

    @property
    def accounts(self) -> AccountManager:
        return AccountManager(self.runner)

    @property
    def systemd(self) -> SystemdManager:
        return SystemdManager(self.runner, self.settings.unit_directory)

    @property
    def steamcmd(self) -> SteamCMD:
        return SteamCMD(self.runner, self.settings.steamcmd_path)
