"""
SteamCMD client.

Thin wrapper that builds SteamCMD command lines and maps a failed run
onto InstallError.
"""

import logging
from pathlib import Path
from typing import List

from .system import CommandRunner
from ..constants import STEAM_ANONYMOUS_LOGIN, STEAMCMD_PATH
from ..exceptions import InstallError

logger = logging.getLogger(__name__)


class SteamCMD:
    """Runs SteamCMD with an anonymous login."""

    def __init__(self, runner: CommandRunner, binary: Path = Path(STEAMCMD_PATH)) -> None:
        self.runner = runner
        self.binary = Path(binary)

    def build_app_update_args(self, app_id: int, install_dir: Path, validate: bool = False) -> List[str]:
        """Build the argument list for installing or updating an app."""
        args = [
            str(self.binary),
            "+force_install_dir", str(install_dir),
            "+login", STEAM_ANONYMOUS_LOGIN,
            "+app_update", str(app_id),
        ]
        if validate:
            args.append("validate")
        args.append("+quit")
        return args

    def app_update(self, app_id: int, install_dir: Path, validate: bool = False) -> None:
        """Install or update an app into install_dir."""
        logger.info(f"Fetching app {app_id} into {install_dir}; this may take a few minutes")
        self.runner.run(
            self.build_app_update_args(app_id, install_dir, validate),
            error_cls=InstallError,
            error_message=f"SteamCMD failed to install app {app_id}",
        )
