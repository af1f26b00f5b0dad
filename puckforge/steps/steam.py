"""
SteamCMD installation and game server download steps.
"""

import logging

from .base import Step
from ..constants import STEAM_DEBCONF_SELECTIONS, STEAMCMD_PACKAGE
from ..context import ProvisioningContext

logger = logging.getLogger(__name__)


class InstallSteamCMD(Step):
    name = "SteamCMD"
    description = "Installing SteamCMD"

    def apply(self, context: ProvisioningContext) -> None:
        apt = context.apt
        apt.update()
        # Accept the Steam license up front so apt does not stop to ask
        apt.preseed(STEAM_DEBCONF_SELECTIONS)
        apt.install(STEAMCMD_PACKAGE)


class FetchGameServer(Step):
    name = "Game server download"
    description = "Installing Puck server via SteamCMD"

    def apply(self, context: ProvisioningContext) -> None:
        settings = context.settings
        context.steamcmd.app_update(
            settings.app_id,
            settings.install_dir,
            validate=settings.validate_install,
        )
        logger.info("Puck server installed successfully")
