"""
Host preparation steps: privileges, directories, packages, swap and
repositories.
"""

import logging

from .base import Step
from ..constants import BASE_PACKAGES, EXTRA_ARCHITECTURE, EXTRA_REPOSITORY
from ..context import ProvisioningContext
from ..exceptions import PrivilegeError
from ..utils.system import SystemInfo

logger = logging.getLogger(__name__)


class PrivilegeCheck(Step):
    name = "Privilege check"
    description = "Checking that the installer runs as root"

    def apply(self, context: ProvisioningContext) -> None:
        if SystemInfo.is_root():
            return

        if context.dry_run:
            logger.warning("Not running as root; continuing because this is a dry run")
            return

        raise PrivilegeError("This installer must be run as root (use sudo)")


class CreateInstallDirectory(Step):
    name = "Installation directory"
    description = "Creating installation directories"

    def apply(self, context: ProvisioningContext) -> None:
        context.runner.make_directory(context.settings.install_dir)
        logger.info(f"Installation directory ready at {context.settings.install_dir}")


class UpgradeSystemPackages(Step):
    name = "System packages"
    description = "Updating system and installing dependencies"

    def apply(self, context: ProvisioningContext) -> None:
        apt = context.apt
        apt.update()
        apt.upgrade()
        apt.install(*BASE_PACKAGES)


class ProvisionSwap(Step):
    name = "Swapfile"
    description = "Creating swapfile"

    def apply(self, context: ProvisioningContext) -> None:
        settings = context.settings
        if not settings.swap_enabled:
            logger.info("Swap provisioning disabled, skipping")
            return

        logger.info(f"Creating {settings.swap_size_mb}MB swapfile at {settings.swap_path}")
        context.swap_created = context.swap.provision()


class EnableExtraRepositories(Step):
    name = "Repositories"
    description = f"Adding {EXTRA_REPOSITORY} repository and {EXTRA_ARCHITECTURE} architecture"

    def apply(self, context: ProvisioningContext) -> None:
        apt = context.apt
        apt.add_repository(EXTRA_REPOSITORY)
        apt.add_architecture(EXTRA_ARCHITECTURE)
