"""
Service account, systemd unit and optional monitoring tool steps.
"""

import logging

from .base import Step
from ..context import ProvisioningContext
from ..rendering import render_service_unit

logger = logging.getLogger(__name__)


class CreateServiceAccount(Step):
    name = "Service account"
    description = "Creating service user and setting permissions"

    def apply(self, context: ProvisioningContext) -> None:
        settings = context.settings
        accounts = context.accounts
        context.service_user_created = accounts.ensure_system_user(settings.service_user)
        accounts.chown(settings.install_dir, settings.service_user, recursive=True)


class InstallServiceUnit(Step):
    name = "systemd unit"
    description = "Creating systemd service"

    def apply(self, context: ProvisioningContext) -> None:
        settings = context.settings
        content = render_service_unit(
            settings.install_dir,
            settings.service_user,
            settings.server_executable,
        )
        systemd = context.systemd
        unit_path = systemd.install_template_unit(settings.unit_name, content)
        context.written_files.append(unit_path)
        systemd.daemon_reload()


class InstallMonitoringTool(Step):
    name = "Monitoring tool"
    description = "Optional - Install a system monitoring tool"

    def apply(self, context: ProvisioningContext) -> None:
        package = context.settings.monitoring_package
        if not context.provider.ask_yes_no(f"Would you like to install {package}?"):
            logger.info(f"{package} installation skipped")
            return

        context.apt.install(package)
        context.monitoring_installed = True
        logger.info(f"{package} installed")
