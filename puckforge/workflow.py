"""
Provisioning workflow for PuckForge.

The workflow runs an ordered list of steps and stops at the first one
that fails. Nothing is rolled back: a failed run leaves the host as the
completed steps left it.
"""

import logging
from typing import Callable, List, Optional, Sequence

import click

from .context import ProvisioningContext
from .exceptions import ProvisioningError, PuckForgeError
from .rendering import instance_specs
from .steps.base import Step
from .steps.host import (
    CreateInstallDirectory, EnableExtraRepositories, PrivilegeCheck,
    ProvisionSwap, UpgradeSystemPackages
)
from .steps.servers import CollectServerSettings, RenderServerConfigs
from .steps.service import CreateServiceAccount, InstallMonitoringTool, InstallServiceUnit
from .steps.steam import FetchGameServer, InstallSteamCMD
from .utils.system import SystemdManager

logger = logging.getLogger(__name__)

StepCallback = Callable[[int, int, Step], None]


def default_steps() -> List[Step]:
    """Return the standard installation steps in execution order."""
    return [
        PrivilegeCheck(),
        CreateInstallDirectory(),
        UpgradeSystemPackages(),
        ProvisionSwap(),
        EnableExtraRepositories(),
        InstallSteamCMD(),
        FetchGameServer(),
        CreateServiceAccount(),
        InstallServiceUnit(),
        InstallMonitoringTool(),
        CollectServerSettings(),
        RenderServerConfigs(),
    ]


class ProvisioningWorkflow:
    """Runs provisioning steps in order, halting on the first failure."""

    def __init__(self, steps: Optional[Sequence[Step]] = None) -> None:
        self.steps: List[Step] = list(steps) if steps is not None else default_steps()

    def run(self, context: ProvisioningContext, on_step: Optional[StepCallback] = None) -> ProvisioningContext:
        """Apply every step to the context."""
        total = len(self.steps)
        logger.info(f"Provisioning Puck servers into {context.settings.install_dir}")

        for index, step in enumerate(self.steps, start=1):
            if on_step is not None:
                on_step(index, total, step)

            logger.debug(f"Starting step {index}/{total}: {step.name}")
            try:
                step.apply(context)
            except PuckForgeError as e:
                logger.error(f"Installation failed at step '{step.name}': {e}")
                raise
            except click.Abort:
                # Interrupted at a prompt
                logger.warning(f"Installation interrupted at step '{step.name}'")
                raise
            except Exception as e:
                error_msg = f"Installation failed at step '{step.name}': {e}"
                logger.error(error_msg)
                raise ProvisioningError(error_msg, cause=e) from e

            context.completed_steps.append(step.name)
            logger.debug(f"Completed step: {step.name}")

        logger.info("Provisioning complete")
        return context


def summarize(context: ProvisioningContext) -> List[str]:
    """Describe what was created and how to run the servers."""
    settings = context.settings
    operator_input = context.operator_input
    lines: List[str] = ["Server configurations created:"]

    if operator_input is not None:
        specs = instance_specs(settings.base_port, count=len(operator_input.server_names))
        for number, (spec, name) in enumerate(zip(specs, operator_input.server_names), start=1):
            lines.append(f"- Server {number}: {name} (ports {spec.port}/{spec.ping_port})")
        lines.append(f"- Admin Steam ID: {operator_input.admin_steam_id}")
        lines.append(f"- Password: {'Set' if operator_input.has_password else 'None (public servers)'}")
    else:
        specs = instance_specs(settings.base_port)

    units = [SystemdManager.instance_unit(settings.unit_name, spec.name) for spec in specs]

    lines += ["", "To start your servers:"]
    lines += [f"systemctl start {unit}" for unit in units]
    lines += ["", "To check status:"]
    lines += [f"systemctl status {unit}" for unit in units]
    lines += [
        "",
        "Optional: You may want to reboot the system to apply all updates.",
        "Use: systemctl reboot and start the servers again.",
    ]
    return lines
