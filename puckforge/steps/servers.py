"""
Server configuration steps: collect the operator's values and write one
JSON document per instance.
"""

import logging

from .base import Step
from ..context import ProvisioningContext
from ..exceptions import ProvisioningError
from ..rendering import build_server_configs, render_server_config

logger = logging.getLogger(__name__)


class CollectServerSettings(Step):
    name = "Server settings"
    description = "Collecting server configuration"

    def apply(self, context: ProvisioningContext) -> None:
        context.operator_input = context.provider.collect_operator_input()


class RenderServerConfigs(Step):
    name = "Server configuration files"
    description = "Creating server configuration files"

    def apply(self, context: ProvisioningContext) -> None:
        if context.operator_input is None:
            raise ProvisioningError("Server settings have not been collected")

        settings = context.settings
        configs = build_server_configs(context.operator_input, settings.base_port)

        for instance, server_config in configs.items():
            path = settings.install_dir / f"{instance}.json"
            context.runner.write_file(path, render_server_config(server_config))
            context.accounts.chown(path, settings.service_user)
            context.written_files.append(path)
            logger.info(f"Wrote {path} for '{server_config.name}' (ports {server_config.port}/{server_config.ping_port})")
