"""
Rendering of the files PuckForge installs.

Server configuration documents are built from one shared template and
serialized with the json encoder, so names and passwords are escaped
correctly whatever the operator typed. The systemd template unit is a
plain text template.
"""

import json
from pathlib import Path
from typing import Dict, List

from .constants import DEFAULT_BASE_PORT, DEFAULT_INSTANCE_COUNT, PORT_STRIDE
from .models import InstanceSpec, OperatorInput, ServerConfig

SERVICE_UNIT_TEMPLATE = """\
[Unit]
Description=Puck Server

[Service]
WorkingDirectory={install_dir}
User={service_user}
ExecStart={install_dir}/{executable} --serverConfigurationPath %i.json
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""


def instance_specs(base_port: int = DEFAULT_BASE_PORT, count: int = DEFAULT_INSTANCE_COUNT) -> List[InstanceSpec]:
    """Allocate names and port pairs for each server instance.

    Instance n listens on base_port + 2 * (n - 1) and answers pings on the
    port right after it.
    """
    specs = []
    for index in range(count):
        port = base_port + PORT_STRIDE * index
        specs.append(InstanceSpec(name=f"server{index + 1}", port=port, ping_port=port + 1))
    return specs


def build_server_configs(
    operator_input: OperatorInput,
    base_port: int = DEFAULT_BASE_PORT,
) -> Dict[str, ServerConfig]:
    """Build the per-instance configurations, keyed by instance name."""
    template = ServerConfig(
        port=base_port,
        ping_port=base_port + 1,
        name="",
        password=operator_input.password,
        admin_steam_ids=[operator_input.admin_steam_id],
    )

    specs = instance_specs(base_port, count=len(operator_input.server_names))
    configs = {}
    for spec, name in zip(specs, operator_input.server_names):
        configs[spec.name] = template.model_copy(
            update={"port": spec.port, "ping_port": spec.ping_port, "name": name},
            deep=True,
        )
    return configs


def render_server_config(server_config: ServerConfig) -> str:
    """Serialize a configuration document deterministically."""
    return json.dumps(server_config.to_document(), indent=2, ensure_ascii=False) + "\n"


def render_service_unit(install_dir: Path, service_user: str, executable: str) -> str:
    """Render the systemd template unit; %i selects the instance's JSON file."""
    return SERVICE_UNIT_TEMPLATE.format(
        install_dir=install_dir,
        service_user=service_user,
        executable=executable,
    )
