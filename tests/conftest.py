import logging
import os
import tempfile
from pathlib import Path

import pytest

# Keep the global Config away from the real user directories
_STATE_DIR = tempfile.mkdtemp(prefix="puckforge-tests-")
os.environ.setdefault("PUCKFORGE_CONFIG_DIR", os.path.join(_STATE_DIR, "config"))
os.environ.setdefault("PUCKFORGE_DATA_DIR", os.path.join(_STATE_DIR, "data"))

from puckforge.context import ProvisioningContext, ProvisioningSettings  # noqa: E402
from puckforge.exceptions import CommandError  # noqa: E402
from puckforge.models import OperatorInput  # noqa: E402
from puckforge.prompts import StaticConfigProvider  # noqa: E402
from puckforge.utils.system import CommandRunner  # noqa: E402


class RecordingRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them.

    File writes still happen, so tests point every path at tmp_path.
    ``failures`` maps an executable name to the exit status it should fail with.
    """

    def __init__(self, failures=None):
        super().__init__(dry_run=False)
        self.commands = []
        self.inputs = []
        self.failures = failures or {}

    def run(self, args, *, input_text=None, env=None, capture_output=False,
            error_cls=CommandError, error_message=None):
        command = [str(arg) for arg in args]
        self.commands.append(command)
        self.inputs.append(input_text)

        returncode = self.failures.get(Path(command[0]).name)
        if returncode:
            message = error_message or "Command failed"
            raise error_cls(f"{message}: {' '.join(command)}", command=command, returncode=returncode)

        return None

    def executables(self):
        return [Path(command[0]).name for command in self.commands]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def operator_input():
    return OperatorInput(
        server1_name="Alpha",
        server2_name="Beta",
        admin_steam_id="76561198000000000",
        password="",
    )


@pytest.fixture
def settings(tmp_path):
    proc_swaps = tmp_path / "proc_swaps"
    proc_swaps.write_text("Filename\t\t\t\tType\t\tSize\t\tUsed\t\tPriority\n")
    unit_dir = tmp_path / "systemd"
    unit_dir.mkdir()
    return ProvisioningSettings(
        install_dir=tmp_path / "srv" / "puckserver",
        service_user="puck",
        server_executable="start_server.sh",
        steamcmd_path=Path("/usr/games/steamcmd"),
        app_id=3481440,
        validate_install=False,
        swap_enabled=True,
        swap_path=tmp_path / "swapfile",
        swap_size_mb=500,
        fstab_path=tmp_path / "fstab",
        unit_name="puck",
        unit_directory=unit_dir,
        base_port=7777,
        monitoring_package="btop",
        proc_swaps_path=proc_swaps,
    )


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def make_context(settings, operator_input):
    def _make(runner, install_monitoring=False):
        provider = StaticConfigProvider(operator_input, install_monitoring=install_monitoring)
        return ProvisioningContext(settings=settings, runner=runner, provider=provider)
    return _make
