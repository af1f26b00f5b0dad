"""
System utilities for host provisioning.

This module provides utilities for detecting the operating system and
wrappers around the external tools the installer drives: apt/dpkg,
swap utilities, user management and systemd. All host mutations go
through a CommandRunner so that a dry run can log them instead.
"""

import logging
import os
import platform
import pwd
import re
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type

from ..constants import (
    DEFAULT_DIR_MODE, FSTAB_PATH, PROC_SWAPS_PATH, SWAP_FILE_MODE,
    SYSTEMD_UNIT_DIRECTORY
)
from ..exceptions import CommandError, DependencyInstallError

logger = logging.getLogger(__name__)

# /proc/swaps and fstab write whitespace in paths as octal escapes, e.g. "\040"
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def unescape_mount_field(field: str) -> str:
    """Decode the octal escapes the kernel uses in mount and swap tables."""
    return _OCTAL_ESCAPE.sub(lambda match: chr(int(match.group(1), 8)), field)


def escape_mount_field(field: str) -> str:
    """Encode whitespace and backslashes the way fstab expects them."""
    return "".join(
        f"\\{ord(char):03o}" if char in " \t\n\\" else char
        for char in field
    )


class SystemInfo:
    """Provides information about the current system."""

    @staticmethod
    def get_platform() -> str:
        """Get the current platform (linux, darwin, windows)."""
        return platform.system().lower()

    @staticmethod
    def is_supported_platform() -> bool:
        """Check if the current platform is supported."""
        return SystemInfo.get_platform() == "linux"

    @staticmethod
    def get_architecture() -> str:
        """Get the system architecture."""
        return platform.machine()

    @staticmethod
    def get_distribution() -> str:
        """Get the Linux distribution name from os-release."""
        try:
            os_release = platform.freedesktop_os_release()
        except OSError:
            return "Unknown"
        return os_release.get("PRETTY_NAME") or os_release.get("NAME", "Unknown")

    @staticmethod
    def get_os_info() -> Dict[str, str]:
        """Get detailed OS information."""
        return {
            "system": platform.system(),
            "release": platform.release(),
            "distribution": SystemInfo.get_distribution(),
            "machine": platform.machine(),
        }

    @staticmethod
    def is_root() -> bool:
        """Check if running as root."""
        return os.geteuid() == 0 if hasattr(os, 'geteuid') else False

    @staticmethod
    def find_executable(name: str) -> Optional[str]:
        """Locate an executable on PATH."""
        return shutil.which(name)

    @staticmethod
    def get_active_swaps(proc_swaps: Path = Path(PROC_SWAPS_PATH)) -> List[str]:
        """List the swap devices and files currently in use."""
        try:
            lines = proc_swaps.read_text().splitlines()
        except OSError:
            return []

        # First line is the column header
        return [unescape_mount_field(line.split()[0]) for line in lines[1:] if line.strip()]


class CommandRunner:
    """Runs external commands and performs file writes on the host."""

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    @staticmethod
    def format_command(args: Sequence[str]) -> str:
        """Render a command line for logging."""
        return shlex.join(str(arg) for arg in args)

    def run(
        self,
        args: Sequence[str],
        *,
        input_text: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        capture_output: bool = False,
        error_cls: Type[CommandError] = CommandError,
        error_message: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command, raising error_cls when it exits non-zero."""
        command = [str(arg) for arg in args]
        command_line = self.format_command(command)

        if self.dry_run:
            logger.info(f"[dry-run] {command_line}")
            return subprocess.CompletedProcess(command, 0, "", "")

        logger.info(f"Running: {command_line}")

        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        try:
            result = subprocess.run(
                command,
                input=input_text,
                env=run_env,
                text=True,
                capture_output=capture_output,
            )
        except OSError as e:
            raise error_cls(
                error_message or f"Could not execute {command[0]}",
                command=command,
                returncode=127,
                cause=e,
            ) from e

        if capture_output and result.stdout:
            logger.debug(f"{command[0]} stdout: {result.stdout[-4000:]}")
        if capture_output and result.stderr:
            logger.debug(f"{command[0]} stderr: {result.stderr[-4000:]}")

        if result.returncode != 0:
            message = error_message or f"Command failed with exit status {result.returncode}"
            raise error_cls(f"{message}: {command_line}", command=command, returncode=result.returncode)

        return result

    def make_directory(self, path: Path, mode: int = DEFAULT_DIR_MODE) -> None:
        """Create a directory and its parents, tolerating existing ones."""
        if self.dry_run:
            logger.info(f"[dry-run] mkdir -p {path}")
            return
        path.mkdir(parents=True, exist_ok=True, mode=mode)

    def write_file(self, path: Path, content: str) -> None:
        """Write text to a file, replacing any previous content."""
        if self.dry_run:
            logger.info(f"[dry-run] write {path} ({len(content)} bytes)")
            return
        path.write_text(content, encoding="utf-8")

    def append_line(self, path: Path, line: str) -> None:
        """Append a single line to a text file."""
        if self.dry_run:
            logger.info(f"[dry-run] append to {path}: {line}")
            return
        with open(path, "a", encoding="utf-8") as f:
            f.write(line.rstrip("\n") + "\n")


class AptManager:
    """Drives apt, dpkg and debconf."""

    APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def _apt(self, *args: str, message: str) -> None:
        self.runner.run(
            ["apt", *args],
            env=self.APT_ENV,
            error_cls=DependencyInstallError,
            error_message=message,
        )

    def update(self) -> None:
        """Refresh the package index."""
        self._apt("update", message="Failed to update package index")

    def upgrade(self) -> None:
        """Upgrade installed packages."""
        self._apt("upgrade", "-y", message="Failed to upgrade packages")

    def install(self, *packages: str) -> None:
        """Install one or more packages."""
        self._apt("install", "-y", *packages, message=f"Failed to install {', '.join(packages)}")

    def add_repository(self, component: str) -> None:
        """Enable an additional repository component."""
        self.runner.run(
            ["apt-add-repository", "-y", component],
            error_cls=DependencyInstallError,
            error_message=f"Failed to enable the {component} repository",
        )

    def add_architecture(self, architecture: str) -> None:
        """Enable a secondary dpkg architecture."""
        self.runner.run(
            ["dpkg", "--add-architecture", architecture],
            error_cls=DependencyInstallError,
            error_message=f"Failed to add the {architecture} architecture",
        )

    def preseed(self, selections: Sequence[str]) -> None:
        """Pre-answer debconf questions so installs do not prompt."""
        for selection in selections:
            self.runner.run(
                ["debconf-set-selections"],
                input_text=selection + "\n",
                error_cls=DependencyInstallError,
                error_message="Failed to pre-seed debconf selections",
            )


class SwapManager:
    """Creates and enables a swapfile and persists it in fstab."""

    def __init__(
        self,
        runner: CommandRunner,
        path: Path,
        size_mb: int,
        fstab_path: Path = Path(FSTAB_PATH),
        proc_swaps_path: Path = Path(PROC_SWAPS_PATH),
    ) -> None:
        self.runner = runner
        self.path = Path(path)
        self.size_mb = size_mb
        self.fstab_path = Path(fstab_path)
        self.proc_swaps_path = Path(proc_swaps_path)

    @property
    def fstab_entry(self) -> str:
        return f"{escape_mount_field(str(self.path))} none swap sw 0 0"

    def is_active(self) -> bool:
        """Check whether the swapfile is already in use."""
        return str(self.path) in SystemInfo.get_active_swaps(self.proc_swaps_path)

    def has_fstab_entry(self) -> bool:
        """Check whether fstab already mounts the swapfile."""
        try:
            lines = self.fstab_path.read_text().splitlines()
        except FileNotFoundError:
            return False

        for line in lines:
            fields = line.split()
            if fields and not fields[0].startswith("#") and unescape_mount_field(fields[0]) == str(self.path):
                return True
        return False

    def allocate(self) -> None:
        """Allocate the backing file, falling back to dd where fallocate is unsupported."""
        try:
            self.runner.run(["fallocate", "-l", f"{self.size_mb}M", str(self.path)])
        except CommandError as e:
            logger.warning(f"fallocate failed ({e}); writing swapfile with dd instead")
            self.runner.run([
                "dd", "if=/dev/zero", f"of={self.path}", "bs=1M", f"count={self.size_mb}"
            ])

    def provision(self) -> bool:
        """Create, enable and persist the swapfile. Returns False if it was already active."""
        created = False
        if self.is_active():
            logger.info(f"Swapfile {self.path} is already active, skipping allocation")
        else:
            self.allocate()
            self.runner.run(["chmod", format(SWAP_FILE_MODE, "o"), str(self.path)])
            self.runner.run(["mkswap", str(self.path)])
            self.runner.run(["swapon", str(self.path)])
            created = True

        if self.has_fstab_entry():
            logger.info(f"{self.fstab_path} already mounts {self.path}")
        else:
            self.runner.append_line(self.fstab_path, self.fstab_entry)
            logger.info(f"Added swap entry to {self.fstab_path}")

        return created


class AccountManager:
    """Manages the service account and file ownership."""

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    @staticmethod
    def user_exists(name: str) -> bool:
        """Check whether a system account exists."""
        try:
            pwd.getpwnam(name)
        except KeyError:
            return False
        return True

    def ensure_system_user(self, name: str) -> bool:
        """Create a system account unless it exists. Returns True if created."""
        if self.user_exists(name):
            logger.info(f"User '{name}' already exists")
            return False

        self.runner.run(["useradd", "-r", name])
        logger.info(f"Created system user '{name}'")
        return True

    def chown(self, path: Path, user: str, recursive: bool = False) -> None:
        """Give ownership of a path to user:user."""
        args = ["chown"]
        if recursive:
            args.append("-R")
        args += [f"{user}:{user}", str(path)]
        self.runner.run(args)


class SystemdManager:
    """Installs unit files and talks to systemctl."""

    def __init__(self, runner: CommandRunner, unit_directory: Path = Path(SYSTEMD_UNIT_DIRECTORY)) -> None:
        self.runner = runner
        self.unit_directory = Path(unit_directory)

    @staticmethod
    def template_unit_filename(unit_name: str) -> str:
        return f"{unit_name}@.service"

    @staticmethod
    def instance_unit(unit_name: str, instance: str) -> str:
        return f"{unit_name}@{instance}"

    def install_template_unit(self, unit_name: str, content: str) -> Path:
        """Write a template unit file, overwriting any previous version."""
        unit_path = self.unit_directory / self.template_unit_filename(unit_name)
        self.runner.write_file(unit_path, content)
        logger.info(f"Wrote unit file {unit_path}")
        return unit_path

    def daemon_reload(self) -> None:
        """Reload the systemd unit index."""
        self.runner.run(["systemctl", "daemon-reload"])
