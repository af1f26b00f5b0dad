"""
Custom exception classes for PuckForge.

This module defines the exception hierarchy used throughout the application
for consistent error handling and reporting. Every error carries the process
exit code the CLI should terminate with.
"""

from typing import List, Optional, Sequence


class PuckForgeError(Exception):
    """Base exception class for all PuckForge errors."""

    exit_code: int = 1

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class PrivilegeError(PuckForgeError):
    """Raised when the tool is not running with root privileges."""
    pass


class CommandError(PuckForgeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause)
        self.command: List[str] = [str(part) for part in command] if command else []
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        # Propagate the failing command's status like `set -e` would;
        # a command killed by signal N reports 128 + N.
        if self.returncode and self.returncode > 0:
            return self.returncode
        if self.returncode and self.returncode < 0:
            return 128 - self.returncode
        return 1


class DependencyInstallError(CommandError):
    """Raised when a package manager or debconf step fails."""
    pass


class InstallError(CommandError):
    """Raised when SteamCMD fails to fetch the game server."""

    @property
    def exit_code(self) -> int:
        return 1


class ValidationError(PuckForgeError):
    """Raised when input validation fails."""
    pass


class InputValidationError(ValidationError):
    """Raised when an interactive answer is not recognised."""
    pass


class ConfigurationError(PuckForgeError):
    """Raised when configuration or an answers file is invalid."""
    pass


class ProvisioningError(PuckForgeError):
    """Raised when a provisioning step fails unexpectedly."""
    pass
