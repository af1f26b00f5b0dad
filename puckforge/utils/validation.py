"""
Common validation utilities for puckforge.

This module provides shared validation functions for operator input and
configuration values, enforcing consistent validation patterns.
"""

import re
from pathlib import Path
from typing import Any

from ..constants import (
    MAX_PORT, MAX_SERVER_NAME_LENGTH, MAX_SWAP_SIZE_MB, MIN_PORT,
    MIN_SWAP_SIZE_MB, STEAM_ID64_PATTERN
)
from ..exceptions import ValidationError


class BaseValidator:
    """Base validator class with common validation methods."""

    @staticmethod
    def validate_non_empty_string(value: Any, field_name: str) -> str:
        """Validate that value is a non-empty string."""
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field_name} cannot be empty")

        return stripped

    @staticmethod
    def validate_integer_range(
        value: Any,
        field_name: str,
        min_value: int,
        max_value: int
    ) -> int:
        """Validate that value is an integer within the specified range."""
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError(f"{field_name} must be an integer")

        if value < min_value or value > max_value:
            raise ValidationError(
                f"{field_name} must be between {min_value} and {max_value}"
            )

        return value

    @staticmethod
    def validate_string_length(
        value: str,
        field_name: str,
        max_length: int,
        min_length: int = 1
    ) -> str:
        """Validate string length constraints."""
        if len(value) < min_length:
            raise ValidationError(f"{field_name} must be at least {min_length} characters")

        if len(value) > max_length:
            raise ValidationError(f"{field_name} must be no more than {max_length} characters")

        return value

    @staticmethod
    def validate_regex_pattern(
        value: str,
        field_name: str,
        pattern: str,
        pattern_description: str = "valid format"
    ) -> str:
        """Validate that value matches the given regex pattern."""
        if not re.match(pattern, value):
            raise ValidationError(f"{field_name} must have {pattern_description}")

        return value


class OperatorInputValidator(BaseValidator):
    """Validator for values typed in by the operator."""

    @staticmethod
    def validate_server_name(name: Any) -> str:
        """Validate a server display name."""
        name_str = OperatorInputValidator.validate_non_empty_string(name, "Server name")
        return OperatorInputValidator.validate_string_length(
            name_str, "Server name", MAX_SERVER_NAME_LENGTH
        )

    @staticmethod
    def validate_steam_id(steam_id: Any) -> str:
        """Validate a SteamID64 (17 decimal digits)."""
        if isinstance(steam_id, int) and not isinstance(steam_id, bool):
            steam_id = str(steam_id)
        steam_id_str = OperatorInputValidator.validate_non_empty_string(steam_id, "SteamID64")
        return OperatorInputValidator.validate_regex_pattern(
            steam_id_str,
            "SteamID64",
            STEAM_ID64_PATTERN,
            "exactly 17 digits (check at https://steamid.io)"
        )

    @staticmethod
    def validate_password(password: Any) -> str:
        """Validate an optional server password; None means no password."""
        if password is None:
            return ""
        if not isinstance(password, str):
            raise ValidationError("Password must be a string")
        # Kept verbatim, surrounding whitespace included
        return password


class ProvisioningValidator(BaseValidator):
    """Validator for provisioning settings."""

    @staticmethod
    def validate_port(port: Any) -> int:
        """Validate a server port."""
        return ProvisioningValidator.validate_integer_range(
            port, "Server port", MIN_PORT, MAX_PORT
        )

    @staticmethod
    def validate_swap_size(size_mb: Any) -> int:
        """Validate the swapfile size in MB."""
        return ProvisioningValidator.validate_integer_range(
            size_mb, "Swap size", MIN_SWAP_SIZE_MB, MAX_SWAP_SIZE_MB
        )

    @staticmethod
    def validate_service_user(user: Any) -> str:
        """Validate a system account name."""
        user_str = ProvisioningValidator.validate_non_empty_string(user, "Service user")
        return ProvisioningValidator.validate_regex_pattern(
            user_str,
            "Service user",
            r'^[a-z_][a-z0-9_-]{0,31}$',
            "a valid system account name"
        )

    @staticmethod
    def validate_absolute_path(path: Any, field_name: str) -> Path:
        """Validate that a path is absolute."""
        if not isinstance(path, (str, Path)):
            raise ValidationError(f"{field_name} must be a string or Path")

        path_obj = Path(path)
        if not path_obj.is_absolute():
            raise ValidationError(f"{field_name} must be an absolute path")

        return path_obj
