"""
Operator input for PuckForge.

Steps never read stdin themselves; they ask a ConfigProvider. The
interactive provider prompts through click, the static provider answers
from a fixed record (tests and unattended installs via an answers file).
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

import click
import pydantic
import yaml

from .exceptions import ConfigurationError, InputValidationError, ValidationError
from .models import OperatorInput
from .utils.validation import OperatorInputValidator

logger = logging.getLogger(__name__)

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}


def parse_yes_no(answer: str) -> bool:
    """Interpret a yes/no answer, case-insensitively."""
    normalized = (answer or "").strip().lower()
    if normalized in YES_ANSWERS:
        return True
    if normalized in NO_ANSWERS:
        return False
    raise InputValidationError(f"Unrecognized answer: {answer!r}")


class ConfigProvider(Protocol):
    """Source of the operator's answers."""

    def ask_yes_no(self, question: str) -> bool:
        ...

    def collect_operator_input(self) -> OperatorInput:
        ...


def _click_value_proc(validator: Callable[[str], str]) -> Callable[[str], str]:
    """Adapt a validator so click re-prompts when it rejects the value."""
    def proc(value: str) -> str:
        try:
            return validator(value)
        except ValidationError as e:
            raise click.BadParameter(e.message) from e
    return proc


class InteractiveConfigProvider:
    """Prompts the operator on the terminal."""

    def __init__(
        self,
        prompt: Callable[..., str] = click.prompt,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self.prompt = prompt
        self.echo = echo

    def ask_yes_no(self, question: str) -> bool:
        while True:
            answer = self.prompt(f"{question} (y/n)", default="", show_default=False)
            try:
                return parse_yes_no(answer)
            except InputValidationError:
                self.echo("Please answer yes or no.")

    def collect_operator_input(self) -> OperatorInput:
        self.echo("Please provide the following information for your servers:")

        server1_name = self.prompt(
            "Enter name for Server 1",
            value_proc=_click_value_proc(OperatorInputValidator.validate_server_name),
        )
        server2_name = self.prompt(
            "Enter name for Server 2",
            value_proc=_click_value_proc(OperatorInputValidator.validate_server_name),
        )
        steam_id = self.prompt(
            "Enter your steamID64 (check at https://steamid.io)",
            value_proc=_click_value_proc(OperatorInputValidator.validate_steam_id),
        )
        password = self.prompt(
            "Enter server password (optional, leave empty to skip)",
            default="",
            show_default=False,
        )

        return OperatorInput(
            server1_name=server1_name,
            server2_name=server2_name,
            admin_steam_id=steam_id,
            password=password,
        )


class StaticConfigProvider:
    """Answers every question from a fixed record."""

    def __init__(self, operator_input: OperatorInput, install_monitoring: bool = False) -> None:
        self.operator_input = operator_input
        self.install_monitoring = install_monitoring

    def ask_yes_no(self, question: str) -> bool:
        logger.info(f"{question} -> {'yes' if self.install_monitoring else 'no'} (from answers)")
        return self.install_monitoring

    def collect_operator_input(self) -> OperatorInput:
        return self.operator_input


def load_answers_file(path: Union[str, Path]) -> StaticConfigProvider:
    """Build a provider from a YAML answers file.

    Every scalar is read as a string, so an unquoted password such as
    `1234` or `no` is kept exactly as written.
    """
    answers_path = Path(path)
    try:
        with open(answers_path, 'r') as f:
            answers = yaml.load(f, Loader=yaml.BaseLoader) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read answers file {answers_path}", cause=e) from e

    if not isinstance(answers, dict):
        raise ConfigurationError(f"Answers file {answers_path} must contain a mapping")

    install_monitoring = answers.pop("install_monitoring", False)
    if isinstance(install_monitoring, str):
        try:
            install_monitoring = parse_yes_no(install_monitoring)
        except InputValidationError as e:
            raise ConfigurationError(f"Invalid install_monitoring value in {answers_path}", cause=e) from e

    try:
        operator_input = OperatorInput(**answers)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid answers file {answers_path}", cause=e) from e
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid answers file {answers_path}: {e}") from e

    return StaticConfigProvider(operator_input, install_monitoring=bool(install_monitoring))


def build_provider(answers_file: Optional[Union[str, Path]] = None) -> ConfigProvider:
    """Pick the answers file when given, otherwise prompt interactively."""
    if answers_file:
        return load_answers_file(answers_file)
    return InteractiveConfigProvider()
