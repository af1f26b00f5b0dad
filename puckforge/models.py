"""
Data models for PuckForge.

ServerConfig mirrors the JSON document the Puck server reads through
--serverConfigurationPath; field order is the order keys are written.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_CLIENT_TICK_RATE, DEFAULT_JOIN_MID_MATCH_DELAY, DEFAULT_KICK_TIMEOUT,
    DEFAULT_MAX_PLAYERS, DEFAULT_MODS, DEFAULT_PHASE_DURATIONS,
    DEFAULT_SERVER_TICK_RATE, DEFAULT_SLEEP_TIMEOUT, DEFAULT_TARGET_FRAME_RATE
)
from .utils.validation import OperatorInputValidator


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ModEntry(_CamelModel):
    """A workshop mod enabled on the server."""

    id: int = Field(..., description="Steam Workshop ID")
    enabled: bool = True
    client_required: bool = False


def _default_mods() -> List[ModEntry]:
    return [
        ModEntry(id=mod_id, enabled=enabled, client_required=client_required)
        for mod_id, enabled, client_required in DEFAULT_MODS
    ]


class ServerConfig(_CamelModel):
    """Configuration document for one Puck server instance."""

    port: int = Field(..., ge=1, le=65535)
    ping_port: int = Field(..., ge=1, le=65535)
    name: str
    max_players: int = DEFAULT_MAX_PLAYERS
    password: str = ""
    voip: bool = False
    is_public: bool = True
    admin_steam_ids: List[str] = Field(default_factory=list)
    reload_banned_steam_ids: bool = True
    use_puck_banned_steam_ids: bool = True
    print_metrics: bool = True
    kick_timeout: int = DEFAULT_KICK_TIMEOUT
    sleep_timeout: int = DEFAULT_SLEEP_TIMEOUT
    join_mid_match_delay: int = DEFAULT_JOIN_MID_MATCH_DELAY
    target_frame_rate: int = DEFAULT_TARGET_FRAME_RATE
    server_tick_rate: int = DEFAULT_SERVER_TICK_RATE
    client_tick_rate: int = DEFAULT_CLIENT_TICK_RATE
    start_paused: bool = False
    allow_voting: bool = True
    phase_duration_map: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_PHASE_DURATIONS))
    mods: List[ModEntry] = Field(default_factory=_default_mods)

    def to_document(self) -> dict:
        """Return the JSON-ready document with camelCase keys."""
        return self.model_dump(by_alias=True)


class OperatorInput(BaseModel):
    """Values the operator supplies during installation."""

    server1_name: str
    server2_name: str
    admin_steam_id: str
    password: str = ""

    @field_validator("server1_name", "server2_name", mode="before")
    @classmethod
    def _check_name(cls, value):
        return OperatorInputValidator.validate_server_name(value)

    @field_validator("admin_steam_id", mode="before")
    @classmethod
    def _check_steam_id(cls, value):
        return OperatorInputValidator.validate_steam_id(value)

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value):
        return OperatorInputValidator.validate_password(value)

    @property
    def has_password(self) -> bool:
        return bool(self.password)

    @property
    def server_names(self) -> List[str]:
        return [self.server1_name, self.server2_name]


class InstanceSpec(BaseModel):
    """Identity and ports of one server instance."""

    name: str
    port: int
    ping_port: int

    @property
    def config_filename(self) -> str:
        return f"{self.name}.json"
