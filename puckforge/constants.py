"""
Constants used throughout PuckForge.

This module contains all hardcoded values used across the application
for easy maintenance and configuration.
"""

from typing import Dict, List, Tuple

# Installation layout
DEFAULT_INSTALL_DIRECTORY: str = "/srv/puckserver"
DEFAULT_SERVICE_USER: str = "puck"
DEFAULT_SERVER_EXECUTABLE: str = "start_server.sh"

# Steam
STEAMCMD_PATH: str = "/usr/games/steamcmd"
STEAMCMD_PACKAGE: str = "steamcmd"
PUCK_APP_ID: int = 3481440
STEAM_ANONYMOUS_LOGIN: str = "anonymous"

# debconf answers that accept the Steam license without prompting
STEAM_DEBCONF_SELECTIONS: List[str] = [
    "steam steam/question select I AGREE",
    "steam steam/license note ",
]

# Swap
DEFAULT_SWAP_PATH: str = "/swapfile"
DEFAULT_SWAP_SIZE_MB: int = 500
MIN_SWAP_SIZE_MB: int = 64
MAX_SWAP_SIZE_MB: int = 65536
SWAP_FILE_MODE: int = 0o600
FSTAB_PATH: str = "/etc/fstab"
PROC_SWAPS_PATH: str = "/proc/swaps"

# Packages
BASE_PACKAGES: List[str] = ["software-properties-common"]
EXTRA_REPOSITORY: str = "non-free"
EXTRA_ARCHITECTURE: str = "i386"
DEFAULT_MONITORING_PACKAGE: str = "btop"

# systemd
DEFAULT_UNIT_NAME: str = "puck"
SYSTEMD_UNIT_DIRECTORY: str = "/etc/systemd/system"

# Server instances
DEFAULT_BASE_PORT: int = 7777
DEFAULT_INSTANCE_COUNT: int = 2
PORT_STRIDE: int = 2
MIN_PORT: int = 1024
MAX_PORT: int = 65535

# Operator input limits
MAX_SERVER_NAME_LENGTH: int = 64
STEAM_ID64_PATTERN: str = r'^\d{17}$'

# File permissions
DEFAULT_DIR_MODE: int = 0o755

# Shared server configuration template
DEFAULT_MAX_PLAYERS: int = 20
DEFAULT_KICK_TIMEOUT: int = 1800
DEFAULT_SLEEP_TIMEOUT: int = 900
DEFAULT_JOIN_MID_MATCH_DELAY: int = 10
DEFAULT_TARGET_FRAME_RATE: int = 380
DEFAULT_SERVER_TICK_RATE: int = 360
DEFAULT_CLIENT_TICK_RATE: int = 360

DEFAULT_PHASE_DURATIONS: Dict[str, int] = {
    "Warmup": 600,
    "FaceOff": 3,
    "Playing": 300,
    "BlueScore": 5,
    "RedScore": 5,
    "Replay": 10,
    "PeriodOver": 15,
    "GameOver": 15,
}

# (workshop id, enabled, client required)
DEFAULT_MODS: List[Tuple[int, bool, bool]] = [
    (3497097214, True, False),
    (3497344177, True, False),
    (3503065207, True, True),
]
