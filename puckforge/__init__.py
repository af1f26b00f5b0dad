"""
PuckForge - A Python CLI tool for provisioning Puck dedicated servers.

This package provisions a Debian/Ubuntu host to run two Puck server
instances under systemd: OS packages, swap, SteamCMD, the game server
download, a service account, the templated unit and the per-instance
JSON configuration files.
"""

__version__ = "1.0.0"
__author__ = "dunamismax"
