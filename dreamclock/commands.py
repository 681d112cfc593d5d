from __future__ import annotations

from enum import Enum
from typing import Optional


class Command(str, Enum):
    START_ALARMS = "START_ALARMS"
    RESTART_ALARMS = "RESTART_ALARMS"
    RESTART_SERVICE = "RESTART_SERVICE"


# Argument prefix used by the boot receiver stub to forward a broadcast action.
RECOVERY_PREFIX = "RECOVERY:"


def parse_command(tag: Optional[str]) -> Command:
    """Unknown or missing tags are treated as a plain start."""
    tag = (tag or "").strip().upper()
    try:
        return Command(tag)
    except ValueError:
        return Command.START_ALARMS


def split_service_argument(argument: Optional[str]) -> tuple[Command, Optional[str]]:
    """
    Decode the p4a service argument.
    Returns the command to start with and, for forwarded broadcasts, the
    original broadcast action.
    """
    argument = (argument or "").strip()
    if argument.startswith(RECOVERY_PREFIX):
        action = argument[len(RECOVERY_PREFIX):].strip()
        return Command.RESTART_ALARMS, action or None
    return parse_command(argument), None
