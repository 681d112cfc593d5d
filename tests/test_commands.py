# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from dreamclock.commands import Command, parse_command, split_service_argument


@pytest.mark.parametrize(
    "tag,expected",
    [
        ("START_ALARMS", Command.START_ALARMS),
        ("restart_alarms", Command.RESTART_ALARMS),
        (" RESTART_SERVICE ", Command.RESTART_SERVICE),
        ("SNOOZE", Command.START_ALARMS),
        ("", Command.START_ALARMS),
        (None, Command.START_ALARMS),
    ],
)
def test_parse_command(tag, expected):
    assert parse_command(tag) is expected


def test_plain_argument_has_no_recovery_action():
    assert split_service_argument("RESTART_SERVICE") == (Command.RESTART_SERVICE, None)


def test_forwarded_broadcast_argument():
    command, action = split_service_argument("RECOVERY:android.intent.action.BOOT_COMPLETED")
    assert command is Command.RESTART_ALARMS
    assert action == "android.intent.action.BOOT_COMPLETED"


def test_empty_forwarded_action():
    assert split_service_argument("RECOVERY:") == (Command.RESTART_ALARMS, None)
