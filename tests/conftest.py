# pylint: disable=missing-module-docstring,missing-function-docstring

import os
import sys
from pathlib import Path

# kivy parses sys.argv and writes log files on import unless told not to.
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from datetime import datetime, timedelta
from typing import Any

import pytest

from dreamclock.commands import Command
from dreamclock.errors import DownstreamLaunchFailed, PolicyDenied
from dreamclock.supervisor import ChannelRegistry


class FakeForeground:
    def __init__(self, deny: int = 0) -> None:
        self.deny = deny
        self.channels: list[Any] = []
        self.published: list[tuple[int, Any]] = []
        self.stopped = 0

    def create_channel(self, channel) -> None:
        self.channels.append(channel)

    def start_foreground(self, notification_id: int, announcement) -> None:
        if self.deny:
            self.deny -= 1
            raise PolicyDenied("foreground service start not allowed")
        self.published.append((notification_id, announcement))

    def stop_foreground(self) -> None:
        self.stopped += 1


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 7, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingStarts:
    def __init__(self) -> None:
        self.commands: list[Command] = []

    def __call__(self, command: Command) -> None:
        self.commands.append(command)


@pytest.fixture
def foreground() -> FakeForeground:
    return FakeForeground()


@pytest.fixture
def channels() -> ChannelRegistry:
    return ChannelRegistry()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def starts() -> RecordingStarts:
    return RecordingStarts()


class FakePower:
    def __init__(self, sdk: int = 34, exempt: bool = False, fail: bool = False) -> None:
        self.sdk = sdk
        self.exempt = exempt
        self.fail = fail
        self.requests = []

    def sdk_int(self) -> int:
        return self.sdk

    def package_name(self) -> str:
        return "com.dreamclock.persistent"

    def is_exempt(self, package: str) -> bool:
        return self.exempt

    def request_exemption(self, package: str, request_code: int) -> None:
        if self.fail:
            raise DownstreamLaunchFailed("no activity handles the settings intent")
        self.requests.append((package, request_code))
