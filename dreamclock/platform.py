from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from .commands import Command


# android.app.NotificationManager.IMPORTANCE_LOW
IMPORTANCE_LOW = 2

# Build.VERSION_CODES
API_M = 23
API_O = 26

# android.app.Activity.RESULT_OK
RESULT_OK = -1


@dataclass(frozen=True)
class AnnouncementChannel:
    id: str
    name: str
    description: str
    importance: int = IMPORTANCE_LOW
    show_badge: bool = False
    silent: bool = True


@dataclass(frozen=True)
class LivenessAnnouncement:
    notification_id: int
    channel_id: str
    title: str
    text: str
    ongoing: bool = True
    silent: bool = True


class ForegroundApi(Protocol):
    def create_channel(self, channel: AnnouncementChannel) -> None: ...

    def start_foreground(self, notification_id: int, announcement: LivenessAnnouncement) -> None:
        """Raises PolicyDenied when the OS refuses the elevation."""

    def stop_foreground(self) -> None: ...


class PowerApi(Protocol):
    def sdk_int(self) -> int: ...

    def package_name(self) -> str: ...

    def is_exempt(self, package: str) -> bool: ...

    def request_exemption(self, package: str, request_code: int) -> None: ...


StartService = Callable[[Command], object]
LaunchUi = Callable[[bool], object]
Toast = Callable[[str], object]
