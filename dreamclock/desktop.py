from __future__ import annotations

from typing import Callable, Optional

from kivy.logger import Logger

from .commands import Command
from .platform import AnnouncementChannel, LivenessAnnouncement

try:
    from plyer import notification as plyer_notification  # type: ignore
except Exception:  # pragma: no cover
    plyer_notification = None


def _next_frame(fn: Callable[[], object]) -> None:
    from kivy.clock import Clock

    Clock.schedule_once(lambda *_: fn(), 0)


class DesktopForeground:
    """
    Off-device stand-in for the foreground service API.
    The announcement is shown once through plyer; desktops do not reclaim
    the process, so there is nothing to elevate.
    """

    def __init__(self, app_name: str = "Dream Clock") -> None:
        self.app_name = app_name
        self.channels: set[str] = set()
        self.shown: Optional[LivenessAnnouncement] = None

    def create_channel(self, channel: AnnouncementChannel) -> None:
        self.channels.add(channel.id)

    def start_foreground(self, notification_id: int, announcement: LivenessAnnouncement) -> None:
        if self.shown == announcement:
            return
        self.shown = announcement
        if plyer_notification is None:
            return
        try:
            plyer_notification.notify(title=announcement.title, message=announcement.text, app_name=self.app_name)
        except Exception as exc:
            # plyer has no backend on some desktops; the service still runs.
            Logger.debug(f"DreamClock: desktop announcement not shown: {exc!r}")

    def stop_foreground(self) -> None:
        self.shown = None


class DesktopPower:
    """Desktops have no background-execution throttling."""

    def sdk_int(self) -> int:
        return 0

    def package_name(self) -> str:
        return "dreamclock"

    def is_exempt(self, package: str) -> bool:
        return True

    def request_exemption(self, package: str, request_code: int) -> None:
        return None


class DesktopLauncher:
    """
    In-process loopback: a start request is delivered to `on_start` on the
    next Kivy frame, the way the OS would deliver it asynchronously.
    """

    def __init__(
        self,
        on_start: Callable[[Command], object],
        dispatch: Callable[[Callable[[], object]], None] = _next_frame,
    ) -> None:
        self.on_start = on_start
        self.dispatch = dispatch

    def start_service(self, command: Command) -> None:
        self.dispatch(lambda: self.on_start(command))

    def launch_ui(self, suppressed: bool) -> None:
        # The desktop UI is the process itself.
        Logger.debug(f"DreamClock: desktop UI launch ignored (suppressed={suppressed})")
