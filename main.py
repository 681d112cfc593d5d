from __future__ import annotations

import sys
from pathlib import Path

from kivy.clock import Clock
from kivy.lang import Builder
from kivy.logger import Logger
from kivy.utils import platform

from kivymd.app import MDApp
try:
    from kivymd.uix.snackbar import Snackbar
except Exception:  # pragma: no cover
    Snackbar = None

from dreamclock.config import Settings, load_settings
from dreamclock.desktop import DesktopForeground, DesktopLauncher, DesktopPower
from dreamclock.exemption import ExemptionNegotiator
from dreamclock.session import HostSession
from dreamclock.supervisor import LivenessSupervisor


KV = """
MDScreen:
    MDBoxLayout:
        orientation: "vertical"
        padding: dp(24)
        spacing: dp(12)
        MDLabel:
            text: "Dream Clock"
            font_style: "H5"
            halign: "center"
        MDLabel:
            id: status
            text: ""
            halign: "center"
            theme_text_color: "Secondary"
"""


class DreamClockApp(MDApp):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.settings: Settings = load_settings()
        self.session: HostSession | None = None
        # Only set off-device, where the alarm service runs in-process.
        self.supervisor: LivenessSupervisor | None = None

    def build(self):
        self.title = self.settings.announcement_title
        self.theme_cls.theme_style = "Dark"
        self.theme_cls.primary_palette = "BlueGray"
        root = Builder.load_string(KV)
        if platform == "android":
            self.session = self._android_session()
        else:
            self.session = self._desktop_session()
        return root

    def _android_session(self) -> HostSession:
        from dreamclock.android import (
            AndroidLauncher,
            AndroidPower,
            bind_activity_result,
            current_activity,
            launched_suppressed,
            move_task_to_back,
        )

        activity = current_activity()
        launcher = AndroidLauncher(activity, self.settings)
        negotiator = ExemptionNegotiator(AndroidPower(activity), self._toast_later, self.settings)
        session = HostSession(
            launcher.start_service,
            negotiator,
            launched_suppressed=lambda: launched_suppressed(activity),
            move_to_back=lambda: move_task_to_back(activity),
        )
        try:
            bind_activity_result(session.on_session_result)
        except Exception as exc:
            Logger.warning(f"DreamClock: activity results unavailable: {exc!r}")
        return session

    def _desktop_session(self) -> HostSession:
        launcher = DesktopLauncher(lambda command: self._s().start(command))
        self.supervisor = LivenessSupervisor(DesktopForeground(self.title), launcher.start_service, settings=self.settings)
        Clock.schedule_interval(lambda *_: self._tick_supervisor(), self.settings.tick_interval_s)
        negotiator = ExemptionNegotiator(DesktopPower(), self._toast_later, self.settings)
        return HostSession(launcher.start_service, negotiator)

    def on_start(self):
        if self.session:
            self.session.on_create()
        Clock.schedule_interval(lambda *_: self.refresh_status(), 1)

    def on_pause(self):
        return True

    def on_resume(self):
        if self.session:
            self.session.on_resume()

    def _tick_supervisor(self):
        if self.supervisor:
            self.supervisor.tick()

    def _s(self) -> LivenessSupervisor:
        if self.supervisor is None:
            raise RuntimeError("Supervisor not initialized yet")
        return self.supervisor

    def refresh_status(self):
        parts = []
        if self.supervisor:
            parts.append(f"Alarm service: {self.supervisor.state.value}")
        if self.session:
            parts.append(f"Battery exemption: {self.session.negotiator.outcome.value}")
        try:
            self.root.ids.status.text = "\n".join(parts)
        except Exception:
            pass

    # ---- misc ----
    def _toast_later(self, text: str):
        # Activity results arrive on the Java UI thread.
        Clock.schedule_once(lambda *_: self.toast(text), 0)

    def toast(self, text: str):
        if Snackbar is not None:
            try:
                Snackbar(text=text).open()
                return
            except Exception as exc:
                Logger.debug(f"DreamClock: snackbar unavailable: {exc!r}")
        print(text)


def main():
    if "--gen-android" in sys.argv:
        from dreamclock.android_src import write_android_sources

        write_android_sources(Path.cwd(), load_settings())
        return
    DreamClockApp().run()


if __name__ == "__main__":
    main()
