from __future__ import annotations

import os
import signal
import sys
import time

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kivy.logger import Logger

from dreamclock.android import AndroidForeground, AndroidLauncher, current_service, set_auto_restart
from dreamclock.config import Settings, load_settings
from dreamclock.recovery import dispatch_service_argument
from dreamclock.supervisor import LivenessSupervisor


def build_supervisor(settings: Settings) -> tuple[LivenessSupervisor, AndroidLauncher]:
    service = current_service()
    launcher = AndroidLauncher(service, settings)
    supervisor = LivenessSupervisor(AndroidForeground(service), launcher.start_service, settings=settings)
    return supervisor, launcher


def main() -> None:
    settings = load_settings()
    supervisor, launcher = build_supervisor(settings)
    try:
        set_auto_restart()
    except Exception as exc:
        Logger.warning(f"DreamClock: auto-restart not available: {exc!r}")

    def _on_terminate(*_):
        supervisor.stop()
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, _on_terminate)

    # The service is the supervisor, so recovery starts it in-process.
    dispatch_service_argument(supervisor.start, launcher.launch_ui, os.environ.get("PYTHON_SERVICE_ARGUMENT", ""))

    while True:
        supervisor.tick()
        time.sleep(settings.tick_interval_s)


if __name__ == "__main__":
    main()
