from __future__ import annotations

from typing import Callable, Optional

from kivy.logger import Logger

from .commands import Command
from .exemption import ExemptionNegotiator
from .platform import StartService


class HostSession:
    """
    The UI side of the core: keeps the alarm service started on every
    create/resume and runs the exemption negotiation once per session.
    """

    def __init__(
        self,
        start_service: StartService,
        negotiator: ExemptionNegotiator,
        launched_suppressed: Callable[[], bool] = lambda: False,
        move_to_back: Optional[Callable[[], object]] = None,
    ) -> None:
        self.start_service = start_service
        self.negotiator = negotiator
        self.launched_suppressed = launched_suppressed
        self.move_to_back = move_to_back
        self.created = False
        self.suppressed = False

    def _ensure_service(self) -> bool:
        try:
            self.start_service(Command.START_ALARMS)
        except Exception as exc:
            Logger.error(f"DreamClock: error starting alarm service: {exc!r}")
            return False
        return True

    def on_create(self) -> None:
        if self.created:
            return
        self.created = True
        Logger.info("DreamClock: session created")
        self._ensure_service()
        self.negotiator.request_exemption()

        try:
            self.suppressed = bool(self.launched_suppressed())
        except Exception as exc:
            Logger.warning(f"DreamClock: could not read launch extras: {exc!r}")
            self.suppressed = False
        if self.suppressed and self.move_to_back is not None:
            Logger.info("DreamClock: auto-started after boot - minimizing app")
            try:
                self.move_to_back()
            except Exception as exc:
                Logger.warning(f"DreamClock: could not move task to back: {exc!r}")

    def on_resume(self) -> None:
        Logger.debug("DreamClock: session resumed")
        self._ensure_service()

    def on_session_result(self, request_code: int, result_code: int) -> None:
        self.negotiator.on_session_result(request_code, result_code)
