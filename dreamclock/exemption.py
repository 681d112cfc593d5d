from __future__ import annotations

from enum import Enum
from typing import Optional

from kivy.logger import Logger

from .config import Settings
from .platform import API_M, RESULT_OK, PowerApi, Toast


GRANTED_MESSAGE = "Battery optimization disabled for reliable alarms"
DENIED_MESSAGE = "Battery optimization still enabled - alarms may be unreliable"


class ExemptionOutcome(Enum):
    NOT_REQUESTED = "not_requested"
    UNSUPPORTED = "unsupported"
    ALREADY_EXEMPT = "already_exempt"
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


class ExemptionNegotiator:
    """
    Asks once per UI session to exempt the app from battery optimisation.
    The answer may never arrive; PENDING and DENIED both mean best-effort.
    """

    def __init__(self, power: PowerApi, toast: Toast, settings: Optional[Settings] = None) -> None:
        self.power = power
        self.toast = toast
        self.settings = settings or Settings()
        self.outcome = ExemptionOutcome.NOT_REQUESTED

    @property
    def best_effort(self) -> bool:
        return self.outcome in (ExemptionOutcome.PENDING, ExemptionOutcome.DENIED)

    def request_exemption(self) -> ExemptionOutcome:
        if self.outcome is not ExemptionOutcome.NOT_REQUESTED:
            return self.outcome
        try:
            sdk = self.power.sdk_int()
        except Exception as exc:
            Logger.warning(f"DreamClock: SDK level probe failed: {exc!r}")
            sdk = 0
        if sdk < API_M:
            Logger.debug(f"DreamClock: no background throttling on SDK {sdk}")
            self.outcome = ExemptionOutcome.UNSUPPORTED
            return self.outcome

        try:
            package = self.power.package_name()
            if self.power.is_exempt(package):
                self.outcome = ExemptionOutcome.ALREADY_EXEMPT
                return self.outcome
            self.power.request_exemption(package, self.settings.exemption_request_code)
        except Exception as exc:
            Logger.error(f"DreamClock: error requesting battery optimization exemption: {exc!r}")
            self.outcome = ExemptionOutcome.DENIED
            return self.outcome

        Logger.info(f"DreamClock: battery optimization exemption requested for {package}")
        self.outcome = ExemptionOutcome.PENDING
        return self.outcome

    def on_session_result(self, request_code: int, result_code: int) -> bool:
        if request_code != self.settings.exemption_request_code:
            return False
        self.on_exemption_result(result_code == RESULT_OK)
        return True

    def on_exemption_result(self, granted: bool) -> None:
        if granted:
            self.outcome = ExemptionOutcome.GRANTED
            Logger.info("DreamClock: battery optimization exemption granted")
            message = GRANTED_MESSAGE
        else:
            self.outcome = ExemptionOutcome.DENIED
            Logger.warning("DreamClock: exemption denied, alarms run best-effort")
            message = DENIED_MESSAGE
        try:
            self.toast(message)
        except Exception as exc:
            Logger.warning(f"DreamClock: toast failed: {exc!r}")
