from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from kivy.logger import Logger

from .commands import Command, split_service_argument
from .platform import LaunchUi, StartService


class RecoveryEvent(Enum):
    BOOT_COMPLETED = "boot_completed"
    QUICKBOOT_POWER_ON = "quickboot_power_on"
    PACKAGE_REPLACED = "package_replaced"


# Vendor and version variants of the same events. New variants are added here;
# the manifest intent filter is generated from this table.
RECOVERY_ACTIONS: dict[str, RecoveryEvent] = {
    "android.intent.action.BOOT_COMPLETED": RecoveryEvent.BOOT_COMPLETED,
    "android.intent.action.QUICKBOOT_POWERON": RecoveryEvent.QUICKBOOT_POWER_ON,
    "com.htc.intent.action.QUICKBOOT_POWERON": RecoveryEvent.QUICKBOOT_POWER_ON,
    "android.intent.action.MY_PACKAGE_REPLACED": RecoveryEvent.PACKAGE_REPLACED,
    "android.intent.action.PACKAGE_REPLACED": RecoveryEvent.PACKAGE_REPLACED,
}

# Actions the OS sends with a package: data URI.
PACKAGE_SCHEME_ACTIONS: frozenset[str] = frozenset({
    "android.intent.action.PACKAGE_REPLACED",
})


def event_for_action(action: Optional[str]) -> Optional[RecoveryEvent]:
    return RECOVERY_ACTIONS.get((action or "").strip())


@dataclass(frozen=True)
class RecoveryResult:
    event: RecoveryEvent
    service_started: bool
    ui_launched: bool


class RecoveryTrigger:
    """
    Reacts to boot and package-update broadcasts by restarting the alarm
    service and bringing the UI up without focus. Runs inside a broadcast
    time budget: it only issues the two requests and never raises.
    """

    def __init__(self, start_service: StartService, launch_ui: LaunchUi) -> None:
        self.start_service = start_service
        self.launch_ui = launch_ui

    def on_broadcast(self, action: Optional[str]) -> Optional[RecoveryResult]:
        event = event_for_action(action)
        if event is None:
            Logger.debug(f"DreamClock: ignoring broadcast {action!r}")
            return None
        return self.on_recovery_event(event)

    def on_recovery_event(self, event: RecoveryEvent) -> RecoveryResult:
        Logger.info(f"DreamClock: recovery event {event.name} - starting alarm service")

        service_started = True
        try:
            self.start_service(Command.RESTART_ALARMS)
        except Exception as exc:
            service_started = False
            Logger.error(f"DreamClock: service start after {event.name} failed: {exc!r}")

        ui_launched = True
        try:
            self.launch_ui(True)
        except Exception as exc:
            ui_launched = False
            Logger.error(f"DreamClock: suppressed UI launch after {event.name} failed: {exc!r}")

        if service_started and ui_launched:
            Logger.info("DreamClock: alarm service and main activity started")
        return RecoveryResult(event=event, service_started=service_started, ui_launched=ui_launched)


def dispatch_service_argument(
    start_service: StartService,
    launch_ui: LaunchUi,
    argument: Optional[str],
) -> Optional[RecoveryResult]:
    """
    Entry point of the alarm service process. A forwarded broadcast runs the
    recovery trigger; anything else, including an unknown forwarded action,
    is a plain start with the decoded command.
    """
    command, action = split_service_argument(argument)
    result = None
    if action:
        result = RecoveryTrigger(start_service, launch_ui).on_broadcast(action)
    if result is None:
        start_service(command)
    return result
