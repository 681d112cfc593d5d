from __future__ import annotations

import threading
from collections import deque
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Deque, Optional

from kivy.logger import Logger

from .commands import Command
from .config import Settings
from .errors import IllegalTransition, PolicyDenied
from .platform import AnnouncementChannel, ForegroundApi, LivenessAnnouncement, StartService


class ServiceState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    FOREGROUNDED = "foregrounded"
    DESTROYED = "destroyed"


_TRANSITIONS: dict[ServiceState, frozenset[ServiceState]] = {
    ServiceState.STOPPED: frozenset({ServiceState.STARTING, ServiceState.DESTROYED}),
    ServiceState.STARTING: frozenset({ServiceState.FOREGROUNDED, ServiceState.DESTROYED}),
    ServiceState.FOREGROUNDED: frozenset({ServiceState.DESTROYED}),
    # STOPPED only when the package is being removed.
    ServiceState.DESTROYED: frozenset({ServiceState.STARTING, ServiceState.STOPPED}),
}


class ChannelRegistry:
    """
    Process-wide create-if-absent registry for announcement channels.
    A channel id is marked registered only after its creation call returned.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registered: set[str] = set()

    def ensure(self, channel: AnnouncementChannel, create: Callable[[AnnouncementChannel], None]) -> bool:
        with self._lock:
            if channel.id in self._registered:
                return False
            create(channel)
            self._registered.add(channel.id)
            return True

    def is_registered(self, channel_id: str) -> bool:
        with self._lock:
            return channel_id in self._registered


CHANNELS = ChannelRegistry()


class ElevationBackoff:
    """Bounded exponential backoff for re-attempting a refused foreground elevation."""

    def __init__(self, initial_s: float, max_s: float, max_attempts: int) -> None:
        self.initial_s = initial_s
        self.max_s = max_s
        self.max_attempts = max_attempts
        self.attempts = 0
        self.next_at: Optional[datetime] = None

    def reset(self) -> None:
        self.attempts = 0
        self.next_at = None

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def record_denial(self, now: datetime) -> Optional[float]:
        """Returns the delay before the next attempt, or None once the budget is spent."""
        if self.exhausted:
            self.next_at = None
            return None
        delay = min(self.max_s, self.initial_s * (2 ** self.attempts))
        self.attempts += 1
        self.next_at = now + timedelta(seconds=delay)
        return delay

    def due(self, now: datetime) -> bool:
        return self.next_at is not None and now >= self.next_at


class LivenessSupervisor:
    """
    Keeps the alarm service foregrounded.

    `start` is idempotent and may be called from any thread. `stop` is the
    OS termination callback: it retracts the announcement and asks for a
    RESTART_SERVICE start before returning. Nothing raised by the OS adapters
    escapes either call.
    """

    def __init__(
        self,
        foreground: ForegroundApi,
        start_service: StartService,
        settings: Optional[Settings] = None,
        channels: Optional[ChannelRegistry] = None,
        get_now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or Settings()
        self.foreground = foreground
        self.start_service = start_service
        self.channels = channels if channels is not None else CHANNELS
        self.get_now = get_now
        self.backoff = ElevationBackoff(
            self.settings.backoff_initial_s,
            self.settings.backoff_max_s,
            self.settings.backoff_max_attempts,
        )
        self.transitions: Deque[tuple[ServiceState, ServiceState]] = deque(maxlen=32)
        self._lock = threading.RLock()
        self._state = ServiceState.STOPPED
        self._announcement: Optional[LivenessAnnouncement] = None

    @property
    def state(self) -> ServiceState:
        with self._lock:
            return self._state

    @property
    def announcement(self) -> Optional[LivenessAnnouncement]:
        with self._lock:
            return self._announcement

    @property
    def is_running(self) -> bool:
        return self.state in (ServiceState.STARTING, ServiceState.FOREGROUNDED)

    @property
    def channel(self) -> AnnouncementChannel:
        s = self.settings
        return AnnouncementChannel(id=s.channel_id, name=s.channel_name, description=s.channel_description)

    def _new_announcement(self) -> LivenessAnnouncement:
        s = self.settings
        return LivenessAnnouncement(
            notification_id=s.notification_id,
            channel_id=s.channel_id,
            title=s.announcement_title,
            text=s.announcement_text,
        )

    # ---- lifecycle ----
    def start(self, command: Command = Command.START_ALARMS) -> ServiceState:
        with self._lock:
            Logger.info(f"DreamClock: start requested command={command.value} state={self._state.name}")
            if self._state is ServiceState.FOREGROUNDED:
                return self._state
            if self._state in (ServiceState.STOPPED, ServiceState.DESTROYED):
                self._transition(ServiceState.STARTING)
            self.backoff.reset()
            self._ensure_channel()
            self._elevate()
            return self._state

    def stop(self, removing: bool = False) -> ServiceState:
        with self._lock:
            if self._state is ServiceState.DESTROYED:
                return self._state
            Logger.warning("DreamClock: alarm service destroyed - attempting restart")
            self._retract()
            self._transition(ServiceState.DESTROYED)
            self._on_destroyed(removing)
            return self._state

    def tick(self) -> ServiceState:
        """Re-attempts a refused elevation once its backoff delay has passed."""
        with self._lock:
            if self._state is ServiceState.STARTING and self.backoff.due(self.get_now()):
                Logger.info(f"DreamClock: retrying foreground elevation (attempt {self.backoff.attempts + 1})")
                self._ensure_channel()
                self._elevate()
            return self._state

    # ---- transitions ----
    def _transition(self, target: ServiceState) -> None:
        current = self._state
        if target not in _TRANSITIONS[current]:
            raise IllegalTransition(current, target)
        self._state = target
        self.transitions.append((current, target))
        Logger.debug(f"DreamClock: {current.name} -> {target.name}")

    def _on_destroyed(self, removing: bool) -> None:
        # DESTROYED -> STARTING: the restart request comes back through start().
        if removing:
            Logger.info("DreamClock: package removal, not restarting")
            self._transition(ServiceState.STOPPED)
            return
        try:
            self.start_service(Command.RESTART_SERVICE)
        except Exception as exc:
            Logger.error(f"DreamClock: restart request failed: {exc!r}")

    # ---- OS calls ----
    def _ensure_channel(self) -> None:
        try:
            if self.channels.ensure(self.channel, self.foreground.create_channel):
                Logger.info(f"DreamClock: announcement channel {self.settings.channel_id} registered")
        except Exception as exc:
            Logger.warning(f"DreamClock: announcement channel registration failed: {exc!r}")

    def _elevate(self) -> None:
        announcement = self._new_announcement()
        try:
            self.foreground.start_foreground(announcement.notification_id, announcement)
        except PolicyDenied as exc:
            Logger.warning(f"DreamClock: foreground elevation denied: {exc}")
            self._schedule_retry()
            return
        except Exception as exc:
            Logger.error(f"DreamClock: foreground elevation failed: {exc!r}")
            self._schedule_retry()
            return
        self._announcement = announcement
        self._transition(ServiceState.FOREGROUNDED)

    def _schedule_retry(self) -> None:
        delay = self.backoff.record_denial(self.get_now())
        if delay is None:
            Logger.warning("DreamClock: elevation retries exhausted, running best-effort in background")
        else:
            Logger.info(f"DreamClock: running best-effort, next elevation attempt in {delay:.0f}s")

    def _retract(self) -> None:
        if self._announcement is None:
            return
        self._announcement = None
        try:
            self.foreground.stop_foreground()
        except Exception as exc:
            Logger.warning(f"DreamClock: retracting announcement failed: {exc!r}")
