from __future__ import annotations


class DreamClockError(Exception):
    pass


class PolicyDenied(DreamClockError):
    """The OS refused a foreground elevation or an exemption request."""


class EnvironmentUnsupported(DreamClockError):
    """The capability does not exist on this platform version."""


class DownstreamLaunchFailed(DreamClockError):
    """Starting a service or an activity raised inside the OS API."""


class IllegalTransition(DreamClockError):
    def __init__(self, current, target) -> None:
        super().__init__(f"illegal service transition {current.name} -> {target.name}")
        self.current = current
        self.target = target
