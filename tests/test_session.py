# pylint: disable=missing-module-docstring,missing-function-docstring

from conftest import FakeForeground, FakePower
from dreamclock.commands import Command
from dreamclock.exemption import ExemptionNegotiator, ExemptionOutcome
from dreamclock.platform import RESULT_OK
from dreamclock.session import HostSession
from dreamclock.supervisor import LivenessSupervisor, ServiceState


def _session(starts, power=None, **kwargs):
    negotiator = ExemptionNegotiator(power or FakePower(), lambda text: None)
    return HostSession(starts, negotiator, **kwargs)


def test_create_starts_service_and_negotiates_once(starts):
    power = FakePower()
    session = _session(starts, power)

    session.on_create()
    session.on_create()

    assert starts.commands == [Command.START_ALARMS]
    assert len(power.requests) == 1


def test_resume_only_restarts_service(starts):
    power = FakePower()
    session = _session(starts, power)
    session.on_create()

    session.on_resume()
    session.on_resume()

    assert starts.commands == [Command.START_ALARMS] * 3
    assert len(power.requests) == 1


def test_resumes_keep_one_announcement(channels, clock):
    fg = FakeForeground()
    sup = LivenessSupervisor(fg, lambda command: sup.start(command), channels=channels, get_now=clock)
    session = _session(sup.start)

    session.on_create()
    for _ in range(5):
        session.on_resume()

    assert sup.state is ServiceState.FOREGROUNDED
    assert len(fg.published) == 1


def test_suppressed_launch_moves_to_back(starts):
    moved = []
    session = _session(starts, launched_suppressed=lambda: True, move_to_back=lambda: moved.append(True))

    session.on_create()

    assert session.suppressed
    assert moved == [True]


def test_normal_launch_stays_in_front(starts):
    moved = []
    session = _session(starts, move_to_back=lambda: moved.append(True))
    session.on_create()
    assert moved == []


def test_service_start_failure_is_contained():
    def broken(command):
        raise RuntimeError("not allowed")

    power = FakePower()
    session = _session(broken, power)
    session.on_create()
    session.on_resume()
    assert len(power.requests) == 1


def test_activity_result_reaches_negotiator(starts):
    session = _session(starts)
    session.on_create()

    session.on_session_result(1001, RESULT_OK)

    assert session.negotiator.outcome is ExemptionOutcome.GRANTED
