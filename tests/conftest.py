"""Shared fixtures and fakes for launchguard tests."""

import signal
from typing import List, Optional

import psutil
import pytest

from launchguard.display.geometry import Rect
from launchguard.input import InputSource, InputState
from launchguard.supervisor import ExitStatus, ShutdownToken, TerminationError


class FakeProcess:
    """
    psutil.Process stand-in with scripted wait results.

    Each entry of `wait_results` is consumed by one wait() call: an int or None
    is returned, an exception instance is raised. Once the script runs out,
    wait() times out for bounded waits and returns `final_code` for unbounded ones.
    """

    def __init__(self, pid: int = 4242, wait_results=None, final_code: Optional[int] = 0,
                 signal_error: Optional[Exception] = None, kill_error: Optional[Exception] = None):
        self.pid = pid
        self.wait_results = list(wait_results or [])
        self.final_code = final_code
        self.signal_error = signal_error
        self.kill_error = kill_error
        self.signals: List[signal.Signals] = []
        self.kills = 0
        self.waits: List[Optional[float]] = []

    def send_signal(self, sig):
        self.signals.append(sig)
        if self.signal_error is not None:
            raise self.signal_error

    def kill(self):
        self.kills += 1
        if self.kill_error is not None:
            raise self.kill_error

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self.wait_results:
            result = self.wait_results.pop(0)
            if isinstance(result, BaseException):
                raise result
            return result
        if timeout is None:
            return self.final_code
        raise psutil.TimeoutExpired(timeout, self.pid)


class FakeSupervisor:
    """ProcessSupervisor stand-in for loop tests."""

    def __init__(self, clock=None, exit_on_poll: Optional[int] = None, exit_status: ExitStatus = ExitStatus(0),
                 terminate_failures: int = 0, poll_cost: float = 0.0):
        self.pid = 4242
        self.clock = clock
        self.exit_on_poll = exit_on_poll
        self.exit_status = exit_status
        self.terminate_failures = terminate_failures
        self.poll_cost = poll_cost
        self.polls = 0
        self.terminate_calls = 0

    def poll_self_exit(self, timeout):
        self.polls += 1
        if self.clock is not None:
            self.clock.advance(self.poll_cost)
        if self.exit_on_poll is not None and self.polls >= self.exit_on_poll:
            return self.exit_status
        return None

    def terminate(self):
        self.terminate_calls += 1
        if self.terminate_calls <= self.terminate_failures:
            raise TerminationError("kill failed")
        return self.exit_status


class FakeTrigger:
    def __init__(self, values=None):
        self.values = list(values or [])
        self.evaluations = 0

    def evaluate(self):
        self.evaluations += 1
        if self.values:
            return self.values.pop(0)
        return False


class FakeClock:
    """Monotonic clock whose time only moves when advanced or slept."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingRenderer:
    """Renderer that records every call and returns a fixed-height text rect."""

    def __init__(self, width: int = 1404, height: int = 1872):
        self.width = width
        self.height = height
        self.calls = []

    def clear(self):
        self.calls.append(("clear",))

    def clear_area(self, rect):
        self.calls.append(("clear_area", rect))

    def draw_text(self, pos, text, size):
        width = len(text) * 10
        x = (self.width - width) // 2 if pos[0] is None else pos[0]
        y = (self.height - int(size)) // 2 if pos[1] is None else pos[1]
        rect = Rect(x, y, width, int(size))
        self.calls.append(("draw_text", text, rect))
        return rect

    def draw_image(self, pos, image):
        x = (self.width - image.width) // 2 if pos[0] is None else pos[0]
        y = (self.height - image.height) // 2 if pos[1] is None else pos[1]
        rect = Rect(x, y, image.width, image.height)
        self.calls.append(("draw_image", rect))
        return rect

    def draw_rect(self, pos, size, border=1):
        rect = Rect(pos[0], pos[1], size[0], size[1])
        self.calls.append(("draw_rect", rect))
        return rect

    def refresh_full(self):
        self.calls.append(("refresh_full",))

    def refresh_partial(self, rect):
        self.calls.append(("refresh_partial", rect))

    def names(self):
        return [call[0] for call in self.calls]

    def texts(self):
        return [call[1] for call in self.calls if call[0] == "draw_text"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def input_state():
    return InputState()


@pytest.fixture
def input_source():
    return InputSource()


@pytest.fixture
def token():
    return ShutdownToken()
