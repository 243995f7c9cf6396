import enum
import time
from signal import Signals
import logging
from typing import Callable, NamedTuple, Optional

from launchguard.supervisor.errors import SupervisorError, TerminationError
from launchguard.supervisor.process import ExitStatus

log = logging.getLogger(__name__)


class LoopState(enum.Enum):
    RUNNING = "running"
    TERMINATING = "terminating"
    DONE = "done"


class TerminationKind(enum.Enum):
    USER_GESTURE = "user gesture"
    OS_SIGNAL = "os signal"
    SELF_EXIT = "self exit"


class TerminationReason(NamedTuple):
    """Why the run ended. Exactly one reason applies per run."""
    kind: TerminationKind
    signal: Optional[Signals] = None
    exit_status: Optional[ExitStatus] = None

    def describe(self) -> str:
        if self.kind is TerminationKind.OS_SIGNAL and self.signal is not None:
            return f"{self.kind.value} ({self.signal.name})"
        if self.kind is TerminationKind.SELF_EXIT and self.exit_status is not None:
            return f"{self.kind.value} ({self.exit_status.describe()})"
        return self.kind.value


class SupervisionLoop:
    """
    Fixed-period supervision of the child process.

    Each cycle drains queued input, checks whether the child exited on its
    own, evaluates the quit gesture and the signal flags, and performs one
    kill attempt while terminating. The decision to terminate is taken once;
    failed kill attempts are retried on the following cycles.
    """

    def __init__(
        self,
        supervisor,
        trigger,
        input_state,
        input_source,
        token,
        status,
        app_name: str,
        cycle_period: float = 0.15,
        poll_timeout: float = 0.05,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.supervisor = supervisor
        self.trigger = trigger
        self.input_state = input_state
        self.input_source = input_source
        self.token = token
        self.status = status
        self.app_name = app_name
        self.cycle_period = cycle_period
        self.poll_timeout = poll_timeout
        self.clock = clock
        self.sleep = sleep

        self.state = LoopState.RUNNING
        self.reason: Optional[TerminationReason] = None
        self.cycles = 0
        self.terminate_attempts = 0

    def run(self, max_cycles: Optional[int] = None) -> Optional[TerminationReason]:
        """
        Runs cycles until the loop is done.

        :param max_cycles: Optional upper bound on the number of cycles to run.
        :return: The termination reason, or None if max_cycles ran out first.
        """
        log.info(f"Supervising \"{self.app_name}\" (PID: {self.supervisor.pid})")
        while self.state is not LoopState.DONE:
            if max_cycles is not None and self.cycles >= max_cycles:
                break
            self.run_cycle()
        return self.reason

    def run_cycle(self) -> None:
        cycle_start = self.clock()
        self.cycles += 1

        events = self.input_source.drain()
        if events:
            self.input_state.update(events)

        if self.state is LoopState.RUNNING:
            self._check_running()
        if self.state is LoopState.TERMINATING:
            self._attempt_terminate()

        if self.state is not LoopState.DONE:
            self.pace(cycle_start)

    def pace(self, cycle_start: float) -> float:
        """
        Sleeps for whatever is left of the cycle period.

        :param cycle_start: Clock value taken at the beginning of the cycle.
        :return float: The time slept, 0 if the cycle already overran.
        """
        remaining = self.cycle_period - (self.clock() - cycle_start)
        if remaining <= 0:
            return 0.0
        self.sleep(remaining)
        return remaining

    def _check_running(self) -> None:
        try:
            exit_status = self.supervisor.poll_self_exit(self.poll_timeout)
        except SupervisorError as e:
            log.warning(f"Could not poll process state: {e}")
            exit_status = None

        if exit_status is not None:
            log.info("Process exited by itself. Quitting...")
            self._finish(TerminationReason(TerminationKind.SELF_EXIT, exit_status=exit_status))
            return

        reason = self._quit_requested()
        if reason is not None:
            log.info(f"Termination requested by {reason.describe()}. Killing {self.app_name}...")
            self.reason = reason
            self.state = LoopState.TERMINATING

    def _quit_requested(self) -> Optional[TerminationReason]:
        if self.trigger.evaluate():
            return TerminationReason(TerminationKind.USER_GESTURE)
        received = self.token.received()
        if received is not None:
            return TerminationReason(TerminationKind.OS_SIGNAL, signal=received)
        return None

    def _attempt_terminate(self) -> None:
        self.terminate_attempts += 1
        self.status.show("Killing process...")
        try:
            exit_status = self.supervisor.terminate()
        except TerminationError as e:
            log.error(f"Killing the process failed (attempt {self.terminate_attempts}): {e}")
            log.info("The supervisor will keep running until either the process terminates or killing succeeds.")
            self.status.show(f"Failed to kill {self.app_name}")
            return

        log.info("Process was successfully killed. Exiting...")
        self.status.clear()
        self._finish(self.reason._replace(exit_status=exit_status))

    def _finish(self, reason: TerminationReason) -> None:
        self.reason = reason
        self.status.clear_screen()
        self.state = LoopState.DONE
