import psutil
import signal
import logging
from typing import NamedTuple, Optional

from launchguard.supervisor import shutdown
from launchguard.supervisor.errors import ProcessWaitError, TerminationError

log = logging.getLogger(__name__)


class ExitStatus(NamedTuple):
    """How the child ended. `code` is None when the exit code could not be retrieved."""
    code: Optional[int]
    forced: bool = False

    @property
    def success(self) -> bool:
        return self.code == 0

    @property
    def known(self) -> bool:
        return self.code is not None

    def describe(self) -> str:
        if self.code is None:
            return "unknown code"
        if self.code < 0:
            try:
                return f"signal {signal.Signals(-self.code).name}"
            except ValueError:
                return f"signal {-self.code}"
        return f"code {self.code}"


def log_exit_status(status: ExitStatus) -> None:
    """Logs the exit status. A missing exit code is only worth a warning."""
    if status.success:
        log.info("Process exited with code 0")
    elif status.known:
        log.warning(f"Process exited with {status.describe()}")
    else:
        log.warning("Process exited with unknown code.")


class ProcessSupervisor:
    """
    Owns the supervised child process and implements the kill escalation.

    The child is reaped at most once. After that the cached exit status is
    returned by every subsequent poll or terminate call.
    """

    def __init__(
        self,
        proc: psutil.Process,
        grace_period: float = 3.0,
        graceful_signal: signal.Signals = signal.SIGINT,
    ) -> None:
        """
        :param proc: The live child process handle.
        :param grace_period: Seconds to wait after the graceful signal before killing.
        :param graceful_signal: The signal sent first when terminating.
        """
        self.proc = proc
        self.grace_period = grace_period
        self.graceful_signal = graceful_signal
        self.exit_status: Optional[ExitStatus] = None

    @property
    def pid(self) -> int:
        return self.proc.pid

    @property
    def has_exited(self) -> bool:
        return self.exit_status is not None

    def _reaped(self, code, forced: bool = False) -> ExitStatus:
        self.exit_status = ExitStatus(None if code is shutdown.UNKNOWN else code, forced)
        log_exit_status(self.exit_status)
        return self.exit_status

    def poll_self_exit(self, timeout: float) -> Optional[ExitStatus]:
        """
        Waits up to `timeout` seconds for the child to exit on its own.

        :param timeout: Upper bound for the wait in seconds.
        :return: The exit status, or None if the child is still running.
        :raises ProcessWaitError: If waiting on the child failed.
        """
        if self.exit_status is not None:
            return self.exit_status
        code = shutdown.wait_for_exit(self.proc, timeout)
        if code is None:
            return None
        return self._reaped(code)

    def terminate(self) -> ExitStatus:
        """
        Kills the child: graceful signal, bounded wait, then SIGKILL and a final wait.

        Sends at most one graceful and one forceful signal per call. Calling it
        again after a failure is safe.

        :return ExitStatus: The final exit status of the child.
        :raises TerminationError: If the child could not be confirmed dead.
        """
        if self.exit_status is not None:
            log.info("Process already exited. Nothing to kill.")
            return self.exit_status

        if shutdown.send_graceful_signal(self.proc, self.graceful_signal):
            log.info("Waiting for process to exit...")
            try:
                code = shutdown.wait_for_exit(self.proc, self.grace_period)
            except ProcessWaitError as e:
                log.warning(f"Waiting after {self.graceful_signal.name} failed: {e}")
                code = None
            if code is not None:
                return self._reaped(code)
            log.warning(f"Graceful kill ({self.graceful_signal.name}) failed: process still running "
                        f"after {self.grace_period:.1f}s.")

        forced = shutdown.forceful_kill(self.proc)
        try:
            code = shutdown.wait_for_exit(self.proc, None)
        except ProcessWaitError as e:
            log.error(f"Final wait after SIGKILL failed: {e}")
            raise TerminationError(f"Could not confirm that process {self.pid} exited: {e}") from e
        return self._reaped(code, forced=forced)
