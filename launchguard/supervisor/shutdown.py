"""
The individual steps of the kill escalation.

Each helper performs exactly one action against the child and reports what
happened, leaving the escalation policy to ProcessSupervisor.terminate().
"""
import signal
import psutil
import logging
from typing import Optional, Union

from launchguard.supervisor.errors import ProcessWaitError

log = logging.getLogger(__name__)

# psutil.wait() returns None when the exit code cannot be determined.
UNKNOWN = object()


def resolve_signal(name_or_number: Union[str, int]) -> signal.Signals:
    """
    Resolves a signal given as a name ('SIGINT', 'INT') or a number.

    :param name_or_number: The signal to resolve.
    :return signal.Signals: The resolved signal.
    :raises ValueError: If the signal is unknown.
    """
    if isinstance(name_or_number, int):
        return signal.Signals(name_or_number)
    name = str(name_or_number).upper()
    if not name.startswith("SIG"):
        name = f"SIG{name}"
    try:
        return signal.Signals[name]
    except KeyError:
        raise ValueError(f"Unknown signal '{name_or_number}'") from None


def send_graceful_signal(proc: psutil.Process, sig: signal.Signals) -> bool:
    """
    Sends the graceful termination signal to the process.

    :param proc: The process to signal.
    :param sig: The signal to send.
    :return bool: True if the signal was delivered, False otherwise.
    """
    try:
        log.info(f"Killing process gracefully ({sig.name})...")
        proc.send_signal(sig)
        return True
    except psutil.NoSuchProcess:
        log.warning(f"Process {proc.pid} no longer exists, graceful signal not delivered.")
    except (psutil.Error, OSError) as e:
        log.warning(f"Failed to send {sig.name} to process {proc.pid}: {e}")
    return False


def forceful_kill(proc: psutil.Process) -> bool:
    """
    Sends the unconditional kill signal to the process.

    :param proc: The process to kill.
    :return bool: True if the signal was delivered, False otherwise.
    """
    try:
        log.warning("Stabbing process (SIGKILL)...")
        proc.kill()
        return True
    except psutil.NoSuchProcess:
        log.warning(f"Process {proc.pid} no longer exists, skipping forceful kill.")
    except (psutil.Error, OSError) as e:
        log.error(f"Stabbing failed. Waiting for the process anyway. Error: {e}")
    return False


def wait_for_exit(proc: psutil.Process, timeout: Optional[float]):
    """
    Waits for the process to exit and reaps it.

    :param proc: The process to wait for.
    :param timeout: Seconds to wait, or None to wait without a bound.
    :return: The exit code, UNKNOWN if the process ended without a retrievable
        code, or None if it is still running after the timeout.
    :raises ProcessWaitError: If waiting failed for any other reason.
    """
    try:
        code = proc.wait(timeout=timeout)
    except psutil.TimeoutExpired:
        return None
    except (psutil.Error, ChildProcessError, OSError) as e:
        raise ProcessWaitError(f"Waiting on process {proc.pid} failed: {e}") from e
    return UNKNOWN if code is None else int(code)
