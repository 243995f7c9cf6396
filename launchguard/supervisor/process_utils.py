import sys
import psutil
import logging
import threading
import subprocess
from typing import Any, Callable, Dict, List, Optional

from launchguard.supervisor.errors import LaunchError

log = logging.getLogger(__name__)


#* --- Child Output ---
def _read_pipe(pipe, process_name: str, level: int, line_handler: Optional[Callable[[str], None]] = None) -> None:
    """Target function for reader threads. Reads and logs lines from a subprocess pipe."""
    proc_logger = logging.getLogger(f"proc.{process_name}")
    try:
        for line_bytes in iter(pipe.readline, b""):
            line = line_bytes.decode("utf-8", errors="replace").rstrip()
            if not line:
                continue
            if line_handler:
                line_handler(line)
            else:
                proc_logger.log(level, line)
    except Exception as e:
        proc_logger.debug(f"Pipe reader for {process_name} stream exited: {e}")
    finally:
        pipe.close()


def log_process_output(process: subprocess.Popen, name: str, line_handler: Optional[Callable[[str], None]] = None) -> List[threading.Thread]:
    """
    Starts background threads to consume and log a process's stdout/stderr.

    The threads keep the pipes drained so the child never blocks on a full
    pipe. Stdout lines are logged at INFO, stderr lines at ERROR.

    :param process: The process whose pipes should be consumed.
    :param name: The logical name of the process for the 'proc.<name>' logger.
    :param line_handler: An optional callable receiving stdout lines instead of the logger.
    :return list: The started reader threads.
    """
    threads = []
    if process.stdout:
        threads.append(threading.Thread(
            target=_read_pipe,
            args=(process.stdout, name, logging.INFO, line_handler),
            daemon=True,
            name=f"{name}-stdout",
        ))
    if process.stderr:
        threads.append(threading.Thread(
            target=_read_pipe,
            args=(process.stderr, name, logging.ERROR),
            daemon=True,
            name=f"{name}-stderr",
        ))
    for thread in threads:
        thread.start()
    return threads


#* --- Process Creation ---
def _get_popen_kwargs(pipe_output: bool) -> Dict[str, Any]:
    """Returns the keyword arguments for psutil.Popen."""
    popen_kwargs: Dict[str, Any] = {"stdin": subprocess.DEVNULL}
    if pipe_output:
        popen_kwargs["stdout"] = subprocess.PIPE
        popen_kwargs["stderr"] = subprocess.PIPE
    if sys.platform != "win32":
        # Keep terminal Ctrl+C away from the child. The supervisor forwards it.
        popen_kwargs["start_new_session"] = True
    return popen_kwargs


def launch_process(command: str, args: List[str], name: Optional[str] = None, pipe_output: bool = True) -> psutil.Popen:
    """
    Launches the supervised child process.

    :param command: Path to the executable.
    :param args: Arguments passed to the executable.
    :param name: Logical name used for the child's output logger, defaults to the command.
    :param pipe_output: If True, the child's stdout/stderr are relayed through logging.
    :return psutil.Popen: The live process handle.
    :raises LaunchError: If the executable cannot be started.
    """
    name = name or command
    log.info(f"Starting process \"{command}\" with arguments: {args}")
    try:
        proc = psutil.Popen([command, *args], **_get_popen_kwargs(pipe_output))
    except (OSError, ValueError, psutil.Error) as e:
        log.critical(f"Failed to start process '{command}': {e}")
        raise LaunchError(f"Failed to start '{command}': {e}") from e

    if pipe_output:
        log_process_output(proc, name)
    log.info(f"Process started with PID: {proc.pid}")
    return proc
