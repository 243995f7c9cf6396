class SupervisorError(Exception):
    """Base class for errors raised while supervising the child process."""


class LaunchError(SupervisorError):
    """The child process could not be started."""


class ProcessWaitError(SupervisorError):
    """Waiting on the child process failed for a reason other than a timeout."""


class TerminationError(SupervisorError):
    """The child could not be confirmed dead after the kill escalation."""
