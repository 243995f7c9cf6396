"""
The Supervisor package.
Supervises the lifecycle of the single child process.

This package contains the SupervisionLoop state machine and its helper
modules, which together handle launching the child, detecting its exit,
reacting to termination signals and escalating the kill.
"""
from .errors import LaunchError, ProcessWaitError, SupervisorError, TerminationError
from .loop import LoopState, SupervisionLoop, TerminationKind, TerminationReason
from .process import ExitStatus, ProcessSupervisor
from .signals import ShutdownToken

__all__ = [
    'ExitStatus', 'LaunchError', 'LoopState', 'ProcessSupervisor', 'ProcessWaitError',
    'ShutdownToken', 'SupervisionLoop', 'SupervisorError', 'TerminationError',
    'TerminationKind', 'TerminationReason',
]
