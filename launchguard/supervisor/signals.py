import signal
import logging
import threading
from typing import Dict, Iterable, Optional

log = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownToken:
    """
    Records which termination signals have been received.

    One flag per signal kind, set from the signal handler and read once per
    supervision cycle without blocking.
    """

    def __init__(self, signals: Iterable[signal.Signals] = HANDLED_SIGNALS) -> None:
        self._flags: Dict[signal.Signals, threading.Event] = {sig: threading.Event() for sig in signals}
        self._previous_handlers = {}

    def install(self) -> None:
        """Registers the signal handlers. Must be called from the main thread."""
        for sig in self._flags:
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
        log.debug(f"Installed handlers for {', '.join(sig.name for sig in self._flags)}")

    def uninstall(self) -> None:
        """Restores the handlers that were active before install()."""
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    def _handle_signal(self, signum, frame) -> None:
        self.set(signal.Signals(signum))

    def set(self, sig: signal.Signals) -> None:
        """Marks a signal as received."""
        flag = self._flags.get(sig)
        if flag is not None:
            flag.set()

    def received(self) -> Optional[signal.Signals]:
        """Returns the first received signal in registration order, or None."""
        for sig, flag in self._flags.items():
            if flag.is_set():
                return sig
        return None

    def is_set(self) -> bool:
        return self.received() is not None
