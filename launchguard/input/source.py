import os
import queue
import select
import struct
import logging
import threading
from typing import Dict, List, Optional

from launchguard.input.events import Button, ButtonEvent, InputEvent, TouchEvent

log = logging.getLogger(__name__)

#* --- Linux input_event layout and codes ---
EVENT_FORMAT = "llHHi"
EVENT_SIZE = struct.calcsize(EVENT_FORMAT)

EV_SYN = 0x00
EV_KEY = 0x01
EV_ABS = 0x03
SYN_REPORT = 0x00
ABS_MT_SLOT = 0x2f
ABS_MT_POSITION_X = 0x35
ABS_MT_POSITION_Y = 0x36
ABS_MT_TRACKING_ID = 0x39

KNOWN_BUTTONS = {button.value: button for button in Button}


class InputSource:
    """
    Single-producer, single-consumer event queue.

    A producer thread calls put(); the supervision loop calls drain() once
    per cycle, which never blocks.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[InputEvent]" = queue.Queue()

    def put(self, event: InputEvent) -> None:
        self._queue.put(event)

    def drain(self) -> List[InputEvent]:
        """Returns every event queued so far, in arrival order."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def start(self) -> None:
        """Nothing to start. A bare source is the idle fallback used when no input device opens."""

    def stop(self) -> None:
        """Nothing to stop."""


class TouchTransform:
    """Maps raw digitizer coordinates to display pixels."""

    def __init__(self, max_x: int, max_y: int, width: int, height: int,
                 invert_x: bool = False, invert_y: bool = False) -> None:
        self.max_x = max_x
        self.max_y = max_y
        self.width = width
        self.height = height
        self.invert_x = invert_x
        self.invert_y = invert_y

    def __call__(self, raw_x: int, raw_y: int):
        x = min(max(raw_x, 0), self.max_x) * (self.width - 1) // max(self.max_x, 1)
        y = min(max(raw_y, 0), self.max_y) * (self.height - 1) // max(self.max_y, 1)
        if self.invert_x:
            x = self.width - 1 - x
        if self.invert_y:
            y = self.height - 1 - y
        return x, y


class _Slot:
    __slots__ = ("tracking_id", "raw_x", "raw_y", "dirty")

    def __init__(self) -> None:
        self.tracking_id = -1
        self.raw_x = 0
        self.raw_y = 0
        self.dirty = False


class EvdevDecoder:
    """
    Turns raw input_event records into InputEvents.

    Multitouch follows protocol B: slot updates are collected and emitted on
    SYN_REPORT, using the slot number as the finger id.
    """

    def __init__(self, transform: Optional[TouchTransform] = None) -> None:
        self.transform = transform
        self._slots: Dict[int, _Slot] = {}
        self._current_slot = 0

    def _slot(self) -> _Slot:
        return self._slots.setdefault(self._current_slot, _Slot())

    def feed(self, ev_type: int, code: int, value: int) -> List[InputEvent]:
        if ev_type == EV_KEY:
            button = KNOWN_BUTTONS.get(code)
            if button is None:
                return []
            # value 2 is autorepeat while held
            return [ButtonEvent(button, value != 0)]

        if ev_type == EV_ABS:
            if code == ABS_MT_SLOT:
                self._current_slot = value
            elif code == ABS_MT_TRACKING_ID:
                slot = self._slot()
                slot.tracking_id = value
                slot.dirty = True
            elif code == ABS_MT_POSITION_X:
                slot = self._slot()
                slot.raw_x = value
                slot.dirty = True
            elif code == ABS_MT_POSITION_Y:
                slot = self._slot()
                slot.raw_y = value
                slot.dirty = True
            return []

        if ev_type == EV_SYN and code == SYN_REPORT:
            return self._flush()
        return []

    def _flush(self) -> List[InputEvent]:
        events = []
        for slot_id, slot in sorted(self._slots.items()):
            if not slot.dirty:
                continue
            slot.dirty = False
            if self.transform:
                x, y = self.transform(slot.raw_x, slot.raw_y)
            else:
                x, y = slot.raw_x, slot.raw_y
            events.append(TouchEvent(slot_id, x, y, slot.tracking_id != -1))
        return events


class EvdevInputSource(InputSource):
    """Reads an evdev device node in a background thread and queues decoded events."""

    def __init__(self, device_path: str, decoder: Optional[EvdevDecoder] = None, poll_interval: float = 0.2) -> None:
        super().__init__()
        self.device_path = device_path
        self.decoder = decoder or EvdevDecoder()
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Opens the device and starts the reader thread."""
        fd = os.open(self.device_path, os.O_RDONLY)
        log.info(f"Reading input events from {self.device_path}")
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._read_events,
            args=(fd,),
            daemon=True,
            name="InputReaderThread"
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.poll_interval * 2)
            self._thread = None

    def _read_events(self, fd: int) -> None:
        buffer = b""
        try:
            while not self._stop_event.is_set():
                readable, _, _ = select.select([fd], [], [], self.poll_interval)
                if not readable:
                    continue
                chunk = os.read(fd, EVENT_SIZE * 64)
                if not chunk:
                    log.warning(f"Input device {self.device_path} closed.")
                    break
                buffer += chunk
                while len(buffer) >= EVENT_SIZE:
                    _, _, ev_type, code, value = struct.unpack(EVENT_FORMAT, buffer[:EVENT_SIZE])
                    buffer = buffer[EVENT_SIZE:]
                    for event in self.decoder.feed(ev_type, code, value):
                        self.put(event)
        except OSError as e:
            if not self._stop_event.is_set():
                log.error(f"Error while reading input device {self.device_path}: {e}", exc_info=True)
        finally:
            os.close(fd)
        log.info("Input reader thread has stopped.")
