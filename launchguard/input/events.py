import enum
import threading
from typing import Dict, Iterable, List, NamedTuple, Tuple, Union


class Button(enum.Enum):
    """Physical buttons, valued by their Linux key codes."""
    LEFT = 105
    RIGHT = 106
    HOME = 102
    POWER = 116
    WAKEUP = 143


class TouchEvent(NamedTuple):
    """Update of a single touch point, keyed by its tracking id."""
    finger_id: int
    x: int
    y: int
    pressed: bool


class ButtonEvent(NamedTuple):
    """Press or release of a physical button."""
    button: Button
    pressed: bool


InputEvent = Union[TouchEvent, ButtonEvent]


class Finger(NamedTuple):
    x: int
    y: int
    pressed: bool


class InputState:
    """
    Current known state of the touch points and buttons.

    Events are applied in arrival order, last write wins per identifier. The
    state is never rolled back and does not keep history.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fingers: Dict[int, Finger] = {}
        self._buttons: Dict[Button, bool] = {}

    def update(self, events: Iterable[InputEvent]) -> int:
        """
        Applies a batch of events.

        :param events: Events in arrival order.
        :return int: The number of events applied.
        """
        applied = 0
        with self._lock:
            for event in events:
                if isinstance(event, TouchEvent):
                    self._fingers[event.finger_id] = Finger(event.x, event.y, event.pressed)
                elif isinstance(event, ButtonEvent):
                    self._buttons[event.button] = event.pressed
                else:
                    raise TypeError(f"Unsupported input event: {event!r}")
                applied += 1
        return applied

    def pressed_points(self) -> List[Tuple[int, int]]:
        """Positions of all currently pressed touch points."""
        with self._lock:
            return [(f.x, f.y) for f in self._fingers.values() if f.pressed]

    def is_pressed(self, button: Button) -> bool:
        with self._lock:
            return self._buttons.get(button, False)

    def finger(self, finger_id: int) -> Finger:
        with self._lock:
            return self._fingers[finger_id]
