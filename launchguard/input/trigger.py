"""
Quit gesture evaluation.

Exactly one strategy is active per run. The strategy is picked once at startup
from the hardware capability, never by the user.
"""
import enum
import logging
from typing import Tuple

from launchguard.display.geometry import Rect
from launchguard.input.events import Button, InputState

log = logging.getLogger(__name__)


class QuitCapability(enum.Enum):
    TOUCH_CORNERS = "touch"
    BUTTON_COMBO = "buttons"


class TouchCornersTrigger:
    """Holds when exactly two fingers touch, covering both bottom corners."""

    capability = QuitCapability.TOUCH_CORNERS

    def __init__(self, state: InputState, bottom_left: Rect, bottom_right: Rect) -> None:
        self.state = state
        self.bottom_left = bottom_left
        self.bottom_right = bottom_right

    @property
    def regions(self) -> Tuple[Rect, Rect]:
        return self.bottom_left, self.bottom_right

    def evaluate(self) -> bool:
        points = self.state.pressed_points()
        if len(points) != 2:
            return False
        hitting_bottom_left = any(self.bottom_left.contains(x, y) for x, y in points)
        hitting_bottom_right = any(self.bottom_right.contains(x, y) for x, y in points)
        return hitting_bottom_left and hitting_bottom_right


class ButtonComboTrigger:
    """Holds while both designated buttons are pressed."""

    capability = QuitCapability.BUTTON_COMBO

    def __init__(self, state: InputState, first: Button = Button.LEFT, second: Button = Button.RIGHT) -> None:
        if first == second:
            raise ValueError("The button combo needs two different buttons.")
        self.state = state
        self.buttons = (first, second)

    def evaluate(self) -> bool:
        return all(self.state.is_pressed(button) for button in self.buttons)


def create_trigger(capability: QuitCapability, state: InputState, regions: Tuple[Rect, Rect],
                   buttons: Tuple[Button, Button] = (Button.LEFT, Button.RIGHT)):
    """
    Builds the quit trigger matching the hardware capability.

    :param capability: The detected quit capability.
    :param state: The input state the trigger reads from.
    :param regions: The bottom-left and bottom-right quit regions (touch only).
    :param buttons: The two designated buttons (buttons only).
    :return: A trigger exposing evaluate().
    """
    if capability is QuitCapability.TOUCH_CORNERS:
        log.debug(f"Quit gesture: touch both corners {regions[0]} and {regions[1]}")
        return TouchCornersTrigger(state, *regions)
    if capability is QuitCapability.BUTTON_COMBO:
        log.debug(f"Quit gesture: press {buttons[0].name} and {buttons[1].name}")
        return ButtonComboTrigger(state, *buttons)
    raise ValueError(f"Unknown quit capability: {capability!r}")
