"""
Input handling: event types, the current input state, the evdev event
source and the quit gesture strategies.
"""

from .events import Button, ButtonEvent, InputEvent, InputState, TouchEvent
from .source import EvdevDecoder, EvdevInputSource, InputSource, TouchTransform
from .trigger import ButtonComboTrigger, QuitCapability, TouchCornersTrigger, create_trigger

__all__ = [
    "Button", "ButtonEvent", "InputEvent", "InputState", "TouchEvent",
    "EvdevDecoder", "EvdevInputSource", "InputSource", "TouchTransform",
    "ButtonComboTrigger", "QuitCapability", "TouchCornersTrigger", "create_trigger",
]
