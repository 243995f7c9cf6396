"""
Detection of the hardware the supervisor runs on.

The model decides which quit gesture is available and which input device
nodes to read from.
"""
import os
import enum
import logging
from pathlib import Path
from typing import Optional

from launchguard.config import effective_settings as config
from launchguard.input.trigger import QuitCapability

log = logging.getLogger(__name__)


class Model(enum.Enum):
    GEN1 = "gen1"
    GEN2 = "gen2"
    UNKNOWN = "unknown"


def detect_model(model_path: Optional[Path] = None) -> Model:
    """
    Reads the device model name from sysfs.

    :param model_path: Override for the sysfs machine file.
    :return Model: The detected model, UNKNOWN when it cannot be read or recognized.
    """
    path = Path(model_path or config.MODEL_PATH)
    try:
        machine = path.read_text().strip()
    except OSError as e:
        log.debug(f"Could not read device model from '{path}': {e}")
        return Model.UNKNOWN

    if machine in ("reMarkable 1.0", "reMarkable Prototype 1"):
        return Model.GEN1
    if machine.startswith("reMarkable 2"):
        return Model.GEN2
    log.debug(f"Unrecognized device model '{machine}'")
    return Model.UNKNOWN


def quit_capability(model: Model, override: str = "auto") -> QuitCapability:
    """
    Selects the quit gesture for the hardware.

    :param model: The detected model.
    :param override: 'touch' or 'buttons' to force a gesture, 'auto' to follow the hardware.
    :return QuitCapability: The gesture to use for this run.
    """
    override = (override or "auto").lower()
    if override != "auto":
        try:
            return QuitCapability(override)
        except ValueError:
            log.warning(f"Unknown quit gesture '{override}'. Detecting from hardware instead.")
    # Only the first generation has physical page buttons.
    if model is Model.GEN1:
        return QuitCapability.BUTTON_COMBO
    return QuitCapability.TOUCH_CORNERS


def input_device_path(model: Model, capability: QuitCapability) -> str:
    """Returns the device node carrying the events the quit gesture needs."""
    if capability is QuitCapability.TOUCH_CORNERS:
        configured, kind = config.TOUCH_DEVICE_PATH, "touch"
    else:
        configured, kind = config.BUTTON_DEVICE_PATH, "buttons"
    if configured:
        return configured
    defaults = config.INPUT_DEVICES.get(model.value, config.INPUT_DEVICES["gen2"])
    return defaults[kind]


def check_display_client(model: Model) -> bool:
    """
    Warns when a reMarkable 2 is used without the rm2fb framebuffer client.

    :return bool: True if the display is expected to work.
    """
    if model is Model.GEN2 and os.environ.get("RM2FB_ACTIVE") is None:
        log.error("You executed launchguard on a reMarkable 2 without using rm2fb-client.")
        log.error("      This suggests that you didn't use/enable rm2fb. Without rm2fb you")
        log.error("      won't see anything on the display!")
        log.error("      ")
        log.error("      See https://github.com/ddvk/remarkable2-framebuffer/ on how to solve")
        log.error("      this. Launchers should automatically do this.")
        return False
    return True
