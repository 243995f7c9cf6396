"""
This module contains the default configuration settings for LaunchGuard.
It defines display geometry, supervision timings, input device paths and
logging settings. Every UPPERCASE name here can be overridden from the
environment (or a .env file), and the ones listed in MODIFIABLE_SETTINGS
can additionally be overridden from the JSON overrides file.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 't', 'yes', 'y')


#* --- Core Paths ---
CONFIG_DIR = pathlib.Path(os.getenv("LAUNCHGUARD_CONFIG_DIR", pathlib.Path.home() / ".config" / "launchguard"))
OVERRIDES_JSON_PATH = pathlib.Path(os.getenv("LAUNCHGUARD_OVERRIDES", CONFIG_DIR / "overrides.json"))

#* --- Process Title ---
PROCESS_TITLE_PREFIX = "LaunchGuard"

#* --- Supervision Timings (milliseconds) ---
CYCLE_PERIOD_MS = int(os.getenv("LAUNCHGUARD_CYCLE_PERIOD_MS", "150"))
SELF_EXIT_POLL_MS = int(os.getenv("LAUNCHGUARD_SELF_EXIT_POLL_MS", "50"))
GRACE_PERIOD_MS = int(os.getenv("LAUNCHGUARD_GRACE_PERIOD_MS", "3000"))
# Name of the signal sent first when killing the child.
GRACEFUL_SIGNAL = os.getenv("LAUNCHGUARD_GRACEFUL_SIGNAL", "SIGINT").upper()

#* --- Child Output ---
# Relay the child's stdout/stderr through the 'proc.<name>' loggers.
PIPE_CHILD_OUTPUT = _env_bool("LAUNCHGUARD_PIPE_CHILD_OUTPUT", "True")

#* --- Display Geometry ---
DISPLAY_WIDTH = 1404
DISPLAY_HEIGHT = 1872
CORNER_SIZE = 100

STATUS_TEXT_OFFSET = 300  # From the bottom edge
STATUS_TEXT_SIZE = 60.0
HINT_TEXT_OFFSET = 70  # Top of the hint line, from the bottom edge
HINT_TEXT_SIZE = 35.0
NAME_TEXT_SIZE = 50.0
RUNNING_TEXT_SIZE = 25.0
ICON_NAME_GAP = 55
NAME_RUNNING_GAP = 25
CUSTOM_IMAGE_ERROR_OFFSET = 110

HINT_TEXT_TOUCH = "Touch both bottom corners to manually quit."
HINT_TEXT_BUTTONS = "Press the LEFT and RIGHT buttons to manually quit."

#* --- Icon ---
ICON_SIZE_DEFAULT = 500
ICON_SIZE_MIN = 50
ICON_SIZE_MAX = 1404

#* --- Rendering ---
FONT_PATH = os.getenv("LAUNCHGUARD_FONT_PATH", "/usr/share/fonts/ttf/noto/NotoSans-Regular.ttf")
FRAMEBUFFER_PATH = os.getenv("LAUNCHGUARD_FRAMEBUFFER", "/dev/fb0")
# Bytes per framebuffer row. The reMarkable pads each row to 1408 pixels.
FRAMEBUFFER_LINE_LENGTH = int(os.getenv("LAUNCHGUARD_FRAMEBUFFER_LINE_LENGTH", str(1408 * 2)))
FRAMEBUFFER_UPDATE_IOCTL = _env_bool("LAUNCHGUARD_FRAMEBUFFER_IOCTL", "True")

#* --- Input ---
# 'auto' picks the gesture from the detected hardware. 'touch' or 'buttons' forces one.
QUIT_GESTURE = os.getenv("LAUNCHGUARD_QUIT_GESTURE", "auto").lower()
QUIT_BUTTONS = ("LEFT", "RIGHT")
MODEL_PATH = pathlib.Path("/sys/devices/soc0/machine")

# Device nodes per hardware generation.
INPUT_DEVICES = {
    "gen1": {"touch": "/dev/input/event1", "buttons": "/dev/input/event2"},
    "gen2": {"touch": "/dev/input/event2", "buttons": "/dev/input/event0"},
}
TOUCH_DEVICE_PATH = os.getenv("LAUNCHGUARD_TOUCH_DEVICE", "")
BUTTON_DEVICE_PATH = os.getenv("LAUNCHGUARD_BUTTON_DEVICE", "")

# Raw digitizer ranges and orientation relative to the display.
TOUCH_MAX_X = int(os.getenv("LAUNCHGUARD_TOUCH_MAX_X", "1403"))
TOUCH_MAX_Y = int(os.getenv("LAUNCHGUARD_TOUCH_MAX_Y", "1871"))
TOUCH_INVERT_X = _env_bool("LAUNCHGUARD_TOUCH_INVERT_X", "False")
TOUCH_INVERT_Y = _env_bool("LAUNCHGUARD_TOUCH_INVERT_Y", "True")

#* --- Logging ---
LOG_LEVEL = os.getenv("LAUNCHGUARD_LOG_LEVEL", "INFO").upper()

#* --- MODIFIABLE SETTINGS (Changeable through the overrides file) ---
MODIFIABLE_SETTINGS = {
    # Supervision
    "CYCLE_PERIOD_MS", "SELF_EXIT_POLL_MS", "GRACE_PERIOD_MS", "GRACEFUL_SIGNAL",
    # Input
    "QUIT_GESTURE", "TOUCH_DEVICE_PATH", "BUTTON_DEVICE_PATH",
    "TOUCH_MAX_X", "TOUCH_MAX_Y", "TOUCH_INVERT_X", "TOUCH_INVERT_Y",
    # Rendering
    "FONT_PATH", "FRAMEBUFFER_PATH", "FRAMEBUFFER_LINE_LENGTH", "FRAMEBUFFER_UPDATE_IOCTL",
    # Logging
    "LOG_LEVEL", "PIPE_CHILD_OUTPUT",
}
