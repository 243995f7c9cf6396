"""
The static screens shown while the child process runs.
"""
import time
import logging
from typing import Optional, Tuple

from PIL import Image

from launchguard.config import effective_settings as config
from launchguard.display.geometry import CENTER, Rect
from launchguard.input.trigger import QuitCapability

log = logging.getLogger(__name__)


def draw_base(canvas, capability: QuitCapability, regions: Tuple[Rect, Rect]) -> None:
    """Draws the quit instructions and, for touch devices, the corner outlines."""
    hint_y = config.DISPLAY_HEIGHT - config.HINT_TEXT_OFFSET
    if capability is QuitCapability.TOUCH_CORNERS:
        canvas.draw_text((None, hint_y), config.HINT_TEXT_TOUCH, config.HINT_TEXT_SIZE)
        for region in regions:
            canvas.draw_rect((region.left, region.top), region.size, 1)
    else:
        canvas.draw_text((None, hint_y), config.HINT_TEXT_BUTTONS, config.HINT_TEXT_SIZE)


def _draw_running_label(canvas, name: str, top: Optional[int]) -> Rect:
    rect = canvas.draw_text((None, top), name, config.NAME_TEXT_SIZE)
    canvas.draw_text((None, rect.bottom + config.NAME_RUNNING_GAP), "is running", config.RUNNING_TEXT_SIZE)
    return rect


def draw_name(canvas, name: str) -> None:
    log.info("Drawing name only screen...")
    _draw_running_label(canvas, name, None)


def _load_image(path: str) -> Image.Image:
    with Image.open(path) as img:
        img.load()
        return img.copy()


def draw_icon_and_name(canvas, name: str, icon_size: int, icon_path: str) -> bool:
    """
    Draws the icon centered with the app name below it.

    :return bool: False if the icon could not be loaded. Nothing is drawn in that case.
    """
    log.info("Drawing icon and name screen...")
    try:
        icon = _load_image(icon_path)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        log.error(f"Failed to load icon: {e}")
        return False

    start = time.monotonic()
    resized = icon.resize((icon_size, icon_size), Image.Resampling.LANCZOS)
    log.debug(f"Resizing image took {time.monotonic() - start:.3f}s")

    img_rect = canvas.draw_image(CENTER, resized)
    _draw_running_label(canvas, name, img_rect.bottom + config.ICON_NAME_GAP)
    return True


def draw_custom_image(canvas, image_path: str) -> bool:
    """
    Draws a full custom image instead of the name and icon.

    :return bool: False if the image could not be loaded. An error text is drawn instead.
    """
    log.info("Drawing custom image screen...")
    try:
        img = _load_image(image_path)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        log.error(f"Failed to load custom image: {e}")
        canvas.draw_text((None, config.DISPLAY_HEIGHT - config.CUSTOM_IMAGE_ERROR_OFFSET),
                         "Failed to load custom image (see console)!", config.NAME_TEXT_SIZE)
        return False
    canvas.draw_image(CENTER, img)
    return True


def draw_start_screen(canvas, name: str, capability: QuitCapability, regions: Tuple[Rect, Rect],
                      icon_path: Optional[str] = None, icon_size: int = 500,
                      custom_image: Optional[str] = None) -> None:
    """Clears the display and draws the screen matching the given options."""
    canvas.clear()
    if custom_image:
        draw_custom_image(canvas, custom_image)
        log.warning("Using a custom image will NOT display how to quit the app.")
        if capability is QuitCapability.TOUCH_CORNERS:
            log.warning("To quit the app, touch both bottom corners.")
        else:
            log.warning("To quit the app, press the LEFT and RIGHT buttons together.")
    elif icon_path:
        draw_base(canvas, capability, regions)
        draw_icon_and_name(canvas, name, icon_size, icon_path)
    else:
        draw_base(canvas, capability, regions)
        draw_name(canvas, name)
    canvas.refresh_full()
