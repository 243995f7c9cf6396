import os
import fcntl
import struct
import logging
import threading
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from launchguard.display.geometry import Position, Rect

log = logging.getLogger(__name__)

#* --- mxcfb update ioctl ---
MXCFB_SEND_UPDATE = 0x4048462E
# struct mxcfb_update_data: rect, waveform, mode, marker, temp, flags, dither, quant, alt buffer
UPDATE_DATA_FORMAT = "=IIIIIIIiIiiIIIIIII"
WAVEFORM_MODE_GC16 = 0x2
WAVEFORM_MODE_GLR16 = 0x6
UPDATE_MODE_PARTIAL = 0x0
UPDATE_MODE_FULL = 0x1
TEMP_USE_REMARKABLE_DRAW = 0x18

WHITE = 255
BLACK = 0


def to_rgb565(region: Image.Image) -> np.ndarray:
    """Converts a grayscale image into little-endian RGB565 pixels."""
    gray = np.asarray(region, dtype=np.uint16)
    return (((gray >> 3) << 11) | ((gray >> 2) << 5) | (gray >> 3)).astype("<u2")


class FramebufferCanvas:
    """
    Draws onto a grayscale back buffer and pushes regions to a framebuffer.

    Every draw call returns the screen rectangle it touched. A position axis
    set to None centers the drawing on that axis. When the framebuffer device
    cannot be opened the canvas keeps working on the back buffer only.
    """

    def __init__(
        self,
        width: int,
        height: int,
        framebuffer_path: str = "/dev/fb0",
        line_length: Optional[int] = None,
        font_path: Optional[str] = None,
        use_update_ioctl: bool = True,
    ) -> None:
        self.width = width
        self.height = height
        self.framebuffer_path = framebuffer_path
        self.line_length = line_length or width * 2
        self.font_path = font_path
        self.use_update_ioctl = use_update_ioctl

        self.image = Image.new("L", (width, height), WHITE)
        self._draw = ImageDraw.Draw(self.image)
        self._fonts: Dict[float, ImageFont.ImageFont] = {}
        self._fb_fd: Optional[int] = None
        self._fb_unavailable = False
        self._update_marker = 0
        self._lock = threading.Lock()

    #* --- Helpers ---
    def _font(self, size: float):
        font = self._fonts.get(size)
        if font is None:
            try:
                font = ImageFont.truetype(self.font_path, int(size)) if self.font_path else None
            except OSError as e:
                log.warning(f"Failed to load font '{self.font_path}': {e}. Using the default font.")
                self.font_path = None
            if font is None:
                font = ImageFont.load_default(size=size)
            self._fonts[size] = font
        return font

    def _place(self, pos: Position, size: Tuple[int, int]) -> Tuple[int, int]:
        x, y = pos
        if x is None:
            x = (self.width - size[0]) // 2
        if y is None:
            y = (self.height - size[1]) // 2
        return x, y

    def _visible(self, rect: Rect) -> Rect:
        return rect.clamp(self.width, self.height)

    #* --- Drawing ---
    def clear(self) -> None:
        self._draw.rectangle((0, 0, self.width - 1, self.height - 1), fill=WHITE)

    def clear_area(self, rect: Rect) -> None:
        rect = self._visible(rect)
        if rect.width and rect.height:
            self._draw.rectangle((rect.left, rect.top, rect.right - 1, rect.bottom - 1), fill=WHITE)

    def draw_text(self, pos: Position, text: str, size: float) -> Rect:
        font = self._font(size)
        left, top, right, bottom = self._draw.textbbox((0, 0), text, font=font)
        x, y = self._place(pos, (right - left, bottom - top))
        self._draw.text((x - left, y - top), text, fill=BLACK, font=font)
        return self._visible(Rect(x, y, right - left, bottom - top))

    def draw_image(self, pos: Position, image: Image.Image) -> Rect:
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            background = Image.new("RGBA", image.size, (255, 255, 255, 255))
            image = Image.alpha_composite(background, image.convert("RGBA"))
        gray = image.convert("L")
        x, y = self._place(pos, gray.size)
        self.image.paste(gray, (x, y))
        return self._visible(Rect(x, y, gray.width, gray.height))

    def draw_rect(self, pos: Position, size: Tuple[int, int], border: int = 1) -> Rect:
        x, y = self._place(pos, size)
        width, height = size
        if width <= 2 * border or height <= 2 * border:
            # no hollow interior; paste keeps the fill inside the box on every Pillow version
            self.image.paste(BLACK, (x, y, x + width, y + height))
        else:
            self._draw.rectangle((x, y, x + width - 1, y + height - 1), outline=BLACK, width=border)
        return self._visible(Rect(x, y, width, height))

    #* --- Refresh ---
    def refresh_full(self) -> None:
        self._push(Rect(0, 0, self.width, self.height), full=True)

    def refresh_partial(self, rect: Rect) -> None:
        self._push(self._visible(rect), full=False)

    def _open_framebuffer(self) -> Optional[int]:
        if self._fb_fd is None and not self._fb_unavailable:
            try:
                self._fb_fd = os.open(self.framebuffer_path, os.O_RDWR)
            except OSError as e:
                log.warning(f"Framebuffer '{self.framebuffer_path}' is not available: {e}. Nothing will be shown.")
                self._fb_unavailable = True
        return self._fb_fd

    def _push(self, rect: Rect, full: bool) -> None:
        if not rect.width or not rect.height:
            return
        with self._lock:
            fd = self._open_framebuffer()
            if fd is None:
                return
            pixels = to_rgb565(self.image.crop((rect.left, rect.top, rect.right, rect.bottom)))
            try:
                for row, line in enumerate(pixels):
                    os.pwrite(fd, line.tobytes(), (rect.top + row) * self.line_length + rect.left * 2)
            except OSError as e:
                log.error(f"Writing to framebuffer failed: {e}")
                return
            if self.use_update_ioctl:
                self._send_update(fd, rect, full)

    def _send_update(self, fd: int, rect: Rect, full: bool) -> None:
        self._update_marker += 1
        payload = struct.pack(
            UPDATE_DATA_FORMAT,
            rect.top, rect.left, rect.width, rect.height,
            WAVEFORM_MODE_GC16 if full else WAVEFORM_MODE_GLR16,
            UPDATE_MODE_FULL if full else UPDATE_MODE_PARTIAL,
            self._update_marker,
            TEMP_USE_REMARKABLE_DRAW,
            0, 0, 0,
            0, 0, 0, 0, 0, 0, 0,
        )
        try:
            fcntl.ioctl(fd, MXCFB_SEND_UPDATE, payload)
        except OSError as e:
            log.debug(f"Display update ioctl failed, disabling it: {e}")
            self.use_update_ioctl = False

    def close(self) -> None:
        if self._fb_fd is not None:
            os.close(self._fb_fd)
            self._fb_fd = None
