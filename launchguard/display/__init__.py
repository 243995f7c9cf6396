"""
Display package.
Provides the framebuffer canvas, the status line facade and the static
screens shown while the child process runs.
"""

from .canvas import FramebufferCanvas
from .geometry import CENTER, Rect, corner_regions
from .status import StatusDisplay

__all__ = ["FramebufferCanvas", "CENTER", "Rect", "corner_regions", "StatusDisplay"]
