import logging
from typing import Optional

from launchguard.display.geometry import Position, Rect

log = logging.getLogger(__name__)


class StatusDisplay:
    """
    Shows a single status line on the renderer.

    Only the last drawn rectangle is remembered, so that the next line can
    erase the previous one.
    """

    def __init__(self, renderer, position: Position, size: float) -> None:
        self.renderer = renderer
        self.position = position
        self.size = size
        self.last_rect: Optional[Rect] = None

    def show(self, text: str) -> Rect:
        """Replaces the current status line with `text` and refreshes the touched area."""
        previous = self.last_rect
        if previous is not None:
            self.renderer.clear_area(previous)
        rect = self.renderer.draw_text(self.position, text, self.size)
        self.last_rect = rect
        self.renderer.refresh_partial(rect if previous is None else rect.union(previous))
        log.debug(f"Status line: {text!r} at {rect}")
        return rect

    def clear(self) -> None:
        """Erases the current status line, if any."""
        if self.last_rect is None:
            return
        self.renderer.clear_area(self.last_rect)
        self.renderer.refresh_partial(self.last_rect)
        self.last_rect = None

    def clear_screen(self) -> None:
        """Blanks the whole display."""
        self.last_rect = None
        self.renderer.clear()
        self.renderer.refresh_full()
