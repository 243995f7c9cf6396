"""Tests for the status line, the framebuffer canvas and the start screens."""

import numpy as np
import pytest
from PIL import Image

from launchguard.display import CENTER, FramebufferCanvas, Rect, StatusDisplay, corner_regions
from launchguard.display.canvas import to_rgb565
from launchguard.display.screens import draw_custom_image, draw_icon_and_name, draw_start_screen
from launchguard.input import QuitCapability

REGIONS = corner_regions(1404, 1872, 100)


class TestStatusDisplay:
    """Test the single status line facade."""

    def test_first_status(self, renderer):
        status = StatusDisplay(renderer, (None, 1572), 60.0)

        rect = status.show("Killing process...")

        assert status.last_rect == rect
        assert renderer.names() == ["draw_text", "refresh_partial"]
        assert renderer.calls[-1] == ("refresh_partial", rect)

    def test_replacing_erases_previous_line(self, renderer):
        status = StatusDisplay(renderer, (None, 1572), 60.0)
        first = status.show("Killing process...")

        second = status.show("Failed")

        assert renderer.calls[2] == ("clear_area", first)
        assert renderer.calls[-1] == ("refresh_partial", first.union(second))
        assert status.last_rect == second

    def test_clear(self, renderer):
        status = StatusDisplay(renderer, (None, 1572), 60.0)
        rect = status.show("Killing process...")

        status.clear()

        assert renderer.calls[-2:] == [("clear_area", rect), ("refresh_partial", rect)]
        assert status.last_rect is None

    def test_clear_without_status_is_noop(self, renderer):
        StatusDisplay(renderer, (None, 1572), 60.0).clear()
        assert renderer.calls == []


class TestRect:
    """Test rectangle helpers."""

    def test_union(self):
        assert Rect(10, 10, 10, 10).union(Rect(30, 5, 5, 5)) == Rect(10, 5, 25, 15)

    def test_clamp(self):
        assert Rect(-5, 1860, 20, 20).clamp(1404, 1872) == Rect(0, 1860, 15, 12)


@pytest.fixture
def framebuffer(tmp_path):
    path = tmp_path / "fb0"
    path.write_bytes(b"\x00" * (40 * 2 * 30))
    return path


@pytest.fixture
def canvas(framebuffer):
    return FramebufferCanvas(40, 30, framebuffer_path=str(framebuffer), use_update_ioctl=False)


class TestFramebufferCanvas:
    """Test drawing and pushing pixels to the framebuffer."""

    def test_rgb565_conversion(self):
        pixels = to_rgb565(Image.new("L", (2, 1), 255))
        assert pixels.tolist() == [[0xFFFF, 0xFFFF]]
        assert to_rgb565(Image.new("L", (1, 1), 0)).tolist() == [[0]]

    def test_draw_rect_returns_area(self, canvas):
        rect = canvas.draw_rect((2, 3), (10, 5), 1)

        assert rect == Rect(2, 3, 10, 5)
        assert canvas.image.getpixel((2, 3)) == 0
        assert canvas.image.getpixel((5, 5)) == 255

    @pytest.mark.parametrize("size", [(1, 1), (3, 1), (1, 4), (2, 2)])
    def test_thin_rect_stays_inside_its_area(self, canvas, size):
        rect = canvas.draw_rect((2, 2), size, 1)

        pixels = np.asarray(canvas.image)
        assert rect == Rect(2, 2, *size)
        assert (pixels[2:2 + size[1], 2:2 + size[0]] == 0).all()
        assert (pixels == 0).sum() == size[0] * size[1]

    def test_outline_rect_is_hollow(self, canvas):
        canvas.draw_rect((0, 0), (10, 8), 1)

        pixels = np.asarray(canvas.image)
        assert (pixels[0, :10] == 0).all() and (pixels[7, :10] == 0).all()
        assert (pixels[1:7, 1:9] == 255).all()
        assert (pixels[8:] == 255).all()

    def test_centered_image(self, canvas):
        rect = canvas.draw_image(CENTER, Image.new("RGB", (10, 10), (0, 0, 0)))

        assert rect == Rect(15, 10, 10, 10)
        assert canvas.image.getpixel((20, 15)) == 0

    def test_transparent_image_on_white(self, canvas):
        canvas.draw_image((0, 0), Image.new("RGBA", (4, 4), (0, 0, 0, 0)))
        assert canvas.image.getpixel((1, 1)) == 255

    def test_text_is_centered_horizontally(self):
        canvas = FramebufferCanvas(400, 100, framebuffer_path="/nonexistent/fb", use_update_ioctl=False)

        rect = canvas.draw_text((None, 10), "Hi", 20.0)

        assert rect.top == 10
        assert rect.width > 0
        assert abs((rect.left + rect.right) - 400) <= 1

    def test_clear_area(self, canvas):
        canvas.draw_rect((0, 0), (40, 30), 30)
        canvas.clear_area(Rect(5, 5, 5, 5))

        assert canvas.image.getpixel((6, 6)) == 255
        assert canvas.image.getpixel((1, 1)) == 0

    def test_partial_refresh_writes_region(self, canvas, framebuffer):
        canvas.refresh_partial(Rect(2, 1, 3, 2))
        canvas.close()

        data = np.frombuffer(framebuffer.read_bytes(), dtype="<u2").reshape(30, 40)
        assert (data[1:3, 2:5] == 0xFFFF).all()
        assert data[0].sum() == 0
        assert data[1, 1] == 0

    def test_full_refresh(self, canvas, framebuffer):
        canvas.draw_rect((0, 0), (1, 1), 1)
        canvas.refresh_full()
        canvas.close()

        data = np.frombuffer(framebuffer.read_bytes(), dtype="<u2").reshape(30, 40)
        assert data[0, 0] == 0
        assert (data[1:] == 0xFFFF).all()

    def test_missing_framebuffer_is_tolerated(self, tmp_path, caplog):
        canvas = FramebufferCanvas(10, 10, framebuffer_path=str(tmp_path / "missing"), use_update_ioctl=False)

        canvas.refresh_full()
        canvas.refresh_partial(Rect(0, 0, 5, 5))

        assert caplog.text.count("is not available") == 1


class TestScreens:
    """Test the start screens."""

    def test_name_screen_with_touch_hint(self, renderer):
        draw_start_screen(renderer, "Reader", QuitCapability.TOUCH_CORNERS, REGIONS)

        texts = renderer.texts()
        assert "Touch both bottom corners to manually quit." in texts
        assert texts[-2:] == ["Reader", "is running"]
        assert [c[1] for c in renderer.calls if c[0] == "draw_rect"] == list(REGIONS)
        assert renderer.names()[0] == "clear"
        assert renderer.names()[-1] == "refresh_full"

    def test_button_hint_has_no_corner_outlines(self, renderer):
        draw_start_screen(renderer, "Reader", QuitCapability.BUTTON_COMBO, REGIONS)

        assert "draw_rect" not in renderer.names()
        assert any("LEFT and RIGHT" in text for text in renderer.texts())

    def test_icon_screen(self, renderer, tmp_path):
        icon_path = tmp_path / "icon.png"
        Image.new("RGB", (64, 64), (10, 10, 10)).save(icon_path)

        assert draw_icon_and_name(renderer, "Reader", 100, str(icon_path)) is True

        image_rect = [c[1] for c in renderer.calls if c[0] == "draw_image"][0]
        name_rect = [c[2] for c in renderer.calls if c[0] == "draw_text"][0]
        assert image_rect.size == (100, 100)
        assert name_rect.top == image_rect.bottom + 55

    def test_missing_icon(self, renderer, tmp_path, caplog):
        assert draw_icon_and_name(renderer, "Reader", 100, str(tmp_path / "none.png")) is False
        assert renderer.calls == []
        assert "Failed to load icon" in caplog.text

    def test_oversized_icon_is_rejected(self, renderer, tmp_path, monkeypatch, caplog):
        icon_path = tmp_path / "huge.png"
        Image.new("RGB", (64, 64), (10, 10, 10)).save(icon_path)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        assert draw_icon_and_name(renderer, "Reader", 100, str(icon_path)) is False
        assert renderer.calls == []
        assert "Failed to load icon" in caplog.text

    def test_oversized_custom_image_shows_error(self, renderer, tmp_path, monkeypatch):
        image_path = tmp_path / "huge.png"
        Image.new("L", (64, 64), 0).save(image_path)
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        assert draw_custom_image(renderer, str(image_path)) is False
        assert renderer.texts() == ["Failed to load custom image (see console)!"]

    def test_missing_custom_image(self, renderer, tmp_path):
        assert draw_custom_image(renderer, str(tmp_path / "none.png")) is False
        assert renderer.texts() == ["Failed to load custom image (see console)!"]

    def test_custom_image_skips_hint(self, renderer, tmp_path):
        image_path = tmp_path / "splash.png"
        Image.new("L", (20, 20), 0).save(image_path)

        draw_start_screen(renderer, "Reader", QuitCapability.TOUCH_CORNERS, REGIONS, custom_image=str(image_path))

        assert renderer.texts() == []
        assert "draw_image" in renderer.names()
