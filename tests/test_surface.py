"""Tests for the pygame drawing surface and logo overlay."""

import numpy as np
import pygame
import pytest
from PIL import Image

from haloscope.config import VisualizerConfig
from haloscope.surface import LogoOverlay, PygameSurface


@pytest.fixture
def surface():
    cfg = VisualizerConfig(width=40, height=30, background_color=(10, 20, 30))
    return PygameSurface(cfg)


def test_size(surface):
    assert surface.size == (40, 30)


def test_clear_fills_background(surface):
    surface.clear()
    arr = surface.to_array()
    assert arr.shape == (30, 40, 3)
    assert tuple(arr[0, 0]) == (10, 20, 30)


def test_stroke_path_draws(surface):
    surface.clear()
    surface.stroke_path([(5, 5), (35, 5), (35, 25)], closed=True)
    arr = surface.to_array()
    assert tuple(arr[5, 20]) == (255, 255, 255)


def test_stroke_path_ignores_single_point(surface):
    surface.clear()
    surface.stroke_path([(5, 5)])
    assert tuple(surface.to_array()[5, 5]) == (10, 20, 30)


def test_fill_rect_alpha_blends(surface):
    surface.clear()
    surface.fill_rect(10, 10, 2, 2, alpha=1.0)
    surface.fill_rect(20, 10, 2, 2, alpha=0.5)
    arr = surface.to_array()
    assert tuple(arr[10, 10]) == (255, 255, 255)
    half = arr[10, 20]
    assert 10 < half[0] < 255


def test_fill_rect_zero_alpha_noop(surface):
    surface.clear()
    surface.fill_rect(10, 10, 2, 2, alpha=0.0)
    assert tuple(surface.to_array()[10, 10]) == (10, 20, 30)


def test_caption_drawn_on_present():
    cfg = VisualizerConfig(width=200, height=100, caption_font_size=24, caption_margin=10)
    surface = PygameSurface(cfg)
    surface.clear()
    surface.set_caption("Hello\nWorld")
    surface.present()
    arr = surface.to_array()
    assert arr[50:, :].sum() > 0


def test_empty_caption_draws_nothing(surface):
    surface.clear()
    surface.set_caption("")
    surface.present()
    assert np.all(surface.to_array() == np.array([10, 20, 30], dtype=np.uint8))


class TestLogoOverlay:
    def _image(self, w=4, h=2):
        return Image.new("RGBA", (w, h), (255, 0, 0, 255))

    def test_centered_position(self):
        logo = LogoOverlay(self._image())
        assert logo.position((40, 30)) == (18, 14)

    def test_move_and_nudge(self):
        logo = LogoOverlay(self._image())
        logo.move(5, -3)
        assert logo.position((40, 30)) == (23, 11)
        logo.nudge(1, 1)
        assert logo.offset == (6, -2)

    def test_scale(self):
        logo = LogoOverlay(self._image(10, 10), scale=0.5)
        assert logo.image.size == (5, 5)

    def test_from_file(self, tmp_path):
        path = tmp_path / "logo.png"
        self._image().save(path)
        logo = LogoOverlay.from_file(path)
        assert logo.image.size == (4, 2)

    def test_drawn_on_present(self):
        cfg = VisualizerConfig(width=40, height=30)
        surface = PygameSurface(cfg, logo=LogoOverlay(self._image()))
        surface.clear()
        surface.present()
        arr = surface.to_array()
        assert tuple(arr[14, 18]) == (255, 0, 0)
        assert isinstance(surface.logo.as_pygame(), pygame.Surface)
