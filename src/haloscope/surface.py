"""
Drawing surfaces.

The renderers only need a handful of primitives; ``PygameSurface`` provides
them on top of a pygame display or off-screen surface, plus the caption
and logo overlays drawn above the visuals.
"""

import abc
from pathlib import Path
from typing import Sequence, Union

import numpy as np
import pygame
from PIL import Image

from haloscope.config import VisualizerConfig


class DrawingSurface(abc.ABC):
    """Minimal 2D drawing interface used by the frame driver."""

    @property
    @abc.abstractmethod
    def size(self) -> tuple[int, int]:
        """(width, height) in pixels."""

    @abc.abstractmethod
    def clear(self):
        pass

    @abc.abstractmethod
    def stroke_path(self, points: Sequence[Sequence[float]], closed: bool = True):
        """Draw the outline through ``points`` in order."""

    @abc.abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float, alpha: float = 1.0):
        """Draw a filled rectangle blended with ``alpha`` in [0, 1]."""

    def set_caption(self, text: str):
        """Set the caption overlay text ("" hides it)."""

    def present(self):
        """Finish the frame."""


class LogoOverlay:
    """
    An image drawn over the visuals, centered plus a movable offset.
    """

    def __init__(self, image: Image.Image, scale: float = 1.0, offset: tuple[float, float] = (0.0, 0.0)):
        image = image.convert("RGBA")
        if scale != 1.0:
            new_size = (max(1, int(image.width * scale)), max(1, int(image.height * scale)))
            image = image.resize(new_size, Image.BILINEAR)
        self.image = image
        self.offset = offset
        self._surface: pygame.Surface | None = None

    @classmethod
    def from_file(cls, path: Union[str, Path], scale: float = 1.0) -> "LogoOverlay":
        with Image.open(path) as img:
            return cls(img.copy(), scale=scale)

    def move(self, x: float, y: float):
        self.offset = (x, y)

    def nudge(self, dx: float, dy: float):
        self.offset = (self.offset[0] + dx, self.offset[1] + dy)

    def position(self, canvas_size: tuple[int, int]) -> tuple[int, int]:
        """Top-left corner for a canvas of ``canvas_size``."""
        w, h = canvas_size
        return (
            int(w / 2 - self.image.width / 2 + self.offset[0]),
            int(h / 2 - self.image.height / 2 + self.offset[1]),
        )

    def as_pygame(self) -> pygame.Surface:
        if self._surface is None:
            self._surface = pygame.image.frombytes(
                self.image.tobytes(), self.image.size, "RGBA"
            )
        return self._surface


class PygameSurface(DrawingSurface):
    """
    Renders onto a pygame Surface.

    Pass the display surface for live output; without a target an
    off-screen surface of the configured size is created.
    """

    def __init__(
        self,
        config: VisualizerConfig | None = None,
        target: pygame.Surface | None = None,
        logo: LogoOverlay | None = None,
    ):
        self.cfg = config or VisualizerConfig()
        self.target = target if target is not None else pygame.Surface((self.cfg.width, self.cfg.height))
        self.logo = logo
        self.caption_text = ""
        self._font: pygame.font.Font | None = None
        self._squares: dict[tuple[int, int], pygame.Surface] = {}

    @property
    def size(self) -> tuple[int, int]:
        return self.target.get_size()

    def clear(self):
        self.target.fill(self.cfg.background_color)

    def stroke_path(self, points: Sequence[Sequence[float]], closed: bool = True):
        if len(points) < 2:
            return
        pts = [(float(x), float(y)) for x, y in points]
        pygame.draw.lines(self.target, self.cfg.stroke_color, closed, pts, self.cfg.stroke_width)

    def _square(self, width: int, height: int) -> pygame.Surface:
        key = (width, height)
        square = self._squares.get(key)
        if square is None:
            square = pygame.Surface(key)
            square.fill(self.cfg.particle_color)
            self._squares[key] = square
        return square

    def fill_rect(self, x: float, y: float, width: float, height: float, alpha: float = 1.0):
        alpha = min(max(alpha, 0.0), 1.0)
        if alpha <= 0:
            return
        square = self._square(max(1, int(round(width))), max(1, int(round(height))))
        square.set_alpha(int(alpha * 255))
        self.target.blit(square, (int(x), int(y)))

    def set_caption(self, text: str):
        self.caption_text = text

    def _draw_caption(self):
        if not self.caption_text:
            return
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, self.cfg.caption_font_size)

        width, height = self.size
        lines = self.caption_text.split("\n")
        rendered = [self._font.render(line, True, self.cfg.caption_color) for line in lines]
        line_height = self._font.get_linesize()
        y = height - self.cfg.caption_margin - line_height * len(rendered)
        for img in rendered:
            self.target.blit(img, (int((width - img.get_width()) / 2), int(y)))
            y += line_height

    def present(self):
        """Draw the overlays and flip the display if this is the display surface."""
        if self.logo is not None:
            self.target.blit(self.logo.as_pygame(), self.logo.position(self.size))
        self._draw_caption()
        if pygame.display.get_init() and self.target is pygame.display.get_surface():
            pygame.display.flip()

    def to_array(self) -> np.ndarray:
        """(H, W, 3) uint8 copy of the current frame."""
        # pygame uses (width, height) but numpy expects (height, width)
        arr = pygame.surfarray.array3d(self.target)
        return np.ascontiguousarray(np.transpose(arr, (1, 0, 2)))
