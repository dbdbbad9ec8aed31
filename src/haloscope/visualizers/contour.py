"""
Spectrum ring renderer.

Wraps one frame of frequency magnitudes around a circle: bin i sits at
angle (i / N) * 2pi and is pushed outwards by its normalized magnitude.
With mirroring on, every point is followed by its reflection across the
vertical axis through the center, giving a left-right symmetric outline.
"""

import math

import numpy as np

from haloscope.surface import DrawingSurface

MAX_MAGNITUDE = 255.0


def contour_points(
    center: tuple[float, float],
    base_radius: float,
    frequency_data: np.ndarray,
    mirror: bool = False,
    amplitude_gain: float = 120.0,
) -> np.ndarray:
    """
    Compute the ring outline for one frequency sample.

    Args:
        center: (cx, cy) of the ring.
        base_radius: Radius at zero magnitude.
        frequency_data: N magnitudes in 0-255.
        mirror: Interleave a reflected point after each ring point.
        amplitude_gain: Radial offset at full magnitude.

    Returns:
        (N, 2) float array of path points, or (2N, 2) when mirrored,
        in drawing order.
    """
    data = np.asarray(frequency_data, dtype=np.float64)
    n = len(data)
    cx, cy = center

    angles = np.arange(n) / max(n, 1) * 2 * math.pi
    r = base_radius + (data / MAX_MAGNITUDE) * amplitude_gain

    points = np.empty((n, 2), dtype=np.float64)
    points[:, 0] = cx + np.cos(angles) * r
    points[:, 1] = cy + np.sin(angles) * r

    if not mirror:
        return points

    reflected = points.copy()
    reflected[:, 0] = 2 * cx - points[:, 0]
    # [P0, R0, P1, R1, ...]
    return np.stack((points, reflected), axis=1).reshape(-1, 2)


def render_contour(
    surface: DrawingSurface,
    center: tuple[float, float],
    base_radius: float,
    mirror: bool,
    frequency_data: np.ndarray,
    amplitude_gain: float = 120.0,
):
    """Stroke the closed ring outline for ``frequency_data`` onto ``surface``."""
    if len(frequency_data) == 0:
        return
    points = contour_points(center, base_radius, frequency_data, mirror, amplitude_gain)
    surface.stroke_path(points, closed=True)
