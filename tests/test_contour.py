"""Tests for the spectrum ring."""

import math

import numpy as np
import pytest

from haloscope.visualizers.contour import contour_points, render_contour


CENTER = (200.0, 150.0)


def test_point_count(ramp_spectrum):
    pts = contour_points(CENTER, 75.0, ramp_spectrum)
    assert pts.shape == (1024, 2)
    mirrored = contour_points(CENTER, 75.0, ramp_spectrum, mirror=True)
    assert mirrored.shape == (2048, 2)


def test_silence_is_a_circle():
    data = np.zeros(64, dtype=np.uint8)
    pts = contour_points(CENTER, 50.0, data)
    dist = np.hypot(pts[:, 0] - CENTER[0], pts[:, 1] - CENTER[1])
    np.testing.assert_allclose(dist, 50.0)


def test_full_magnitude_adds_gain():
    data = np.full(16, 255, dtype=np.uint8)
    pts = contour_points(CENTER, 50.0, data, amplitude_gain=120.0)
    dist = np.hypot(pts[:, 0] - CENTER[0], pts[:, 1] - CENTER[1])
    np.testing.assert_allclose(dist, 170.0)


def test_first_point_and_angles():
    data = np.zeros(4, dtype=np.uint8)
    pts = contour_points((0.0, 0.0), 10.0, data)
    # Angles 0, pi/2, pi, 3pi/2 with no wraparound duplicate
    np.testing.assert_allclose(pts, [[10, 0], [0, 10], [-10, 0], [0, -10]], atol=1e-9)


def test_deterministic(ramp_spectrum):
    a = contour_points(CENTER, 75.0, ramp_spectrum)
    b = contour_points(CENTER, 75.0, ramp_spectrum)
    np.testing.assert_array_equal(a, b)


def test_mirror_symmetry(ramp_spectrum):
    pts = contour_points(CENTER, 75.0, ramp_spectrum, mirror=True)
    ring = pts[0::2]
    reflected = pts[1::2]
    np.testing.assert_allclose(reflected[:, 0], 2 * CENTER[0] - ring[:, 0])
    np.testing.assert_allclose(reflected[:, 1], ring[:, 1])


def test_mirror_keeps_sampling(ramp_spectrum):
    plain = contour_points(CENTER, 75.0, ramp_spectrum)
    mirrored = contour_points(CENTER, 75.0, ramp_spectrum, mirror=True)
    np.testing.assert_array_equal(mirrored[0::2], plain)


def test_render_strokes_closed_path(recording_surface, ramp_spectrum):
    render_contour(recording_surface, CENTER, 75.0, False, ramp_spectrum)
    assert len(recording_surface.paths) == 1
    points, closed = recording_surface.paths[0]
    assert closed is True
    assert points.shape == (1024, 2)


def test_render_empty_sample_draws_nothing(recording_surface):
    render_contour(recording_surface, CENTER, 75.0, True, np.zeros(0, dtype=np.uint8))
    assert recording_surface.paths == []


def test_radius_follows_bin_value():
    data = np.zeros(8, dtype=np.uint8)
    data[2] = 255
    pts = contour_points((0.0, 0.0), 10.0, data, amplitude_gain=100.0)
    assert math.hypot(*pts[2]) == pytest.approx(110.0)
    assert math.hypot(*pts[3]) == pytest.approx(10.0)
