"""Visualizers."""

from haloscope.visualizers.contour import contour_points, render_contour
from haloscope.visualizers.particles import Particle, ParticleField
