"""
Ambient particle emitter.

Particles leave the emitter with a random velocity scaled by the spawn
intensity, drift in a straight line and fade out linearly.
"""

import random
from dataclasses import dataclass

from haloscope.surface import DrawingSurface


@dataclass
class Particle:
    """A single fading square."""
    x: float
    y: float
    vx: float
    vy: float
    life: float = 1.0  # 1.0 to 0.0
    age: int = 0


class ParticleField:
    """
    Owns the live particles for one session.

    ``max_particles`` bounds the live set; on overflow the oldest particles
    are dropped. None leaves the field unbounded.
    """

    def __init__(
        self,
        decay_rate: float = 0.01,
        size: int = 2,
        spread: float = 3.0,
        max_particles: int | None = None,
        seed: int | None = None,
    ):
        self.decay_rate = decay_rate
        self.size = size
        self.spread = spread
        self.max_particles = max_particles
        self.rng = random.Random(seed)
        self.particles: list[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def spawn(self, origin: tuple[float, float], intensity: float):
        """Add one particle at ``origin`` with velocity in +-spread/2 * intensity per axis."""
        x, y = origin
        vx = (self.rng.random() - 0.5) * intensity * self.spread
        vy = (self.rng.random() - 0.5) * intensity * self.spread
        self.particles.append(Particle(x=x, y=y, vx=vx, vy=vy))

        if self.max_particles is not None and len(self.particles) > self.max_particles:
            del self.particles[: len(self.particles) - self.max_particles]

    def advance(self, surface: DrawingSurface | None = None):
        """Move, fade and draw every particle once, then cull the expired ones."""
        for p in self.particles:
            p.x += p.vx
            p.y += p.vy
            p.age += 1
            # Rounded so 1 / decay_rate steps from 1.0 land exactly on zero
            p.life = round(p.life - self.decay_rate, 10)

            if surface is not None:
                surface.fill_rect(p.x, p.y, self.size, self.size, alpha=max(p.life, 0.0))

        self.particles = [p for p in self.particles if p.life > 0]

    def clear(self):
        self.particles = []
