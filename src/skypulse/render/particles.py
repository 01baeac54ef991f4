from __future__ import annotations

import random
from dataclasses import dataclass

from ..domain.models import EffectProfile, ParticleProfile


@dataclass(slots=True)
class Particle:
    x: float
    y: float
    size: float
    speed_x: float
    speed_y: float
    alpha: float


class ParticleField:
    def __init__(
        self,
        profile: ParticleProfile,
        particles: list[Particle],
        *,
        width: float,
        height: float,
        rng: random.Random,
    ) -> None:
        self.profile = profile
        self.particles = particles
        self.width = width
        self.height = height
        self._rng = rng

    @classmethod
    def spawn(
        cls,
        profile: ParticleProfile,
        *,
        width: float,
        height: float,
        rng: random.Random,
    ) -> ParticleField:
        particles = [
            Particle(
                x=rng.random() * width,
                y=rng.random() * height,
                size=rng.random() * profile.size + 1,
                speed_x=(rng.random() - 0.5) * profile.speed,
                speed_y=(rng.random() - 0.5) * profile.speed,
                alpha=rng.random() * 0.5 + 0.2,
            )
            for _ in range(profile.count)
        ]
        return cls(profile, particles, width=width, height=height, rng=rng)

    def _wrap(self, particle: Particle) -> None:
        if particle.y > self.height:
            particle.y = 0.0
            particle.x = self._rng.random() * self.width

    def step(self) -> None:
        motion = self.profile.motion
        for particle in self.particles:
            if motion == "fall":
                particle.speed_y = abs(particle.speed_y)
                particle.x += particle.speed_x
                particle.y += particle.speed_y
                self._wrap(particle)
            elif motion == "flutter":
                particle.x += particle.speed_x
                particle.y += abs(particle.speed_y)
                self._wrap(particle)
            else:
                particle.x += particle.speed_x
                particle.y += particle.speed_y
                if particle.x > self.width or particle.x < 0:
                    particle.speed_x *= -1
                if particle.y > self.height or particle.y < 0:
                    particle.speed_y *= -1

    def rgba(self, particle: Particle) -> str:
        red, green, blue = self.profile.color
        return f"rgba({red}, {green}, {blue}, {particle.alpha:.2f})"


class EffectLayer:
    """Holds the single active visual effect; applying a profile replaces it."""

    def __init__(self, *, width: float, height: float, rng: random.Random | None = None) -> None:
        self.width = width
        self.height = height
        self._rng = rng or random.Random()
        self.profile: EffectProfile | None = None
        self.field: ParticleField | None = None
        self.generation = 0

    def clear(self) -> None:
        self.profile = None
        self.field = None

    def apply(self, profile: EffectProfile) -> ParticleField:
        self.clear()
        self.profile = profile
        self.field = ParticleField.spawn(
            profile.particles,
            width=self.width,
            height=self.height,
            rng=self._rng,
        )
        self.generation += 1
        return self.field

    def step(self) -> None:
        if self.field is not None:
            self.field.step()
