from __future__ import annotations

from .models import Condition, EffectProfile, ParticleProfile

EFFECT_TABLE: dict[Condition, EffectProfile] = {
    Condition.SUNNY: EffectProfile(
        icon="fas fa-sun text-yellow-400",
        animation="float",
        particles=ParticleProfile(
            count=50, color=(255, 215, 0), speed=0.5, size=2, motion="bounce"
        ),
        background_class="weather-bg-sunny",
        overlays=("sun",),
    ),
    Condition.CLOUDY: EffectProfile(
        icon="fas fa-cloud text-gray-300",
        animation=None,
        particles=ParticleProfile(
            count=50, color=(200, 200, 200), speed=0.3, size=3, motion="bounce"
        ),
        background_class="weather-bg-cloudy",
        overlays=("clouds",),
    ),
    Condition.RAINY: EffectProfile(
        icon="fas fa-cloud-rain text-blue-300",
        animation="animate-bounce",
        particles=ParticleProfile(
            count=200, color=(100, 149, 237), speed=5, size=2, motion="fall"
        ),
        background_class="weather-bg-rainy",
        overlays=("rain",),
    ),
    Condition.STORMY: EffectProfile(
        icon="fas fa-bolt text-yellow-300",
        animation="lightning",
        particles=ParticleProfile(
            count=200, color=(50, 50, 100), speed=8, size=2, motion="fall"
        ),
        background_class="weather-bg-stormy",
        overlays=("lightning", "rain"),
    ),
    Condition.SNOWY: EffectProfile(
        icon="fas fa-snowflake text-blue-100",
        animation="animate-spin",
        particles=ParticleProfile(
            count=150, color=(255, 255, 255), speed=2, size=4, motion="flutter"
        ),
        background_class="weather-bg-snowy",
        overlays=("snow",),
    ),
}


def select_effect(condition: Condition) -> EffectProfile:
    return EFFECT_TABLE[Condition(condition)]
