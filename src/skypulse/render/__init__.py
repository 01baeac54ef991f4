from .coordinator import RenderCoordinator
from .globe import GlobeScene, GlobeView
from .particles import EffectLayer, ParticleField
from .widgets import WidgetBoard, WidgetSink

__all__ = [
    "EffectLayer",
    "GlobeScene",
    "GlobeView",
    "ParticleField",
    "RenderCoordinator",
    "WidgetBoard",
    "WidgetSink",
]
