"""Visualization engine and render modes."""

from .base import FrameInput, Mode, RenderMode, Spectrum, normalize_spectrum
from .engine import EngineState, VisualizationEngine
from .particles import Particle, ParticleField
from .registry import ModeRegistry, parse_mode
from .scheduler import FrameScheduler, ManualFrameScheduler
from .surface import RecordingSurface, Surface

__all__ = [
    "EngineState",
    "FrameInput",
    "FrameScheduler",
    "ManualFrameScheduler",
    "Mode",
    "ModeRegistry",
    "Particle",
    "ParticleField",
    "RecordingSurface",
    "RenderMode",
    "Spectrum",
    "Surface",
    "VisualizationEngine",
    "normalize_spectrum",
    "parse_mode",
]
