"""Timer package."""

from .engine import (
    TimerEngine,
    EngineState,
    Preferences,
    Phase,
    MS_PER_MINUTE,
)

__all__ = [
    "TimerEngine",
    "EngineState",
    "Preferences",
    "Phase",
    "MS_PER_MINUTE",
]
