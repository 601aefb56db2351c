"""Timer preferences: clamping and JSON persistence.

Preferences are stored at:
    ~/Library/Application Support/Pomotray/prefs.json

Set ``POMOTRAY_CONFIG_DIR`` to use another directory.

Usage::

    prefs = load_preferences()
    prefs = normalize_preferences(replace(prefs, focus_minutes=50))
    save_preferences(prefs)

Nothing here raises on bad input or I/O trouble: out-of-range values are
clamped, unreadable files mean defaults, and failed writes are logged.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path

from .timer.engine import Preferences


logger = logging.getLogger(__name__)

APP_CONFIG_DIR = Path(
    os.environ.get("POMOTRAY_CONFIG_DIR")
    or Path.home() / "Library" / "Application Support" / "Pomotray"
)
PREFS_PATH = APP_CONFIG_DIR / "prefs.json"

DEFAULT_PREFERENCES = Preferences()

# field → (minimum, maximum), inclusive
PREFERENCE_BOUNDS: dict[str, tuple[int, int]] = {
    "focus_minutes": (1, 180),
    "short_break_minutes": (1, 30),
    "long_break_minutes": (1, 90),
    "cycles": (1, 12),
}


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def normalize_preferences(prefs: Preferences) -> Preferences:
    """Clamp every numeric field into its bounds.  Idempotent."""
    return replace(prefs, **{
        name: clamp(getattr(prefs, name), low, high)
        for name, (low, high) in PREFERENCE_BOUNDS.items()
    })


def load_preferences() -> Preferences:
    """Load preferences from disk, falling back to defaults."""
    try:
        if PREFS_PATH.exists():
            data = json.loads(PREFS_PATH.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return normalize_preferences(Preferences.from_dict(data))
            logger.warning("Ignoring %s: expected a JSON object", PREFS_PATH)
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s, using defaults: %s", PREFS_PATH, exc)
    return DEFAULT_PREFERENCES


def save_preferences(prefs: Preferences) -> bool:
    """Write preferences to disk as JSON.  Returns False if the write failed."""
    try:
        PREFS_PATH.parent.mkdir(parents=True, exist_ok=True)
        PREFS_PATH.write_text(
            json.dumps(prefs.to_dict(), indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("Could not write %s: %s", PREFS_PATH, exc)
        return False
    return True
