"""Host-side controller for the shared :class:`TimerEngine`.

Owns the periodic driver (a 500 ms ``QTimer``), routes user commands to
the engine, normalises and persists preferences, and re-broadcasts every
resulting snapshot as Qt signals for whatever renders the tray or UI.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .preferences import (
    PREFERENCE_BOUNDS,
    clamp,
    load_preferences,
    normalize_preferences,
    save_preferences,
)
from .timer.engine import EngineState, Phase, Preferences, TimerEngine


logger = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 500

FOCUS_STEP = 5
SHORT_BREAK_STEP = 1
LONG_BREAK_STEP = 5
CYCLES_STEP = 1

ADJUST_STEPS: dict[str, int] = {
    "focus_minutes": FOCUS_STEP,
    "short_break_minutes": SHORT_BREAK_STEP,
    "long_break_minutes": LONG_BREAK_STEP,
    "cycles": CYCLES_STEP,
}


# ── controller ────────────────────────────────────────────────────────────


class TimerController(QObject):
    """Qt front for one engine instance.

    Signals
    -------
    timer_tick(state: EngineState)
        Emitted on every driver timeout (the ``timer:tick`` event).
    state_changed(state: EngineState)
        Emitted after every user command.
    phase_changed(state: EngineState)
        Emitted whenever an emitted snapshot is in a different phase
        from the previous one, whether by tick expiry or by skip.
    """

    timer_tick = pyqtSignal(object)
    state_changed = pyqtSignal(object)
    phase_changed = pyqtSignal(object)

    def __init__(
        self,
        engine: TimerEngine | None = None,
        parent: QObject | None = None,
        *,
        load: Callable[[], Preferences] = load_preferences,
        save: Callable[[Preferences], object] = save_preferences,
    ) -> None:
        super().__init__(parent)
        self._engine = engine if engine is not None else TimerEngine()
        self._load = load
        self._save = save

        # Serialises read-modify-write preference updates.
        self._prefs_lock = threading.Lock()
        # Last phase seen by either the driver or a command.
        self._phase_lock = threading.Lock()
        self._last_phase: Phase = self._engine.snapshot().phase

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_timeout)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def is_ticking(self) -> bool:
        return self._qt_timer.isActive()

    # ══════════════════════════════════════════════════════════════════
    #  DRIVER
    # ══════════════════════════════════════════════════════════════════

    def start_ticking(self) -> None:
        if not self._qt_timer.isActive():
            self._qt_timer.start()

    def stop_ticking(self) -> None:
        self._qt_timer.stop()

    def _on_timeout(self) -> None:
        state = self._engine.tick()
        self.timer_tick.emit(state)
        self._check_phase(state)

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def get_state(self) -> EngineState:
        return self._engine.snapshot()

    def start(self) -> EngineState:
        return self._publish(self._engine.start())

    def pause(self) -> EngineState:
        return self._publish(self._engine.pause())

    def reset(self) -> EngineState:
        return self._publish(self._engine.reset())

    def skip(self) -> EngineState:
        return self._publish(self._engine.skip())

    def toggle_run(self) -> EngineState:
        """Start/Pause menu item: pause if running, otherwise start."""
        return self._publish(self._engine.toggle_run())

    def set_preferences(self, prefs: Preferences) -> EngineState:
        """Normalise, apply, then persist outside the engine lock."""
        with self._prefs_lock:
            prefs = normalize_preferences(prefs)
            state = self._engine.set_preferences(prefs)
        self._persist(prefs)
        return self._publish(state)

    def toggle_auto_start(self) -> EngineState:
        with self._prefs_lock:
            prefs = self._engine.snapshot().prefs
            prefs = replace(prefs, auto_start=not prefs.auto_start)
            state = self._engine.set_preferences(prefs)
        self._persist(prefs)
        return self._publish(state)

    def adjust_preference(self, name: str, delta: int) -> EngineState:
        """Add ``delta`` to one numeric preference, clamped to its bounds.

        ``name`` is a :class:`Preferences` field such as
        ``"focus_minutes"``.  Menu items pass ``±ADJUST_STEPS[name]``.
        """
        if name not in ADJUST_STEPS:
            raise KeyError(f"not an adjustable preference: {name!r}")
        low, high = PREFERENCE_BOUNDS[name]
        with self._prefs_lock:
            prefs = self._engine.snapshot().prefs
            value = clamp(getattr(prefs, name) + delta, low, high)
            prefs = normalize_preferences(replace(prefs, **{name: value}))
            state = self._engine.set_preferences(prefs)
        self._persist(prefs)
        return self._publish(state)

    def load(self) -> EngineState:
        """Apply stored preferences at startup (nothing is written back)."""
        prefs = normalize_preferences(self._load())
        return self._publish(self._engine.set_preferences(prefs))

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _persist(self, prefs: Preferences) -> None:
        # Fire-and-forget: the in-memory engine is already updated.
        try:
            self._save(prefs)
        except Exception:
            logger.exception("Preferences not saved")
        else:
            logger.debug("Preferences saved: %s", prefs)

    def _publish(self, state: EngineState) -> EngineState:
        self.state_changed.emit(state)
        self._check_phase(state)
        return state

    def _check_phase(self, state: EngineState) -> None:
        with self._phase_lock:
            changed = state.phase is not self._last_phase
            if changed:
                self._last_phase = state.phase
        # Emitted outside the lock; slots may issue further commands.
        if changed:
            logger.info(
                "Entered %s (%d focus completed)",
                state.phase.value, state.completed_focus_count,
            )
            self.phase_changed.emit(state)
