"""Countdown state machine for Pomotray.

States
------
IDLE(phase)       Countdown frozen, ``remaining_ms`` is authoritative.
RUNNING(phase)    Counting down against a monotonic deadline (``end_at``).

``phase`` is one of FOCUS, SHORT_BREAK, LONG_BREAK, so there are six
logical states.  The initial state is IDLE(FOCUS) with a full focus
duration on the clock.  There is no terminal state.

Transitions
-----------
IDLE → RUNNING                    (start)
RUNNING → IDLE                    (pause, reset)
IDLE ↔ RUNNING                    (toggle_run)
any → IDLE(same phase)            (reset)
any → next phase                  (skip, or tick after the deadline)

Entering a new phase runs it immediately when ``auto_start`` is on,
otherwise the engine waits in IDLE.

Remaining time is always ``end_at - now`` while running, never a
decremented counter, so the tick cadence cannot introduce drift.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


# ── constants ─────────────────────────────────────────────────────────────

MS_PER_MINUTE = 60_000

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_CYCLES = 4
DEFAULT_AUTO_START = True

# Preferences field name → key used in prefs.json and event payloads.
_PREF_KEYS: dict[str, str] = {
    "focus_minutes": "focusMinutes",
    "short_break_minutes": "shortBreakMinutes",
    "long_break_minutes": "longBreakMinutes",
    "cycles": "cycles",
    "auto_start": "autoStart",
}


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Preferences:
    """User-tunable timer configuration.

    The engine trusts these values; callers clamp them with
    :func:`pomotray.preferences.normalize_preferences` first.
    """

    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    cycles: int = DEFAULT_CYCLES
    auto_start: bool = DEFAULT_AUTO_START

    def minutes_for(self, phase: Phase) -> int:
        if phase is Phase.FOCUS:
            return self.focus_minutes
        if phase is Phase.SHORT_BREAK:
            return self.short_break_minutes
        return self.long_break_minutes

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, name) for name, key in _PREF_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Preferences:
        """Build preferences from a camelCase mapping.

        Unknown keys are ignored.  Every known key must be present with
        the right type (``int`` for the counts, ``bool`` for
        ``autoStart``); otherwise the whole record is rejected with
        :class:`ValueError`.  Values are not range-checked here.
        """
        values: dict[str, Any] = {}
        for name, key in _PREF_KEYS.items():
            if key not in data:
                raise ValueError(f"missing preference {key!r}")
            raw = data[key]
            if name == "auto_start":
                valid = isinstance(raw, bool)
            else:
                valid = isinstance(raw, int) and not isinstance(raw, bool)
            if not valid:
                raise ValueError(f"bad value for {key!r}: {raw!r}")
            values[name] = raw
        return cls(**values)


@dataclass(frozen=True)
class EngineState:
    """Immutable snapshot handed out by every engine command."""

    phase: Phase = Phase.FOCUS
    is_running: bool = False
    remaining_ms: int = DEFAULT_FOCUS_MINUTES * MS_PER_MINUTE
    completed_focus_count: int = 0
    prefs: Preferences = field(default_factory=Preferences)

    def to_dict(self) -> dict[str, Any]:
        """Payload shape used for ``timer:tick`` style events."""
        return {
            "phase": self.phase.value,
            "isRunning": self.is_running,
            "remainingMs": self.remaining_ms,
            "completedFocus": self.completed_focus_count,
            "prefs": self.prefs.to_dict(),
        }


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine:
    """Pomodoro phase machine driven by an external ``tick()`` caller.

    Every public command takes the engine lock, so a host may call
    commands from UI threads while a background driver ticks.

    Parameters
    ----------
    prefs
        Initial preferences (defaults to 25/5/15 minutes, 4 cycles,
        auto-start on).
    clock
        Zero-argument callable returning monotonic milliseconds.  Tests
        inject a fake; production uses :func:`time.monotonic_ns`.
    """

    def __init__(
        self,
        prefs: Preferences | None = None,
        *,
        clock: Callable[[], int] = _monotonic_ms,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()

        self._prefs: Preferences = prefs if prefs is not None else Preferences()
        self._phase: Phase = Phase.FOCUS
        self._is_running: bool = False
        self._remaining_ms: int = self._duration_for(Phase.FOCUS)
        self._completed_focus: int = 0

        # Absolute monotonic deadline, only set while running.
        self._end_at: int | None = None

    # ══════════════════════════════════════════════════════════════════
    #  QUERIES
    # ══════════════════════════════════════════════════════════════════

    def snapshot(self) -> EngineState:
        with self._lock:
            return self._snapshot()

    def duration_for(self, phase: Phase) -> int:
        """Full length of ``phase`` in milliseconds under current prefs."""
        with self._lock:
            return self._duration_for(phase)

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> EngineState:
        with self._lock:
            self._start()
            return self._snapshot()

    def pause(self) -> EngineState:
        with self._lock:
            self._pause()
            return self._snapshot()

    def toggle_run(self) -> EngineState:
        """Pause if running, otherwise start, as one locked step."""
        with self._lock:
            if self._is_running:
                self._pause()
            else:
                self._start()
            return self._snapshot()

    def reset(self) -> EngineState:
        """Stop and refill the clock for the current phase."""
        with self._lock:
            self._is_running = False
            self._remaining_ms = self._duration_for(self._phase)
            self._end_at = None
            return self._snapshot()

    def skip(self) -> EngineState:
        """Advance to the next phase regardless of time left."""
        with self._lock:
            self._advance()
            return self._snapshot()

    def set_preferences(self, prefs: Preferences) -> EngineState:
        """Replace preferences wholesale.

        An idle clock is refilled immediately so displays show the new
        duration.  A running countdown keeps its deadline; the new values
        apply from the next phase.
        """
        with self._lock:
            self._prefs = prefs
            if not self._is_running:
                self._remaining_ms = self._duration_for(self._phase)
            return self._snapshot()

    def tick(self) -> EngineState:
        """Refresh ``remaining_ms`` and advance once if the deadline passed.

        At most one phase is advanced per call even if the deadline is
        several phases in the past (e.g. after a system sleep).
        """
        with self._lock:
            if self._is_running:
                now = self._clock()
                if self._end_at is None:
                    self._end_at = now + self._remaining_ms
                elif now >= self._end_at:
                    self._advance()
                else:
                    self._remaining_ms = self._end_at - now
            return self._snapshot()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _snapshot(self) -> EngineState:
        return EngineState(
            phase=self._phase,
            is_running=self._is_running,
            remaining_ms=self._remaining_ms,
            completed_focus_count=self._completed_focus,
            prefs=self._prefs,
        )

    def _start(self) -> None:
        if self._is_running:
            return
        # A phase that expired without advancing must not start a
        # zero-length run.
        if self._remaining_ms == 0:
            self._remaining_ms = self._duration_for(self._phase)
        self._is_running = True
        self._end_at = self._clock() + self._remaining_ms

    def _pause(self) -> None:
        if not self._is_running:
            return
        if self._end_at is not None:
            self._remaining_ms = max(0, self._end_at - self._clock())
        self._is_running = False
        self._end_at = None

    def _duration_for(self, phase: Phase) -> int:
        return self._prefs.minutes_for(phase) * MS_PER_MINUTE

    def _next_phase(self) -> Phase:
        if self._phase is not Phase.FOCUS:
            return Phase.FOCUS
        cycles = max(self._prefs.cycles, 1)
        if self._completed_focus % cycles == 0:
            return Phase.LONG_BREAK
        return Phase.SHORT_BREAK

    def _advance(self) -> None:
        if self._phase is Phase.FOCUS:
            self._completed_focus += 1
        previous = self._phase
        self._phase = self._next_phase()
        self._remaining_ms = self._duration_for(self._phase)
        self._is_running = self._prefs.auto_start
        self._end_at = (
            self._clock() + self._remaining_ms if self._is_running else None
        )
        logger.debug(
            "Phase %s -> %s (completed focus: %d, running: %s)",
            previous.value, self._phase.value,
            self._completed_focus, self._is_running,
        )
