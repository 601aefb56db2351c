"""Text shown in the tray title and menu, derived from a snapshot.

These are plain string helpers; whatever draws the tray calls them.
"""

from __future__ import annotations

from dataclasses import dataclass

from .timer.engine import EngineState, Phase


_PHASE_LABELS: dict[Phase, str] = {
    Phase.FOCUS: "Focus",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}


def format_remaining(ms: int) -> str:
    """``MM:SS``, rounding partial seconds up so 00:00 means done."""
    total_seconds = (max(0, ms) + 999) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def phase_label(phase: Phase) -> str:
    return _PHASE_LABELS[phase]


def run_button_label(state: EngineState) -> str:
    return "Pause" if state.is_running else "Start"


def format_minutes_value(label: str, minutes: int) -> str:
    return f"{label}: {minutes} min"


def format_cycles_value(cycles: int) -> str:
    return f"Current: {cycles} cycles"


def status_text(state: EngineState) -> str:
    return f"{phase_label(state.phase)} {format_remaining(state.remaining_ms)}"


@dataclass(frozen=True)
class MenuText:
    """Every piece of tray/menu text for one snapshot."""

    tray_title: str
    status: str
    run_label: str
    auto_start: bool
    focus_value: str
    short_break_value: str
    long_break_value: str
    cycles_value: str


def menu_text(state: EngineState) -> MenuText:
    prefs = state.prefs
    return MenuText(
        tray_title=format_remaining(state.remaining_ms),
        status=status_text(state),
        run_label=run_button_label(state),
        auto_start=prefs.auto_start,
        focus_value=format_minutes_value("Current", prefs.focus_minutes),
        short_break_value=format_minutes_value(
            "Current", prefs.short_break_minutes,
        ),
        long_break_value=format_minutes_value(
            "Current", prefs.long_break_minutes,
        ),
        cycles_value=format_cycles_value(prefs.cycles),
    )
