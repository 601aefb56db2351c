"""Shared test helpers for Pomotray."""

from pomotray.timer.engine import EngineState, Phase, Preferences


class FakeClock:
    """Monotonic millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class PreferenceStore:
    """In-memory stand-in for the prefs.json load/save pair."""

    def __init__(self, stored: Preferences | None = None, fail: bool = False):
        self.stored = stored
        self.saved: list[Preferences] = []
        self.fail = fail

    def load(self) -> Preferences:
        return self.stored if self.stored is not None else Preferences()

    def save(self, prefs: Preferences) -> bool:
        if self.fail:
            raise PermissionError("read-only config dir")
        self.saved.append(prefs)
        self.stored = prefs
        return True
class SnapshotCollector:
    """Slot that records every EngineState a controller signal carries."""

    def __init__(self):
        self.states: list[EngineState] = []

    def __call__(self, state: EngineState):
        self.states.append(state)

    def __len__(self):
        return len(self.states)

    @property
    def last(self) -> EngineState | None:
        return self.states[-1] if self.states else None

    @property
    def phases(self) -> list[Phase]:
        return [s.phase for s in self.states]
