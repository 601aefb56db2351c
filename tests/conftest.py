"""Shared pytest fixtures for Pomotray tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from pomotray.controller import TimerController
from pomotray.timer.engine import Preferences, TimerEngine

from helpers import FakeClock, PreferenceStore


@pytest.fixture(scope="session")
def qapp():
    """Headless Qt core app; QTimer needs one even without an event loop."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])
        app.setApplicationName("Pomotray-tests")
    return app


@pytest.fixture(autouse=True)
def prefs_file(tmp_path, monkeypatch):
    """Point every test at a throwaway prefs.json."""
    path = tmp_path / "prefs.json"
    monkeypatch.setattr("pomotray.preferences.APP_CONFIG_DIR", tmp_path)
    monkeypatch.setattr("pomotray.preferences.PREFS_PATH", path)
    yield path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Fresh TimerEngine with default prefs (auto-start ON)."""
    return TimerEngine(clock=clock)


@pytest.fixture
def engine_manual(clock):
    """Fresh TimerEngine with auto-start OFF."""
    return TimerEngine(Preferences(auto_start=False), clock=clock)


@pytest.fixture
def store():
    return PreferenceStore()


@pytest.fixture
def controller(qapp, engine, store):
    """Controller around ``engine`` that persists into ``store``."""
    return TimerController(engine, load=store.load, save=store.save)
