"""Pomotray: a menu-bar Pomodoro timer core."""

__version__ = "0.1.0"
