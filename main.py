#!/usr/bin/env python3
"""Pomotray — entry point.

Run with:
    python main.py
    python -m pomotray
"""

from pomotray.__main__ import main


if __name__ == "__main__":
    main()
