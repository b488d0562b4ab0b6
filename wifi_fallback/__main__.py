#!/usr/bin/env python3
"""
Entry point for running the WiFi hotspot fallback package directly.
"""

from .cli import main

if __name__ == "__main__":
    main()
