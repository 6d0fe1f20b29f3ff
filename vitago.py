#!/usr/bin/env python3
"""
Convenience entry point for running vitago-availability directly.

Usage: python vitago.py [command] [options]
"""

from vitago_availability.cli.app import app

if __name__ == "__main__":
    app()
