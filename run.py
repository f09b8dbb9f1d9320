#!/usr/bin/env python3
"""
Convenience entry point for running tutorslots directly.

Usage: python run.py [command] [options]
"""

from tutorslots.cli.app import app

if __name__ == "__main__":
    app()
