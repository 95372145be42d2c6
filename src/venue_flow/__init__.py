"""Animated subway-passenger flow around live-performance venues."""

__version__ = "0.1.0"
