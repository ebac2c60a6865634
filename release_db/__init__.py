"""Synthesize a pacman repository database from GitHub release assets."""

__version__ = "0.1.0"
