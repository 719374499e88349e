"""Animated video generator: prompt to narrated Manim video."""

__version__ = "0.1.0"
