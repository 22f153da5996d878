"""Curve presets, constants and the curve factory."""
