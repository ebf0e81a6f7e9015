"""Engine rendering runtime modules."""

from engine.rendering.pixels import PixelSurface, PixelsError, ScalingMatrix

__all__ = ["PixelSurface", "PixelsError", "ScalingMatrix"]
