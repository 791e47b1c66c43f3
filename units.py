# units.py

"""
Conversion between physical lengths (meters) and screen lengths (pixels).

The duct always spans the full screen width, which represents
PHYSICAL_WIDTH_METERS of real duct. Resizing the window therefore rescales
the pixels-per-meter ratio rather than the physical duct.
"""

from constants import PHYSICAL_WIDTH_METERS


def meters_to_pixels(meters, screen_width: float):
    """Converts a length in meters to pixels for a screen of the given width."""
    return (meters / PHYSICAL_WIDTH_METERS) * screen_width


def pixels_to_meters(pixels, screen_width: float):
    """Converts a length in pixels to meters for a screen of the given width."""
    return (pixels / screen_width) * PHYSICAL_WIDTH_METERS
