"""
Hueprint

Dominant color palette extraction for uploaded raster images.
"""

__version__ = "1.0.0"
