"""
Hueprint Colors Module

Provides downscaling, frequency-ranked color bucketing, grayscale
classification and palette export for decoded images.
"""

__version__ = "1.0.0"
