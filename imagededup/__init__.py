"""Find, filter and clean up duplicate images from a perceptual hash database."""

__version__ = "0.1.0"