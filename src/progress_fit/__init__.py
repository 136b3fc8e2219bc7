"""progress-fit: workout and nutrition tracking."""

__version__ = "0.1.0"
