"""Version information for the cycle audit engine."""

__version__ = "0.1.0"
