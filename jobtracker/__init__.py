"""Job application tracker with live updates."""

__version__ = "1.0.0"
