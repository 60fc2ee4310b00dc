"""StableUI server bootstrap and lifecycle."""

__version__ = "0.1.0"
