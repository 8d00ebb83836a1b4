"""Static mirroring of JavaScript-rendered websites."""

__version__ = "0.1.0"
