"""TuneTide: listening-driven recommendations and natural-language song search."""

__version__ = "0.1.0"
