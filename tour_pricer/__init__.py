"""Tour pricing calculator: per-person and group prices for day tours."""

__version__ = "2.6.0"
