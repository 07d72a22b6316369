"""Display formatting and export helpers."""
