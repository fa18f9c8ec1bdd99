"""Location-pinned photo albums: search, persist and hydrate."""

__version__ = "0.1.0"
