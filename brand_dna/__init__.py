"""Brand DNA management: configuration model, validation, style rendering and persistence."""

__version__ = "1.0.0"
