"""ObjectTier - tiered storage lifecycle for content-addressed file objects."""

__version__ = "0.1.0"
