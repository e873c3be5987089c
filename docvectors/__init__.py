"""Per-document vector similarity store backed by LanceDB."""

__version__ = "0.1.0"
