"""filemeta - Normalized file metadata for configuration management."""

__version__ = "0.1.0"
