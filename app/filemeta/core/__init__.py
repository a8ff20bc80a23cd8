"""Core services: checksums, settings, paths and metadata comparison."""
