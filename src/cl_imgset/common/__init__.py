"""Shared schemas, config, paths and persistence."""
