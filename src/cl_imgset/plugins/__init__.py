"""Resize and preview plugins."""
