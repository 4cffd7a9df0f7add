"""HTML preview plugin."""

from .task import write_html

__all__ = ["write_html"]
