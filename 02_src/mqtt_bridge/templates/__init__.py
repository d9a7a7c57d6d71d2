"""Template rendering module."""

from .renderer import has_placeholders, render_template

__all__ = ["has_placeholders", "render_template"]
