"""Textual screens."""

from .layout_list import LayoutListScreen

__all__ = ["LayoutListScreen"]
