"""Layered try-on pipeline."""

from .compositor import SequentialCompositor

__all__ = ["SequentialCompositor"]
