"""Extractors for Angular component metadata and routing tables."""

from .components import ComponentExtractor
from .routes import RouteExtractor

__all__ = ["ComponentExtractor", "RouteExtractor"]
