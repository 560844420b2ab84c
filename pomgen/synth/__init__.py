"""Code synthesis of Playwright scaffolding from a ProjectModel."""

from .renderer import CodeSynthesizer

__all__ = ["CodeSynthesizer"]
