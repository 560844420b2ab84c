"""Playwright page-object scaffolding generator for Angular projects."""

__version__ = "1.5.0"

__all__ = ["__version__"]
