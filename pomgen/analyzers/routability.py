"""Page-versus-fragment classification from file path and class name."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional, Sequence

from ..models import ComponentDescriptor, RoutabilityVerdict

# Directory names that conventionally hold routed screens.
POSITIVE_PATH_SEGMENTS: Sequence[str] = (
    "pages",
    "page",
    "views",
    "view",
    "screens",
    "screen",
    "features",
    "feature",
    "routes",
)

# Class-name endings (after dropping "Component") that denote a screen.
POSITIVE_NAME_SUFFIXES: Sequence[str] = ("Page", "View", "Screen")

# Structural, chrome and child-widget roles. Any hit forces a non-routable verdict.
NEGATIVE_NAME_SUBSTRINGS: Sequence[str] = (
    "dialog",
    "modal",
    "navigation",
    "navbar",
    "sidenav",
    "menu",
    "header",
    "footer",
    "sidebar",
    "toolbar",
    "breadcrumb",
    "table",
    "grid",
    "field",
    "overlay",
    "snackbar",
    "toast",
    "tooltip",
    "popover",
    "popup",
    "layout",
    "container",
    "wrapper",
    "shell",
    "spinner",
    "loader",
    "banner",
    "card",
    "widget",
    "chip",
    "badge",
)


class RoutabilityClassifier:
    """Decides whether a component is a navigable page.

    Positive signals are evaluated first, then the negative deny-list; a
    negative hit always wins. Template content is never consulted.
    """

    def __init__(
        self,
        positive_segments: Sequence[str] = POSITIVE_PATH_SEGMENTS,
        positive_suffixes: Sequence[str] = POSITIVE_NAME_SUFFIXES,
        negative_substrings: Sequence[str] = NEGATIVE_NAME_SUBSTRINGS,
    ) -> None:
        self.positive_segments = tuple(segment.lower() for segment in positive_segments)
        self.positive_suffixes = tuple(positive_suffixes)
        self.negative_substrings = tuple(needle.lower() for needle in negative_substrings)

    def classify(self, descriptor: ComponentDescriptor) -> RoutabilityVerdict:
        base = _base_name(descriptor.name)
        positive = self._positive_reason(descriptor.source_path, base)
        negative = self._negative_reason(base)
        if negative is not None:
            return RoutabilityVerdict(routable=False, reason=negative)
        if positive is not None:
            return RoutabilityVerdict(routable=True, reason=positive)
        return RoutabilityVerdict(routable=False, reason="no page-like directory or class-name suffix")

    def _positive_reason(self, source_path: str, base: str) -> Optional[str]:
        directories = PurePosixPath(source_path.replace("\\", "/")).parts[:-1]
        for segment in directories:
            if segment.lower() in self.positive_segments:
                return f"located under '{segment}' directory"
        for suffix in self.positive_suffixes:
            if base.endswith(suffix) and base != suffix:
                return f"class name ends with '{suffix}'"
        return None

    def _negative_reason(self, base: str) -> Optional[str]:
        lowered = base.lower()
        for needle in self.negative_substrings:
            if needle in lowered:
                return f"class name contains '{needle}'"
        return None


def _base_name(name: str) -> str:
    return name[: -len("Component")] if name.endswith("Component") else name


__all__ = [
    "NEGATIVE_NAME_SUBSTRINGS",
    "POSITIVE_NAME_SUFFIXES",
    "POSITIVE_PATH_SEGMENTS",
    "RoutabilityClassifier",
]
