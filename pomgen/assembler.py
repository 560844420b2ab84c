"""Semantic model assembly: selectors + routability + routes per project."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .analyzers.routability import RoutabilityClassifier
from .logging import get_logger
from .models import ComponentDescriptor, ComponentModel, ElementSelector, ProjectModel, Route
from .naming import component_names

AnalyzedComponent = Tuple[ComponentDescriptor, Sequence[ElementSelector]]


@dataclass
class Assembly:
    """An assembled project model plus the warnings raised while building it."""

    model: ProjectModel
    warnings: List[str] = field(default_factory=list)


class ModelAssembler:
    """Merges per-component analysis results into a ProjectModel."""

    def __init__(self, classifier: RoutabilityClassifier | None = None) -> None:
        self.classifier = classifier or RoutabilityClassifier()
        self.logger = get_logger("assembler")

    def assemble(
        self,
        name: str,
        kind: str,
        analyzed: Sequence[AnalyzedComponent],
        routes: Sequence[Route] = (),
    ) -> Assembly:
        warnings: List[str] = []
        unique = _dedupe(analyzed)
        removed = len(analyzed) - len(unique)
        if removed:
            warnings.append(f"Removed {removed} duplicate component(s) with the same name")

        components: List[ComponentModel] = []
        for descriptor, selectors in unique:
            if not selectors:
                warnings.append(f"Component {descriptor.name} has no detected elements")
            verdict = self.classifier.classify(descriptor)
            referencing = [route for route in routes if route.component == descriptor.name]
            route_path: Optional[str] = None
            if verdict.routable:
                route_path = _route_path(descriptor, referencing)
                if not referencing:
                    warnings.append(
                        f"No route declares {descriptor.name}; using conventional path {route_path}"
                    )
            elif referencing:
                warnings.append(
                    f"Route '/{referencing[0].path}' references {descriptor.name}, "
                    f"which is treated as a child component ({verdict.reason})"
                )
            components.append(
                ComponentModel(
                    descriptor=descriptor,
                    selectors=tuple(selectors),
                    routable=verdict.routable,
                    reason=verdict.reason,
                    route_path=route_path,
                )
            )

        self.logger.debug(
            "Assembled project %s: %d components, %d routable, %d routes",
            name,
            len(components),
            sum(1 for component in components if component.routable),
            len(routes),
        )
        model = ProjectModel(name=name, kind=kind, components=tuple(components), routes=tuple(routes))
        return Assembly(model=model, warnings=warnings)


def _dedupe(analyzed: Sequence[AnalyzedComponent]) -> List[AnalyzedComponent]:
    """Keep one entry per class name: the one with the most selectors, first wins ties."""
    best: Dict[str, int] = {}
    for index, (descriptor, selectors) in enumerate(analyzed):
        current = best.get(descriptor.name)
        if current is None or len(selectors) > len(analyzed[current][1]):
            best[descriptor.name] = index
    keep = set(best.values())
    return [entry for index, entry in enumerate(analyzed) if index in keep]


def _route_path(descriptor: ComponentDescriptor, routes: Sequence[Route]) -> str:
    for route in routes:
        if route.redirect_to is None:
            return "/" + route.path.strip("/")
    return "/" + component_names(descriptor).file_stem


__all__ = ["Assembly", "ModelAssembler"]
