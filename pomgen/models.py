"""Core data models shared across pomgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

# Selection strategies, highest priority first.
STRATEGY_TEST_ID = "test-id"
STRATEGY_ID = "id"
STRATEGY_FORM_FIELD = "form-field"
STRATEGY_ROLE = "role"
STRATEGY_HANDLER = "handler"
STRATEGY_WIDGET = "widget"
STRATEGY_TABLE = "table"
STRATEGY_TEXT = "text"
STRATEGY_DYNAMIC = "dynamic"
STRATEGY_CSS = "css"

STRATEGIES: Tuple[str, ...] = (
    STRATEGY_TEST_ID,
    STRATEGY_ID,
    STRATEGY_FORM_FIELD,
    STRATEGY_ROLE,
    STRATEGY_HANDLER,
    STRATEGY_WIDGET,
    STRATEGY_TABLE,
    STRATEGY_TEXT,
    STRATEGY_DYNAMIC,
    STRATEGY_CSS,
)

KIND_APPLICATION = "application"
KIND_LIBRARY = "library"
KIND_WORKSPACE = "workspace"

ARTIFACT_BASE = "base-abstraction"
ARTIFACT_LOCATOR = "locator-file"
ARTIFACT_CONSTANTS = "constants-file"
ARTIFACT_FIXTURE = "fixture-file"
ARTIFACT_CONFIG = "config-file"
ARTIFACT_TEST_STUB = "test-stub"
ARTIFACT_REALTIME_MOCK = "realtime-mock"

ARTIFACT_KINDS: Tuple[str, ...] = (
    ARTIFACT_BASE,
    ARTIFACT_LOCATOR,
    ARTIFACT_CONSTANTS,
    ARTIFACT_FIXTURE,
    ARTIFACT_CONFIG,
    ARTIFACT_TEST_STUB,
)


@dataclass(frozen=True)
class ComponentDescriptor:
    """Declared identity of one Angular component."""

    name: str
    selector: str
    source_path: str
    template_path: Optional[str] = None
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    inline_template: Optional[str] = None


@dataclass(frozen=True)
class ElementSelector:
    """One testable element discovered in a component template."""

    element_kind: str
    strategy: str
    expression: str
    property_name: str
    text: Optional[str] = None
    click_handler: Optional[str] = None
    is_table: bool = False
    is_link: bool = False
    is_library_widget: bool = False
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view so a frozen selector cannot change after analysis.
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def parent(self) -> Optional[str]:
        """Property name of the table root for row/header/column sub-locators."""
        return self.attributes.get("parent")


@dataclass(frozen=True)
class Route:
    """One entry of an Angular routing table."""

    path: str
    component: Optional[str] = None
    redirect_to: Optional[str] = None
    lazy: bool = False
    source: Optional[str] = None


@dataclass(frozen=True)
class RoutabilityVerdict:
    """Outcome of page-vs-fragment classification."""

    routable: bool
    reason: str


@dataclass(frozen=True)
class ComponentModel:
    """A component merged with its selectors and routing verdict."""

    descriptor: ComponentDescriptor
    selectors: Tuple[ElementSelector, ...]
    routable: bool
    reason: str
    route_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.routable and not self.route_path:
            raise ValueError(f"Routable component {self.descriptor.name} needs a route path")
        if not self.routable and self.route_path is not None:
            raise ValueError(f"Child component {self.descriptor.name} cannot carry a route path")

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class ProjectModel:
    """Complete semantic model of one project, ready for synthesis."""

    name: str
    kind: str
    components: Tuple[ComponentModel, ...]
    routes: Tuple[Route, ...] = ()


@dataclass(frozen=True)
class ProjectLayout:
    """A single project discovered by the project locator."""

    name: str
    kind: str
    root: Path
    source_root: Path


@dataclass
class WorkspaceLayout:
    """Locator output: what the target path is and which projects it holds."""

    root: Path
    kind: str
    projects: List[ProjectLayout] = field(default_factory=list)
    default_project: Optional[str] = None

    def find(self, name: str) -> Optional[ProjectLayout]:
        lowered = name.lower()
        for project in self.projects:
            if project.name.lower() == lowered:
                return project
        return None

    def applications(self) -> List[ProjectLayout]:
        return [project for project in self.projects if project.kind == KIND_APPLICATION]


@dataclass(frozen=True)
class GeneratedArtifact:
    """One rendered output file."""

    kind: str
    relative_path: str
    content: str


@dataclass(frozen=True)
class ProducedArtifact:
    """An artifact that has been persisted."""

    path: str
    kind: str


@dataclass
class GenerationResult:
    """Uniform outcome returned by every orchestrator operation."""

    artifacts: List[ProducedArtifact] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def counts(self) -> Dict[str, int]:
        return {
            "produced": len(self.artifacts),
            "warned": len(self.warnings),
            "failed": len(self.errors),
        }

    @classmethod
    def failed(cls, message: str) -> "GenerationResult":
        return cls(errors=[message])

    def merge(self, other: "GenerationResult", *, prefix: Optional[str] = None) -> None:
        """Fold another result into this one, optionally tagging messages."""
        tag = f"[{prefix}] " if prefix else ""
        self.artifacts.extend(other.artifacts)
        self.warnings.extend(f"{tag}{warning}" for warning in other.warnings)
        self.errors.extend(f"{tag}{error}" for error in other.errors)


@dataclass
class GenerationRequest:
    """Selection of artifact kinds for a partial generation run."""

    path: str
    output: Optional[str] = None
    project: Optional[str] = None
    base: bool = False
    page_objects: bool = False
    selectors: bool = False
    fixtures: bool = False
    configs: bool = False
    tests: bool = False
    all: bool = False

    def kinds(self) -> Set[str]:
        if self.all:
            return set(ARTIFACT_KINDS)
        flags: Sequence[Tuple[bool, str]] = (
            (self.base, ARTIFACT_BASE),
            (self.page_objects, ARTIFACT_LOCATOR),
            (self.selectors, ARTIFACT_CONSTANTS),
            (self.fixtures, ARTIFACT_FIXTURE),
            (self.configs, ARTIFACT_CONFIG),
            (self.tests, ARTIFACT_TEST_STUB),
        )
        return {kind for enabled, kind in flags if enabled}

    def is_empty(self) -> bool:
        return not self.kinds()


__all__ = [
    "ARTIFACT_BASE",
    "ARTIFACT_CONFIG",
    "ARTIFACT_CONSTANTS",
    "ARTIFACT_FIXTURE",
    "ARTIFACT_KINDS",
    "ARTIFACT_LOCATOR",
    "ARTIFACT_REALTIME_MOCK",
    "ARTIFACT_TEST_STUB",
    "ComponentDescriptor",
    "ComponentModel",
    "ElementSelector",
    "GeneratedArtifact",
    "GenerationRequest",
    "GenerationResult",
    "KIND_APPLICATION",
    "KIND_LIBRARY",
    "KIND_WORKSPACE",
    "ProducedArtifact",
    "ProjectLayout",
    "ProjectModel",
    "RoutabilityVerdict",
    "Route",
    "STRATEGIES",
    "STRATEGY_CSS",
    "STRATEGY_DYNAMIC",
    "STRATEGY_FORM_FIELD",
    "STRATEGY_HANDLER",
    "STRATEGY_ID",
    "STRATEGY_ROLE",
    "STRATEGY_TABLE",
    "STRATEGY_TEST_ID",
    "STRATEGY_TEXT",
    "STRATEGY_WIDGET",
    "WorkspaceLayout",
]
