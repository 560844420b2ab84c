"""Render a ProjectModel into Playwright TypeScript artifacts via Jinja templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, MutableSet, Optional, Sequence, Set

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..config import GeneratorOptions
from ..logging import get_logger
from ..models import (
    ARTIFACT_BASE,
    ARTIFACT_CONFIG,
    ARTIFACT_CONSTANTS,
    ARTIFACT_FIXTURE,
    ARTIFACT_KINDS,
    ARTIFACT_LOCATOR,
    ARTIFACT_REALTIME_MOCK,
    ARTIFACT_TEST_STUB,
    STRATEGY_DYNAMIC,
    STRATEGY_HANDLER,
    STRATEGY_ROLE,
    STRATEGY_TEXT,
    STRATEGY_WIDGET,
    ComponentModel,
    ElementSelector,
    GeneratedArtifact,
    ProjectModel,
    Route,
)
from ..naming import ComponentNames, ElementNames, component_names, element_names, reserved_members

BASE_FILE = "base.page.ts"
FIXTURE_FILE = "fixtures.ts"
TIMEOUTS_FILE = "config/timeouts.ts"
ROUTES_FILE = "config/routes.ts"
REALTIME_MOCK_FILE = "signalr-mock.fixture.ts"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

# Glob patterns for page.route() interception, emitted alongside the route table.
ENDPOINT_PATTERNS: Dict[str, str] = {
    "api": "**/api/**",
    "auth": "**/api/auth/**",
    "graphql": "**/graphql",
    "hubs": "**/hubs/**",
    "assets": "**/assets/**",
}

_VISIBLE_STRATEGIES = {STRATEGY_ROLE, STRATEGY_HANDLER, STRATEGY_WIDGET, STRATEGY_TEXT, STRATEGY_DYNAMIC}
_TEXT_STRATEGIES = {STRATEGY_TEXT, STRATEGY_DYNAMIC}
_TABLE_PARTS = {"table-rows", "table-header", "table-column"}
_TEXT_KINDS = {"heading", "text"}
_TABLE_MEMBERS = ("row", "column", "headers", "row_count", "click_row")

_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class ElementView:
    """Template-facing view of one selector."""

    names: ElementNames
    selector: ElementSelector
    clickable: bool
    fillable: bool
    visible: bool
    text_methods: bool
    doc: str


@dataclass(frozen=True)
class TableView:
    names: ElementNames
    rows_key: str
    header_key: str


@dataclass(frozen=True)
class ComponentView:
    names: ComponentNames
    model: ComponentModel
    elements: Sequence[ElementView]
    tables: Sequence[TableView]
    ready_selector: Optional[str]


class CodeSynthesizer:
    """Pure renderer: the same model and options always yield identical artifacts."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.env = self._create_env(templates_dir)
        self.logger = get_logger("synth")

    def render(
        self,
        model: ProjectModel,
        options: GeneratorOptions,
        *,
        kinds: Optional[Iterable[str]] = None,
    ) -> List[GeneratedArtifact]:
        """Render the artifact set for ``model``, optionally limited to ``kinds``."""
        wanted: Set[str] = set(kinds) if kinds is not None else set(ARTIFACT_KINDS)
        taken: Set[str] = set()
        views = [self._component_view(component, options, taken) for component in model.components]
        common = {"docs": options.doc_comments, "options": options, "project": model}

        artifacts: List[GeneratedArtifact] = []

        def emit(kind: str, relative_path: str, template: str, **context: object) -> None:
            if kind not in wanted:
                return
            content = self.env.get_template(template).render(
                header=self._header(options, relative_path), **common, **context
            )
            artifacts.append(GeneratedArtifact(kind=kind, relative_path=relative_path, content=content))

        emit(ARTIFACT_BASE, BASE_FILE, "base.page.ts.j2")
        for view in views:
            emit(ARTIFACT_LOCATOR, view.names.page_file, "page.ts.j2", c=view)
            emit(ARTIFACT_CONSTANTS, view.names.selectors_file, "selectors.ts.j2", c=view)
        emit(ARTIFACT_FIXTURE, FIXTURE_FILE, "fixtures.ts.j2", components=views)
        emit(ARTIFACT_CONFIG, TIMEOUTS_FILE, "timeouts.ts.j2")
        emit(
            ARTIFACT_CONFIG,
            ROUTES_FILE,
            "routes.ts.j2",
            components=[view for view in views if view.model.routable],
            routes=[_route_entry(route) for route in model.routes],
            endpoints=ENDPOINT_PATTERNS,
        )
        for view in views:
            emit(ARTIFACT_TEST_STUB, view.names.test_file, "test.ts.j2", c=view)

        self.logger.debug("Rendered %d artifacts for project %s", len(artifacts), model.name)
        return artifacts

    def render_realtime_mock(self, options: GeneratorOptions) -> GeneratedArtifact:
        """Render the standalone SignalR hub connection mock."""
        content = self.env.get_template("signalr-mock.fixture.ts.j2").render(
            header=self._header(options, REALTIME_MOCK_FILE),
            docs=options.doc_comments,
            options=options,
        )
        return GeneratedArtifact(kind=ARTIFACT_REALTIME_MOCK, relative_path=REALTIME_MOCK_FILE, content=content)

    def _component_view(
        self, component: ComponentModel, options: GeneratorOptions, taken: MutableSet[str]
    ) -> ComponentView:
        names = component_names(component.descriptor, test_suffix=options.test_file_suffix, taken=taken)
        members = reserved_members()
        elements = [_element_view(selector, members) for selector in component.selectors]
        keys = {view.selector.property_name: view.names.constant_key for view in elements}
        tables: List[TableView] = []
        for view in elements:
            if not view.selector.is_table:
                continue
            parts = {
                part.element_kind: keys[part.property_name]
                for part in component.selectors
                if part.parent == view.selector.property_name
            }
            tables.append(
                TableView(
                    names=view.names,
                    rows_key=parts.get("table-rows", view.names.constant_key),
                    header_key=parts.get("table-header", view.names.constant_key),
                )
            )
        return ComponentView(
            names=names,
            model=component,
            elements=elements,
            tables=tables,
            ready_selector=component.descriptor.selector or None,
        )

    def _header(self, options: GeneratorOptions, relative_path: str) -> str:
        if not options.file_header:
            return ""
        generated = options.generated_at.strftime(DATE_FORMAT) if options.generated_at else ""
        text = (
            options.file_header.replace("{FileName}", Path(relative_path).name)
            .replace("{GeneratedDate}", generated)
            .replace("{ToolVersion}", options.tool_version)
        )
        return text.rstrip("\n") + "\n\n"

    def _create_env(self, templates_dir: Path | None) -> Environment:
        search_paths: List[str] = []
        if templates_dir is not None:
            search_paths.append(str(Path(templates_dir)))
        search_paths.append(str(_TEMPLATES_DIR))
        env = Environment(
            loader=FileSystemLoader(search_paths),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["ts"] = ts_string
        env.filters["doc"] = _doc_text
        return env


def ts_string(value: object) -> str:
    """Quote a value as a single-quoted TypeScript string literal."""
    text = str(value)
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def _doc_text(value: object) -> str:
    return " ".join(str(value).split()).replace("*/", "*\\/")


def _element_view(selector: ElementSelector, taken: MutableSet[str]) -> ElementView:
    part = selector.element_kind in _TABLE_PARTS
    clickable = not part and bool(
        selector.click_handler or selector.is_link or selector.element_kind == "button"
    )
    fillable = selector.element_kind == "input"
    visible = not part and (
        selector.is_table
        or selector.element_kind in {"button", "link"} | _TEXT_KINDS
        or selector.strategy in _VISIBLE_STRATEGIES
        or selector.text is not None
    )
    text_methods = not part and not fillable and (
        selector.strategy in _TEXT_STRATEGIES
        or selector.element_kind in _TEXT_KINDS
        or selector.text is not None
    )

    members = ["accessor"]
    if clickable:
        members.append("click")
    if fillable:
        members.append("fill")
    if visible:
        members.append("expect_visible")
    if text_methods:
        members.extend(["get_text", "expect_text"])
    if selector.is_table:
        members.extend(_TABLE_MEMBERS)

    return ElementView(
        names=element_names(selector, taken=taken, members=members),
        selector=selector,
        clickable=clickable,
        fillable=fillable,
        visible=visible,
        text_methods=text_methods,
        doc=_describe(selector),
    )


def _describe(selector: ElementSelector) -> str:
    subject = f'"{selector.text}"' if selector.text else selector.property_name
    kind = selector.element_kind.replace("-", " ")
    details = [f"strategy: {selector.strategy}"]
    if selector.click_handler:
        details.append(f"handler: {selector.click_handler}()")
    if "navigation" in selector.attributes:
        details.append(f"navigates to {selector.attributes['navigation']}")
    if "widget" in selector.attributes and selector.attributes["widget"] != "table":
        details.append(f"widget: {selector.attributes['widget']}")
    return f"{subject} {kind} ({', '.join(details)})."


def _route_entry(route: Route) -> Dict[str, object]:
    return {
        "path": "/" + route.path.strip("/"),
        "component": route.component,
        "redirect_to": route.redirect_to,
        "lazy": route.lazy,
    }


__all__ = ["CodeSynthesizer", "ENDPOINT_PATTERNS", "ts_string"]
