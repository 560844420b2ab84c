"""Pipeline orchestration for application, library, workspace and remote runs."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .analyzers import TemplateAnalyzer
from .assembler import AnalyzedComponent, ModelAssembler
from .config import ConfigError, GeneratorOptions, PomGenConfig, apply_overrides, load_config
from .errors import (
    InputNotFound,
    MalformedSource,
    ManifestMissing,
    OperationCancelled,
    PersistenceFailure,
    PomGenError,
)
from .extractors import ComponentExtractor, RouteExtractor
from .fs import FileAccess, LocalFileSystem
from .locator import ProjectLocator
from .logging import get_logger, set_debug
from .models import (
    KIND_APPLICATION,
    KIND_LIBRARY,
    KIND_WORKSPACE,
    GeneratedArtifact,
    GenerationRequest,
    GenerationResult,
    ProducedArtifact,
    ProjectLayout,
    ProjectModel,
    Route,
    WorkspaceLayout,
)
from .remote import CloneError, RepoCloner, parse_git_url
from .synth import CodeSynthesizer

Cancel = Optional[threading.Event]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Orchestrator:
    """Sequences locate -> extract -> analyze -> assemble -> render -> persist."""

    def __init__(
        self,
        fs: FileAccess | None = None,
        locator: ProjectLocator | None = None,
        components: ComponentExtractor | None = None,
        routes: RouteExtractor | None = None,
        analyzer: TemplateAnalyzer | None = None,
        assembler: ModelAssembler | None = None,
        synthesizer: CodeSynthesizer | None = None,
        cloner: RepoCloner | None = None,
        *,
        overrides: Optional[Mapping[str, Any]] = None,
        max_workers: int = 1,
        clock: Callable[[], datetime] | None = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.fs = fs or LocalFileSystem()
        self.locator = locator or ProjectLocator(self.fs)
        self.components = components or ComponentExtractor(self.fs)
        self.routes = routes or RouteExtractor(self.fs)
        self.analyzer = analyzer or TemplateAnalyzer()
        self.assembler = assembler or ModelAssembler()
        self.synthesizer = synthesizer or CodeSynthesizer()
        self.cloner = cloner or RepoCloner()
        self.overrides: Dict[str, Any] = dict(overrides or {})
        self.max_workers = max(1, max_workers)
        self.clock = clock or _utcnow
        self.environ = environ
        self.logger = get_logger("orchestrator")
        self._synthesizers: Dict[Path, CodeSynthesizer] = {}

    # Operations -----------------------------------------------------------

    def run_application(
        self,
        path: str | Path,
        output: str | Path | None = None,
        *,
        project: Optional[str] = None,
        cancel: Cancel = None,
    ) -> GenerationResult:
        """Analyze one application (or one project picked from a workspace) and write its scaffolding."""
        self.logger.info("Generating scaffolding for application at %s", path)
        try:
            layout = self.locator.locate(path)
            config, options = self._load(layout.root)
            target = self._pick_application(layout, project)
        except (PomGenError, ConfigError) as exc:
            return self._finish(GenerationResult.failed(str(exc)))
        destination = self._output_dir(layout.root, options, output)
        return self._finish(self._generate(target, config, options, destination, cancel=cancel))

    def run_library(
        self,
        path: str | Path,
        output: str | Path | None = None,
        *,
        project: Optional[str] = None,
        cancel: Cancel = None,
    ) -> GenerationResult:
        """Analyze a library as one component tree."""
        self.logger.info("Generating scaffolding for library at %s", path)
        try:
            layout = self.locator.locate(path)
            config, options = self._load(layout.root)
            target = self._pick_library(layout, project)
        except (PomGenError, ConfigError) as exc:
            return self._finish(GenerationResult.failed(str(exc)))
        destination = self._output_dir(layout.root, options, output)
        return self._finish(self._generate(target, config, options, destination, cancel=cancel))

    def run_workspace(
        self,
        path: str | Path,
        output: str | Path | None = None,
        *,
        project: Optional[str] = None,
        cancel: Cancel = None,
    ) -> GenerationResult:
        """Generate every application of a workspace, or only ``project`` when named.

        Each project renders into ``<output>/<project>/``; a failing project never
        stops the others.
        """
        self.logger.info("Generating scaffolding for workspace at %s", path)
        try:
            layout = self.locator.locate(path)
            if layout.kind != KIND_WORKSPACE:
                raise InputNotFound(f"No Angular workspace found at {layout.root}", path=layout.root)
            config, options = self._load(layout.root)
            projects = self._workspace_projects(layout, project)
        except (PomGenError, ConfigError) as exc:
            return self._finish(GenerationResult.failed(str(exc)))

        destination = self._output_dir(layout.root, options, output)

        def work(item: ProjectLayout) -> GenerationResult:
            return self._generate(item, config, options, destination / item.name, cancel=cancel)

        result = GenerationResult()
        if self.max_workers > 1 and len(projects) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(projects))) as pool:
                outcomes = list(pool.map(work, projects))
        else:
            outcomes = [work(item) for item in projects]
        for item, outcome in zip(projects, outcomes):
            result.merge(outcome, prefix=item.name)
        return self._finish(result)

    def run_artifacts(self, request: GenerationRequest, *, cancel: Cancel = None) -> GenerationResult:
        """Generate only the artifact kinds selected in ``request``."""
        if request.is_empty():
            return self._finish(GenerationResult.failed("No generation options specified"))
        kinds = request.kinds()
        self.logger.info("Generating %s for %s", ", ".join(sorted(kinds)), request.path)
        try:
            layout = self.locator.locate(request.path)
            config, options = self._load(layout.root)
            target = self._pick_application(layout, request.project)
        except (PomGenError, ConfigError) as exc:
            return self._finish(GenerationResult.failed(str(exc)))
        destination = self._output_dir(layout.root, options, request.output)
        return self._finish(
            self._generate(target, config, options, destination, kinds=kinds, cancel=cancel)
        )

    def run_realtime_mock(self, output: str | Path) -> GenerationResult:
        """Write the standalone SignalR connection mock; needs no source tree."""
        try:
            options = self._stamp(apply_overrides(GeneratorOptions(), **self.overrides))
        except ConfigError as exc:
            return self._finish(GenerationResult.failed(str(exc)))
        artifact = self._synthesizer_for(options).render_realtime_mock(options)
        result = GenerationResult()
        self._persist([artifact], Path(output).expanduser().resolve(), result)
        return self._finish(result)

    def run_remote(
        self,
        url: str,
        output: str | Path | None = None,
        *,
        project: Optional[str] = None,
        cancel: Cancel = None,
    ) -> GenerationResult:
        """Clone ``url`` into a temporary directory, generate from it, then remove the clone."""
        try:
            info = parse_git_url(url)
        except ValueError as exc:
            return self._finish(GenerationResult.failed(str(exc)))

        self.logger.info("Cloning %s", info.clone_url)
        try:
            checkout = self.cloner.clone(info)
        except CloneError as exc:
            return self._finish(GenerationResult.failed(str(exc)))

        try:
            start = checkout
            if info.path_in_repo:
                start = checkout / info.path_in_repo
                if info.is_file_path:
                    start = start.parent
            root = self._angular_root(start, checkout)
            if root is None:
                return self._finish(
                    GenerationResult.failed(f"No Angular workspace, application, or library found in {url}")
                )
            if output is None:
                try:
                    _, options = self._load(root)
                except ConfigError as exc:
                    return self._finish(GenerationResult.failed(str(exc)))
                output = Path.cwd() / options.output_directory

            if self.locator.is_workspace(root):
                return self.run_workspace(root, output, project=project, cancel=cancel)
            if self.locator.is_library(root):
                return self.run_library(root, output, cancel=cancel)
            return self.run_application(root, output, cancel=cancel)
        finally:
            self.cloner.cleanup(checkout)

    # Pipeline -------------------------------------------------------------

    def _generate(
        self,
        project: ProjectLayout,
        config: PomGenConfig,
        options: GeneratorOptions,
        destination: Path,
        *,
        kinds: Optional[Iterable[str]] = None,
        cancel: Cancel = None,
    ) -> GenerationResult:
        result = GenerationResult()
        try:
            self.locator.verify(project)
            model = self._build_model(project, config.exclude_paths, result.warnings, cancel)
            self._check(cancel)
            artifacts = self._synthesizer_for(options).render(model, options, kinds=kinds)
            self._check(cancel)
            self._persist(artifacts, destination, result, cancel)
        except (ManifestMissing, OperationCancelled) as exc:
            result.errors.append(str(exc))
        self.logger.debug(
            "Project %s: %d artifacts, %d warnings, %d errors",
            project.name,
            len(result.artifacts),
            len(result.warnings),
            len(result.errors),
        )
        return result

    def _build_model(
        self,
        project: ProjectLayout,
        exclude: Iterable[str],
        warnings: List[str],
        cancel: Cancel,
    ) -> ProjectModel:
        analyzed: List[AnalyzedComponent] = []
        for path in self.components.discover(project.source_root, exclude=tuple(exclude)):
            self._check(cancel)
            try:
                descriptor = self.components.extract_file(path, project.root)
                if descriptor is None:
                    continue
                markup = self.components.load_template(descriptor, project.root)
            except (MalformedSource, OSError, UnicodeDecodeError) as exc:
                warnings.append(f"Skipped {path.name}: {exc}")
                continue
            if markup is None:
                warnings.append(f"Template {descriptor.template_path} for {descriptor.name} not found")
                markup = ""
            analyzed.append((descriptor, self.analyzer.analyze(markup, descriptor)))

        self._check(cancel)
        routes: List[Route] = []
        for path in self.routes.discover(project.source_root):
            try:
                routes.extend(self.routes.extract_file(path, project.root))
            except (MalformedSource, OSError, UnicodeDecodeError) as exc:
                warnings.append(f"Skipped route file {path.name}: {exc}")

        self._check(cancel)
        assembly = self.assembler.assemble(project.name, project.kind, analyzed, routes)
        warnings.extend(assembly.warnings)
        return assembly.model

    def _persist(
        self,
        artifacts: Iterable[GeneratedArtifact],
        destination: Path,
        result: GenerationResult,
        cancel: Cancel = None,
    ) -> None:
        for artifact in artifacts:
            self._check(cancel)
            target = destination / artifact.relative_path
            try:
                self.fs.write_text(target, artifact.content)
            except PersistenceFailure as exc:
                result.errors.append(str(exc))
                continue
            except OSError as exc:
                result.errors.append(f"Failed to write {target}: {exc}")
                continue
            result.artifacts.append(ProducedArtifact(path=str(target), kind=artifact.kind))

    # Helpers --------------------------------------------------------------

    def _load(self, root: Path) -> Tuple[PomGenConfig, GeneratorOptions]:
        config = load_config(root, environ=self.environ)
        options = self._stamp(apply_overrides(config.generator, **self.overrides))
        if options.debug:
            set_debug(True)
        return config, options

    def _stamp(self, options: GeneratorOptions) -> GeneratorOptions:
        if options.generated_at is not None:
            return options
        return replace(options, generated_at=self.clock())

    def _synthesizer_for(self, options: GeneratorOptions) -> CodeSynthesizer:
        if options.templates_dir is None:
            return self.synthesizer
        key = Path(options.templates_dir)
        if key not in self._synthesizers:
            self._synthesizers[key] = CodeSynthesizer(key)
        return self._synthesizers[key]

    def _output_dir(self, root: Path, options: GeneratorOptions, output: str | Path | None) -> Path:
        if output is not None:
            return Path(output).expanduser().resolve()
        return root / options.output_directory

    def _pick_application(self, layout: WorkspaceLayout, name: Optional[str]) -> ProjectLayout:
        if layout.kind == KIND_WORKSPACE:
            return self.locator.select_application(layout, name)
        return layout.projects[0]

    def _pick_library(self, layout: WorkspaceLayout, name: Optional[str]) -> ProjectLayout:
        if layout.kind == KIND_LIBRARY:
            return layout.projects[0]
        if layout.kind == KIND_APPLICATION:
            raise InputNotFound(f"No Angular library found at {layout.root}", path=layout.root)
        if name:
            return self.locator.select_application(layout, name)
        libraries = [item for item in layout.projects if item.kind == KIND_LIBRARY]
        if not libraries:
            raise ManifestMissing("No library projects found in workspace", path=layout.root)
        return libraries[0]

    def _workspace_projects(self, layout: WorkspaceLayout, name: Optional[str]) -> List[ProjectLayout]:
        if name:
            return [self.locator.select_application(layout, name)]
        applications = layout.applications()
        if not applications:
            raise ManifestMissing("No application projects found in workspace", path=layout.root)
        return applications

    def _angular_root(self, start: Path, stop: Path) -> Optional[Path]:
        current = start
        while True:
            if (
                self.locator.is_workspace(current)
                or self.locator.is_library(current)
                or self.locator.is_application(current)
            ):
                return current
            if current == stop or current.parent == current:
                return None
            current = current.parent

    @staticmethod
    def _check(cancel: Cancel) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled("Operation cancelled")

    def _finish(self, result: GenerationResult) -> GenerationResult:
        for warning in result.warnings:
            self.logger.warning(warning)
        for error in result.errors:
            self.logger.error(error)
        counts = result.counts
        self.logger.info(
            "Finished: %d produced, %d warned, %d failed",
            counts["produced"],
            counts["warned"],
            counts["failed"],
        )
        return result


__all__ = ["Orchestrator"]
