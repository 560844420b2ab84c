"""Project detection for Angular applications, libraries and workspaces."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import InputNotFound, MalformedSource, ManifestMissing
from .fs import FileAccess, LocalFileSystem
from .logging import get_logger
from .models import (
    KIND_APPLICATION,
    KIND_LIBRARY,
    KIND_WORKSPACE,
    ProjectLayout,
    WorkspaceLayout,
)

WORKSPACE_MANIFEST = "angular.json"
LIBRARY_MANIFEST = "ng-package.json"
PACKAGE_MANIFEST = "package.json"

_JSON_COMMENTS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)


class ProjectLocator:
    """Determines what a root path holds and enumerates its projects."""

    def __init__(self, fs: FileAccess | None = None) -> None:
        self.fs = fs or LocalFileSystem()
        self.logger = get_logger("locator")

    def is_workspace(self, root: Path) -> bool:
        return self.fs.is_file(root / WORKSPACE_MANIFEST)

    def is_library(self, root: Path) -> bool:
        return self.fs.is_file(root / LIBRARY_MANIFEST)

    def is_application(self, root: Path) -> bool:
        package = root / PACKAGE_MANIFEST
        if not self.fs.is_file(package):
            return False
        return "@angular/core" in self.fs.read_text(package)

    def locate(self, path: str | Path) -> WorkspaceLayout:
        """Classify ``path`` and list its projects.

        Raises InputNotFound when the path is missing or holds no Angular project.
        """
        root = Path(path).expanduser().resolve()
        if not self.fs.is_dir(root):
            raise InputNotFound(f"Path not found: {root}", path=root)

        if self.is_workspace(root):
            layout = self._workspace(root)
        elif self.is_library(root):
            layout = WorkspaceLayout(
                root=root,
                kind=KIND_LIBRARY,
                projects=[self._single(root, KIND_LIBRARY)],
            )
        elif self.is_application(root):
            layout = WorkspaceLayout(
                root=root,
                kind=KIND_APPLICATION,
                projects=[self._single(root, KIND_APPLICATION)],
            )
        else:
            raise InputNotFound(
                f"No Angular workspace, application, or library found at {root}", path=root
            )
        self.logger.debug(
            "Located %s at %s with %d project(s)", layout.kind, root, len(layout.projects)
        )
        return layout

    def verify(self, project: ProjectLayout) -> None:
        """Raise ManifestMissing when a project's expected descriptor or sources are absent."""
        if not self.fs.is_dir(project.source_root):
            raise ManifestMissing(
                f"Source directory for project '{project.name}' not found: {project.source_root}",
                path=project.source_root,
            )
        if project.kind == KIND_LIBRARY and not self.is_library(project.root):
            raise ManifestMissing(
                f"Library project '{project.name}' has no {LIBRARY_MANIFEST}",
                path=project.root,
            )

    def select_application(
        self, layout: WorkspaceLayout, name: Optional[str] = None
    ) -> ProjectLayout:
        """Pick one project: the named one, the default project, or the first application."""
        if name:
            project = layout.find(name)
            if project is None:
                raise ManifestMissing(f"Project '{name}' not found in workspace", path=layout.root)
            return project
        if layout.default_project:
            project = layout.find(layout.default_project)
            if project is not None:
                return project
        applications = layout.applications()
        if applications:
            return applications[0]
        if layout.projects:
            return layout.projects[0]
        raise ManifestMissing("Workspace declares no projects", path=layout.root)

    def _workspace(self, root: Path) -> WorkspaceLayout:
        manifest = self._read_json(root / WORKSPACE_MANIFEST)
        projects: List[ProjectLayout] = []
        for name, config in _as_dict(manifest.get("projects")).items():
            config = _as_dict(config)
            project_root = str(config.get("root") or "").strip("/")
            source_root = config.get("sourceRoot") or (f"{project_root}/src" if project_root else "src")
            project_type = str(config.get("projectType") or KIND_APPLICATION).lower()
            projects.append(
                ProjectLayout(
                    name=str(name),
                    kind=KIND_LIBRARY if project_type == KIND_LIBRARY else KIND_APPLICATION,
                    root=root / project_root if project_root else root,
                    source_root=root / str(source_root),
                )
            )
        default = manifest.get("defaultProject")
        return WorkspaceLayout(
            root=root,
            kind=KIND_WORKSPACE,
            projects=projects,
            default_project=str(default) if default else None,
        )

    def _single(self, root: Path, kind: str) -> ProjectLayout:
        source = root / "src"
        return ProjectLayout(
            name=self._package_name(root) or root.name,
            kind=kind,
            root=root,
            source_root=source if self.fs.is_dir(source) else root,
        )

    def _package_name(self, root: Path) -> Optional[str]:
        package = root / PACKAGE_MANIFEST
        if not self.fs.is_file(package):
            return None
        try:
            data = self._read_json(package)
        except MalformedSource:
            return None
        name = data.get("name")
        return str(name) if name else None

    def _read_json(self, path: Path) -> Dict[str, Any]:
        text = _JSON_COMMENTS.sub(lambda match: match.group(1) or "", self.fs.read_text(path))
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedSource(f"Failed to parse {path.name}: {exc}", path=path) from exc
        if not isinstance(data, dict):
            raise MalformedSource(f"{path.name} must contain a JSON object", path=path)
        return data


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


__all__ = ["LIBRARY_MANIFEST", "PACKAGE_MANIFEST", "ProjectLocator", "WORKSPACE_MANIFEST"]
