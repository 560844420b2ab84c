"""Tests for pomgen.locator."""

from __future__ import annotations

import pytest

from pomgen.errors import InputNotFound, MalformedSource, ManifestMissing
from pomgen.locator import ProjectLocator
from pomgen.models import KIND_APPLICATION, KIND_LIBRARY, KIND_WORKSPACE


def test_locates_single_application(repo_builder) -> None:
    root = repo_builder.angular_app()

    layout = ProjectLocator().locate(root)

    assert layout.kind == KIND_APPLICATION
    assert layout.root == root.resolve()
    (project,) = layout.projects
    assert project.name == "shop"
    assert project.kind == KIND_APPLICATION
    assert project.source_root == root.resolve() / "src"


def test_locates_library_without_src_directory(repo_builder) -> None:
    repo_builder.write_json("ng-package.json", {"lib": {"entryFile": "public-api.ts"}})
    repo_builder.write({"button.component.ts": "export class ButtonComponent {}\n"})
    root = repo_builder.path()

    layout = ProjectLocator().locate(root)

    assert layout.kind == KIND_LIBRARY
    assert layout.projects[0].source_root == root.resolve()
    assert layout.projects[0].name == "repo"


def test_locates_workspace_projects(repo_builder) -> None:
    root = repo_builder.angular_workspace({"shop": "application", "ui": "Library"}, default="shop")

    layout = ProjectLocator().locate(root)

    assert layout.kind == KIND_WORKSPACE
    assert layout.default_project == "shop"
    assert [(project.name, project.kind) for project in layout.projects] == [
        ("shop", KIND_APPLICATION),
        ("ui", KIND_LIBRARY),
    ]
    assert layout.projects[0].source_root == root.resolve() / "projects/shop/src"
    assert [project.name for project in layout.applications()] == ["shop"]


def test_workspace_manifest_may_contain_comments(repo_builder) -> None:
    repo_builder.write(
        {
            "angular.json": """
                {
                  // generated by the Angular CLI
                  "projects": {
                    "shop": { "root": "", "projectType": "application" } /* main app */
                  }
                }
            """,
        }
    )

    layout = ProjectLocator().locate(repo_builder.path())

    (project,) = layout.projects
    assert project.root == repo_builder.path().resolve()
    assert project.source_root == repo_builder.path().resolve() / "src"


def test_missing_path_raises_input_not_found(tmp_path) -> None:
    with pytest.raises(InputNotFound, match="Path not found"):
        ProjectLocator().locate(tmp_path / "missing")


def test_non_angular_directory_raises_input_not_found(repo_builder) -> None:
    repo_builder.write_json("package.json", {"name": "plain", "dependencies": {"react": "^18.0.0"}})

    with pytest.raises(InputNotFound, match="No Angular workspace, application, or library"):
        ProjectLocator().locate(repo_builder.path())


def test_malformed_workspace_manifest(repo_builder) -> None:
    repo_builder.write({"angular.json": "{ not json"})

    with pytest.raises(MalformedSource, match="angular.json"):
        ProjectLocator().locate(repo_builder.path())


def test_select_application(repo_builder) -> None:
    root = repo_builder.angular_workspace({"ui": "library", "shop": "application", "admin": "application"})
    locator = ProjectLocator()
    layout = locator.locate(root)

    assert locator.select_application(layout).name == "shop"
    assert locator.select_application(layout, "ADMIN").name == "admin"
    layout.default_project = "admin"
    assert locator.select_application(layout).name == "admin"
    with pytest.raises(ManifestMissing, match="Project 'nope' not found in workspace"):
        locator.select_application(layout, "nope")


def test_verify_reports_missing_descriptors(repo_builder) -> None:
    root = repo_builder.angular_workspace({"shop": "application", "ui": "library"})
    (root / "projects/ui/ng-package.json").unlink()
    locator = ProjectLocator()
    layout = locator.locate(root)
    shop, ui = layout.projects

    locator.verify(shop)
    with pytest.raises(ManifestMissing, match="has no ng-package.json"):
        locator.verify(ui)

    ghost = shop.__class__(name="ghost", kind=KIND_APPLICATION, root=root, source_root=root / "nowhere")
    with pytest.raises(ManifestMissing, match="Source directory for project 'ghost' not found"):
        locator.verify(ghost)
