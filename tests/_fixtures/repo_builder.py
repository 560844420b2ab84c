"""Helper utilities for constructing temporary Angular projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Mapping

LOGIN_COMPONENT = """
    import { Component, EventEmitter, Input, Output } from '@angular/core';

    @Component({
      selector: 'app-login',
      templateUrl: './login.component.html',
    })
    export class LoginComponent {
      @Input() title = '';
      @Output() submitted = new EventEmitter<void>();

      onLogin(): void {
        this.submitted.emit();
      }
    }
"""

LOGIN_TEMPLATE = """
    <h1>Sign in</h1>
    <input formControlName="email" />
    <button (click)="onLogin()">Login</button>
"""

CONFIRM_DIALOG_COMPONENT = """
    import { Component } from '@angular/core';

    @Component({
      selector: 'app-confirm-dialog',
      template: `<p>Are you sure?</p><button mat-dialog-close>Cancel</button>`,
    })
    export class ConfirmDialogComponent {}
"""

APP_ROUTES = """
    import { Routes } from '@angular/router';
    import { LoginComponent } from './pages/login/login.component';

    export const routes: Routes = [
      { path: '', redirectTo: 'login', pathMatch: 'full' },
      { path: 'login', component: LoginComponent },
    ];
"""


class RepoBuilder:
    """Utility for writing files into a throwaway repository."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, data: object) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def angular_app(self, prefix: str = "", *, name: str = "shop") -> Path:
        """Write a two-component application (a routed login page and a dialog)."""
        base = f"{prefix.strip('/')}/" if prefix else ""
        self.write_json(
            f"{base}package.json",
            {"name": name, "dependencies": {"@angular/core": "^17.3.0"}},
        )
        self.write(
            {
                f"{base}src/app/pages/login/login.component.ts": LOGIN_COMPONENT,
                f"{base}src/app/pages/login/login.component.html": LOGIN_TEMPLATE,
                f"{base}src/app/shared/confirm-dialog.component.ts": CONFIRM_DIALOG_COMPONENT,
                f"{base}src/app/app.routes.ts": APP_ROUTES,
            }
        )
        return self.root / base if base else self.root

    def angular_workspace(self, projects: Mapping[str, str], *, default: str | None = None) -> Path:
        """Write ``angular.json`` declaring ``name -> projectType`` and seed each application."""
        manifest: dict[str, object] = {"version": 1, "projects": {}}
        for name, kind in projects.items():
            manifest["projects"][name] = {  # type: ignore[index]
                "root": f"projects/{name}",
                "sourceRoot": f"projects/{name}/src",
                "projectType": kind,
            }
            if kind == "application":
                self.angular_app(f"projects/{name}", name=name)
            else:
                self.write_json(f"projects/{name}/ng-package.json", {"lib": {"entryFile": "src/public-api.ts"}})
                self.write(
                    {
                        f"projects/{name}/src/lib/badge.component.ts": """
                            import { Component } from '@angular/core';

                            @Component({ selector: 'lib-badge', template: '<span>{{ label }}</span>' })
                            export class BadgeComponent {}
                        """,
                    }
                )
        if default:
            manifest["defaultProject"] = default
        self.write_json("angular.json", manifest)
        return self.root

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


__all__ = ["RepoBuilder"]
