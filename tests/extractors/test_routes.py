"""Tests for route table extraction."""

from __future__ import annotations

import pytest

from pomgen.errors import MalformedSource
from pomgen.extractors import RouteExtractor
from pomgen.extractors.routes import parse_routes
from pomgen.models import Route

ROUTES = """
import { Routes } from '@angular/router';

export const routes: Routes = [
  { path: '', redirectTo: 'home', pathMatch: 'full' },
  { path: 'home', component: HomeComponent },
  {
    path: 'admin',
    component: AdminShellComponent,
    children: [
      { path: 'users/:id', component: UserDetailComponent },
    ],
  },
  // { path: 'disabled', component: DisabledComponent },
  {
    path: 'reports',
    loadComponent: () => import('./reports/reports.component').then(m => m.ReportsComponent),
  },
  { path: 'billing', loadChildren: () => import('./billing/billing.routes').then(m => m.BILLING_ROUTES) },
];
"""


def test_parse_routes_handles_nesting_and_lazy_entries() -> None:
    routes = parse_routes(ROUTES, source="app.routes.ts")

    assert routes == [
        Route(path="", redirect_to="home", source="app.routes.ts"),
        Route(path="home", component="HomeComponent", source="app.routes.ts"),
        Route(path="admin", component="AdminShellComponent", source="app.routes.ts"),
        Route(path="admin/users/:id", component="UserDetailComponent", source="app.routes.ts"),
        Route(path="reports", component="ReportsComponent", lazy=True, source="app.routes.ts"),
        Route(path="billing", lazy=True, source="app.routes.ts"),
    ]


def test_unbalanced_routes_are_malformed() -> None:
    with pytest.raises(MalformedSource):
        parse_routes("export const routes = [ { path: 'a', component: AComponent }\n")


def test_extractor_discovers_routing_files(repo_builder) -> None:
    repo_builder.angular_app()
    repo_builder.write(
        {
            "src/app/admin/admin-routing.module.ts": """
                const routes: Routes = [{ path: 'admin', component: AdminComponent }];
            """,
            "src/app/app.routes.spec.ts": "describe('routes', () => {});\n",
        }
    )
    root = repo_builder.path()
    extractor = RouteExtractor()

    files = extractor.discover(root / "src")
    routes = [route for path in files for route in extractor.extract_file(path, root)]

    assert [path.name for path in files] == ["admin-routing.module.ts", "app.routes.ts"]
    assert [(route.path, route.component) for route in routes] == [
        ("admin", "AdminComponent"),
        ("", None),
        ("login", "LoginComponent"),
    ]
    assert routes[0].source == "src/app/admin/admin-routing.module.ts"
