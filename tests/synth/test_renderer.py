"""Tests for the Playwright code synthesizer."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

import pytest

from pomgen.analyzers import TemplateAnalyzer
from pomgen.config import GeneratorOptions
from pomgen.models import (
    ARTIFACT_CONFIG,
    ARTIFACT_CONSTANTS,
    ARTIFACT_REALTIME_MOCK,
    ComponentDescriptor,
    ComponentModel,
    KIND_APPLICATION,
    ProjectModel,
    Route,
)
from pomgen.naming import component_names, element_names
from pomgen.synth import CodeSynthesizer

FIXED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def _component(name: str, markup: str, *, route_path: str | None = None) -> ComponentModel:
    descriptor = ComponentDescriptor(
        name=name,
        selector=f"app-{name.lower()}",
        source_path=f"src/app/{name.lower()}.component.ts",
    )
    return ComponentModel(
        descriptor=descriptor,
        selectors=tuple(TemplateAnalyzer().analyze(markup)),
        routable=route_path is not None,
        reason="test",
        route_path=route_path,
    )


@pytest.fixture
def model() -> ProjectModel:
    login = _component("LoginComponent", '<x-btn (click)="onLogin()">Login</x-btn>', route_path="/login")
    dialog = _component("ConfirmDialogComponent", "<p>Are you sure?</p>")
    return ProjectModel(
        name="shop",
        kind=KIND_APPLICATION,
        components=(login, dialog),
        routes=(Route(path="", redirect_to="login"), Route(path="login", component="LoginComponent")),
    )


def _render(model: ProjectModel, **options: object) -> dict[str, str]:
    artifacts = CodeSynthesizer().render(model, GeneratorOptions(generated_at=FIXED, **options))  # type: ignore[arg-type]
    return {artifact.relative_path: artifact.content for artifact in artifacts}


def test_artifact_layout_and_order(model: ProjectModel) -> None:
    assert list(_render(model)) == [
        "base.page.ts",
        "pages/login.page.ts",
        "selectors/login.selectors.ts",
        "pages/confirm-dialog.page.ts",
        "selectors/confirm-dialog.selectors.ts",
        "fixtures.ts",
        "config/timeouts.ts",
        "config/routes.ts",
        "tests/login.spec.ts",
        "tests/confirm-dialog.spec.ts",
    ]


def test_click_handler_yields_action_and_visibility_methods(model: ProjectModel) -> None:
    page = _render(model)["pages/login.page.ts"]

    assert "export class LoginPage extends BasePage {" in page
    assert "import { loginSelectors } from '../selectors/login.selectors';" in page
    assert page.count("async clickLogin(): Promise<void> {") == 1
    assert page.count("async expectLoginVisible(): Promise<void> {") == 1
    assert "get login(): Locator {" in page
    assert "await this.navigate(resolveRoute(ROUTES.login, params));" in page


def test_child_component_refuses_navigation(model: ProjectModel) -> None:
    files = _render(model)
    page = files["pages/confirm-dialog.page.ts"]

    assert "ConfirmDialogComponent is a child component and cannot be navigated to directly" in page
    assert "ROUTES" not in page
    assert "async getAreYouSureText(): Promise<string> {" in page
    assert "async expectAreYouSureText(expected: string | RegExp): Promise<void> {" in page
    assert "rejects.toThrow('child component')" in files["tests/confirm-dialog.spec.ts"]
    assert "await loginPage.goto();" in files["tests/login.spec.ts"]


def test_constants_and_route_tables(model: ProjectModel) -> None:
    files = _render(model)

    assert "export const loginSelectors = {" in files["selectors/login.selectors.ts"]
    assert "  login: 'x-btn:has-text(\"Login\")'," in files["selectors/login.selectors.ts"]
    routes = files["config/routes.ts"]
    assert "  login: '/login'," in routes
    assert "confirmDialog" not in routes
    assert "{ path: '/', redirectTo: 'login', lazy: false }," in routes
    assert "{ path: '/login', component: 'LoginComponent', lazy: false }," in routes
    assert "export const BASE_URL = 'http://localhost:4200';" in routes
    assert "  default: 30000," in files["config/timeouts.ts"]


def test_names_agree_across_artifacts(model: ProjectModel) -> None:
    files = _render(model)
    fixtures = files["fixtures.ts"]

    for component in model.components:
        names = component_names(component.descriptor)
        page = files[names.page_file]
        constants = files[names.selectors_file]
        assert f"import {{ {names.page_class} }} from '{names.page_module}';" in fixtures
        assert f"  {names.fixture_name}: {names.page_class};" in fixtures
        assert f"export const {names.selectors_const} = {{" in constants
        assert f"import {{ {names.selectors_const} }} from '{names.selectors_module}';" in page
        assert names.test_file in files
        for selector in component.selectors:
            key = element_names(selector).constant_key
            assert f"  {key}: " in constants
            assert f"{names.selectors_const}.{key}" in page


def _members(page: str) -> list[str]:
    return re.findall(r"^  (?:async |get )?(\w+)\(", page, flags=re.MULTILINE)


def test_headings_get_text_methods_whatever_their_strategy() -> None:
    home = _component(
        "HomeComponent",
        '<h1 data-testid="title">{{ title }}</h1><h2 id="sub">Welcome</h2>',
        route_path="/home",
    )
    model = ProjectModel(name="shop", kind=KIND_APPLICATION, components=(home,))

    page = _render(model)["pages/home.page.ts"]

    assert "async expectTitleVisible(): Promise<void> {" in page
    assert "async getTitleText(): Promise<string> {" in page
    assert "async expectTitleText(expected: string | RegExp): Promise<void> {" in page
    assert "async expectSubVisible(): Promise<void> {" in page
    assert "async getSubText(): Promise<string> {" in page
    assert "async expectSubText(expected: string | RegExp): Promise<void> {" in page


def test_page_classes_stay_unique_across_the_project() -> None:
    login = _component("LoginComponent", "<button>Sign in</button>", route_path="/login")
    login_page = _component("LoginPageComponent", "<button>Sign up</button>", route_path="/signup")
    model = ProjectModel(name="shop", kind=KIND_APPLICATION, components=(login, login_page))

    files = _render(model)
    fixtures = files["fixtures.ts"]

    assert "export class LoginPage extends BasePage {" in files["pages/login.page.ts"]
    assert "export class LoginPage2 extends BasePage {" in files["pages/login-page-2.page.ts"]
    assert "import { LoginPage } from './pages/login.page';" in fixtures
    assert "import { LoginPage2 } from './pages/login-page-2.page';" in fixtures
    assert fixtures.count("  loginPage: async ({ page }, use) => {") == 1
    assert fixtures.count("  loginPage2: async ({ page }, use) => {") == 1
    assert "export const loginPage2Selectors = {" in files["selectors/login-page-2.selectors.ts"]
    assert "  loginPage2: '/signup'," in files["config/routes.ts"]
    assert "tests/login-page-2.spec.ts" in files


def test_page_members_stay_unique_within_a_page() -> None:
    editor = _component(
        "EditorComponent",
        "<button>Save</button><button>Click Save</button><h1>Page</h1><h2>Page Element</h2>",
        route_path="/editor",
    )
    model = ProjectModel(name="shop", kind=KIND_APPLICATION, components=(editor,))

    files = _render(model)
    page = files["pages/editor.page.ts"]
    members = _members(page)

    assert len(members) == len(set(members))
    assert "async clickSave(): Promise<void> {" in page
    assert "get clickSave2(): Locator {" in page
    assert "get pageElement(): Locator {" in page
    assert "get pageElement2(): Locator {" in page
    for key in ("save", "clickSave2", "pageElement", "pageElement2"):
        assert f"  {key}: " in files["selectors/editor.selectors.ts"]
        assert f"editorSelectors.{key})" in page


def test_rendering_is_deterministic(model: ProjectModel) -> None:
    assert _render(model) == _render(model)


def test_header_placeholders_are_substituted(model: ProjectModel) -> None:
    files = _render(model, file_header="// {FileName} | {GeneratedDate} | pomgen {ToolVersion}")

    assert files["base.page.ts"].startswith(
        "// base.page.ts | 2024-01-02 03:04:05 UTC | pomgen 1.5.0\n\nimport "
    )
    for path, content in files.items():
        assert content.startswith(f"// {Path(path).name} | ")


def test_doc_comments_can_be_disabled(model: ProjectModel) -> None:
    files = _render(model, doc_comments=False)

    assert all("/**" not in content for content in files.values())


def test_test_suffix_changes_stub_names(model: ProjectModel) -> None:
    files = _render(model, test_file_suffix="e2e")

    assert "tests/login.e2e.ts" in files
    assert "tests/login.spec.ts" not in files


def test_kinds_filter(model: ProjectModel) -> None:
    artifacts = CodeSynthesizer().render(model, GeneratorOptions(), kinds={ARTIFACT_CONSTANTS})

    assert [artifact.relative_path for artifact in artifacts] == [
        "selectors/login.selectors.ts",
        "selectors/confirm-dialog.selectors.ts",
    ]


def test_table_methods() -> None:
    orders = _component(
        "OrdersComponent",
        "<table><thead><tr><th>Id</th></tr></thead><tbody><tr><td>1</td></tr></tbody></table>",
        route_path="/orders",
    )
    model = ProjectModel(name="shop", kind=KIND_APPLICATION, components=(orders,))

    page = _render(model)["pages/orders.page.ts"]

    assert "getTableRow(index: number): Locator {" in page
    assert "return this.locate(ordersSelectors.tableRows).nth(index);" in page
    assert "getTableHeaders(): Locator {" in page
    assert "async getTableRowCount(): Promise<number> {" in page
    assert "async clickTableRow(index: number): Promise<void> {" in page
    assert "async expectTableVisible(): Promise<void> {" in page
    assert "clickTableRows" not in page


def test_component_without_elements_still_renders() -> None:
    empty = _component("SpacerComponent", "")
    model = ProjectModel(name="shop", kind=KIND_APPLICATION, components=(empty,))

    files = _render(model)

    assert "export const spacerSelectors = {} as const;" in files["selectors/spacer.selectors.ts"]
    assert "export class SpacerPage extends BasePage {" in files["pages/spacer.page.ts"]


def test_templates_dir_overrides_bundled_templates(tmp_path: Path, model: ProjectModel) -> None:
    (tmp_path / "timeouts.ts.j2").write_text("export const TIMEOUTS = { custom: true };\n", encoding="utf-8")

    artifacts = CodeSynthesizer(tmp_path).render(model, GeneratorOptions(), kinds={ARTIFACT_CONFIG})

    contents = {artifact.relative_path: artifact.content for artifact in artifacts}
    assert contents["config/timeouts.ts"] == "export const TIMEOUTS = { custom: true };\n"
    assert "export const ROUTES" in contents["config/routes.ts"]


def test_realtime_mock() -> None:
    artifact = CodeSynthesizer().render_realtime_mock(GeneratorOptions())

    assert artifact.kind == ARTIFACT_REALTIME_MOCK
    assert artifact.relative_path == "signalr-mock.fixture.ts"
    assert "export class MockHubConnection {" in artifact.content
    assert "export function createMockHubConnection(): MockHubConnection {" in artifact.content
