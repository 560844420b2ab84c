"""Selector inference over raw Angular template markup.

The analyzer tokenizes markup into a tolerant element tree (unclosed tags are
closed implicitly, stray closing tags are dropped) and evaluates every element
against ``DETECTION_RULES`` top to bottom. The first matching rule assigns the
element's strategy; later rules are never consulted for that element.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from ..logging import get_logger
from ..models import (
    ComponentDescriptor,
    ElementSelector,
    STRATEGY_CSS,
    STRATEGY_DYNAMIC,
    STRATEGY_FORM_FIELD,
    STRATEGY_HANDLER,
    STRATEGY_ID,
    STRATEGY_ROLE,
    STRATEGY_TABLE,
    STRATEGY_TEST_ID,
    STRATEGY_TEXT,
    STRATEGY_WIDGET,
)
from ..naming import pascal_case, unique_name

_TOKEN = re.compile(
    r"<!--.*?(?:-->|$)"
    r"|<(?P<close>/)?(?P<tag>[A-Za-z][\w:.-]*)"
    r"(?P<attrs>(?:\s+[^\s\"'>/=]+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s\"'>]+))?)*)"
    r"\s*(?P<self>/)?>",
    re.DOTALL,
)
_ATTRIBUTE = re.compile(r"([^\s\"'>/=]+)(?:\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s\"'>]+))?")
_INTERPOLATION = re.compile(r"(\{\{.*?\}\})", re.DOTALL)
_CONTROL_FLOW = re.compile(
    r"@(?:else\s+if|if|else|for|switch|case|default|defer|empty|placeholder|loading|error)\b[^{}]*\{"
    r"|@let\s+[^;]*;"
    r"|\}"
)
_HANDLER_CALL = re.compile(r"^\s*(?:[\w$]+\.)*([\w$]+)\s*\(")
_STRING_LITERAL = re.compile(r"['\"]([^'\"]*)['\"]")
_SIMPLE_ID = re.compile(r"^[A-Za-z_][\w-]*$")

_VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}
# Never rendered into the DOM, or never a meaningful test target.
_NON_RENDERED_TAGS = {"ng-container", "ng-template", "ng-content", "script", "style", "head", "meta", "link"}
_DECORATIVE_TAGS = {"mat-icon", "svg", "path", "g", "br", "hr", "router-outlet", "mat-label", "html", "body"}
_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_TEXT_TAGS = _HEADING_TAGS | {
    "p", "label", "strong", "em", "b", "i", "u", "small", "mark", "blockquote", "q",
    "cite", "code", "pre", "kbd", "samp", "abbr", "figcaption", "legend", "caption", "dt", "dd",
}
_FORM_TAGS = {"input", "textarea", "select", "mat-select"}
_INTERACTIVE_TAGS = {"input", "select", "textarea", "button", "a", "img", "video", "audio", "iframe", "form"}
_TABLE_TAGS = {"table", "mat-table", "cdk-table", "ag-grid-angular", "ngx-datatable", "p-table", "kendo-grid"}
_TABLE_ATTRIBUTES = ("mat-table", "cdk-table")
_LIBRARY_TAG_PREFIXES = ("mat-", "cdk-", "p-", "nz-", "kendo-", "ag-grid", "ngx-")
_MATERIAL_BUTTONS = (
    "mat-button",
    "mat-raised-button",
    "mat-flat-button",
    "mat-stroked-button",
    "mat-icon-button",
    "mat-fab",
    "mat-mini-fab",
)
_TEST_ID_ATTRIBUTES = ("data-testid", "data-test-id", "data-test", "data-cy", "data-qa")
_FIELD_ATTRIBUTES: Tuple[Tuple[str, str, Optional[Set[str]]], ...] = (
    ("formcontrolname", "formControlName", None),
    ("name", "name", _FORM_TAGS),
    ("placeholder", "placeholder", _FORM_TAGS),
)
_ROLE_VALUES = {"button", "link", "tab", "menuitem", "checkbox", "radio", "switch", "treeitem"}
_HANDLER_ATTRIBUTES = ("(click)", "(dblclick)", "(tap)", "(keydown.enter)", "(keyup.enter)")
_NAVIGATION_ATTRIBUTES = ("routerlink", "[routerlink]", "href")
_DIALOG_ATTRIBUTES = ("mat-dialog-close", "[mat-dialog-close]", "matdialogclose", "[matdialogclose]")
_MENU_ATTRIBUTES = ("[matmenutriggerfor]", "matmenutriggerfor")
_GENERIC_CLASS_WORDS = {
    "form", "input", "control", "field", "container", "wrapper", "row", "col", "item",
    "active", "disabled", "btn", "button", "primary", "secondary", "flex", "mat", "mdc",
}

_TAG_NAMES: Dict[str, str] = {
    "h1": "Heading1",
    "h2": "Heading2",
    "h3": "Heading3",
    "h4": "Heading4",
    "h5": "Heading5",
    "h6": "Heading6",
    "div": "Container",
    "span": "Text",
    "p": "Paragraph",
    "label": "Label",
    "li": "ListItem",
    "ul": "List",
    "ol": "OrderedList",
    "td": "Cell",
    "th": "HeaderCell",
    "button": "Button",
    "a": "Link",
    "section": "Section",
    "article": "Article",
    "header": "Header",
    "footer": "Footer",
    "nav": "Navigation",
    "main": "Main",
    "aside": "Aside",
    "strong": "Strong",
    "em": "Emphasis",
    "small": "Small",
    "code": "Code",
    "pre": "Preformatted",
    "blockquote": "Quote",
    "img": "Image",
    "input": "Input",
    "select": "Select",
    "textarea": "TextArea",
    "form": "Form",
    "table": "Table",
    "mat-table": "DataTable",
    "cdk-table": "DataTable",
    "ag-grid-angular": "DataGrid",
}

_MAX_NAME_WORDS = 5

logger = get_logger("analyzers.template")


@dataclass(eq=False)
class _Fragment:
    """One element of the tolerant markup tree."""

    tag: str
    attrs: Dict[str, str]
    parent: Optional["_Fragment"] = None
    nodes: List[Union[str, "_Fragment"]] = field(default_factory=list)

    def static_attr(self, *names: str) -> Optional[str]:
        for name in names:
            value = self.attrs.get(name)
            if value is None:
                continue
            value = value.strip()
            if value and "{{" not in value:
                return value
        return None

    def has_attr(self, *names: str) -> bool:
        return any(name in self.attrs for name in names)

    @property
    def children(self) -> List["_Fragment"]:
        return [node for node in self.nodes if isinstance(node, _Fragment)]

    @property
    def own_text(self) -> str:
        return _clean_text(" ".join(node for node in self.nodes if isinstance(node, str)))

    @property
    def full_text(self) -> str:
        return _clean_text(" ".join(self._text_parts()))

    def _text_parts(self) -> List[str]:
        parts: List[str] = []
        for node in self.nodes:
            if isinstance(node, str):
                parts.append(node)
            elif node.tag not in _DECORATIVE_TAGS and node.tag not in _NON_RENDERED_TAGS:
                parts.extend(node._text_parts())
            elif node.tag == "ng-container":
                parts.extend(node._text_parts())
        return parts

    @property
    def classes(self) -> List[str]:
        value = self.attrs.get("class") or ""
        return [token for token in value.split() if "{{" not in token]

    @property
    def is_tabular(self) -> bool:
        return self.tag in _TABLE_TAGS or self.has_attr(*_TABLE_ATTRIBUTES)

    @property
    def in_table(self) -> bool:
        node = self.parent
        while node is not None:
            if node.is_tabular:
                return True
            node = node.parent
        return False

    def descendants(self) -> List["_Fragment"]:
        found: List[_Fragment] = []
        for child in self.children:
            found.append(child)
            found.extend(child.descendants())
        return found


@dataclass(frozen=True)
class _Match:
    """What a detection rule extracted from one fragment."""

    expression: str
    name: str = ""
    text: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DetectionRule:
    """Maps a fragment predicate to the strategy it assigns."""

    strategy: str
    description: str
    matcher: Callable[[_Fragment], Optional[_Match]]

    def match(self, fragment: _Fragment) -> Optional[_Match]:
        return self.matcher(fragment)


def parse_fragments(markup: str) -> List[_Fragment]:
    """Tokenize markup into fragments, in document order of their opening tags."""
    fragments: List[_Fragment] = []
    stack: List[_Fragment] = []
    position = 0
    for token in _TOKEN.finditer(markup or ""):
        if stack and token.start() > position:
            stack[-1].nodes.append(markup[position : token.start()])
        position = token.end()
        tag = token.group("tag")
        if tag is None:
            continue
        tag = tag.lower()
        if token.group("close"):
            for index in range(len(stack) - 1, -1, -1):
                if stack[index].tag == tag:
                    del stack[index:]
                    break
            continue
        parent = stack[-1] if stack else None
        fragment = _Fragment(tag=tag, attrs=_parse_attributes(token.group("attrs") or ""), parent=parent)
        if parent is not None:
            parent.nodes.append(fragment)
        fragments.append(fragment)
        if not token.group("self") and tag not in _VOID_TAGS and tag not in {"script", "style"}:
            stack.append(fragment)
        elif tag in {"script", "style"} and not token.group("self"):
            closing = re.compile(rf"</{tag}\s*>", re.IGNORECASE).search(markup, position)
            position = closing.end() if closing else len(markup)
    if stack and position < len(markup or ""):
        stack[-1].nodes.append(markup[position:])
    return fragments


def _parse_attributes(raw: str) -> Dict[str, str]:
    attrs: Dict[str, str] = {}
    for match in _ATTRIBUTE.finditer(raw):
        name = match.group(1).lower()
        value = match.group(2)
        if value is None:
            value = ""
        elif value[:1] in {'"', "'"}:
            value = value[1:-1]
        attrs.setdefault(name, value)
    return attrs


def _clean_text(text: str) -> str:
    pieces = _INTERPOLATION.split(text)
    cleaned = [
        piece if index % 2 else _CONTROL_FLOW.sub(" ", piece)
        for index, piece in enumerate(pieces)
    ]
    return " ".join(html.unescape("".join(cleaned)).split())


def _is_static(text: Optional[str]) -> bool:
    return bool(text) and "{{" not in text  # type: ignore[operator]


def _css_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _has_text(base: str, text: str) -> str:
    return f"{base}:has-text({_css_string(text)})"


def _tag_css(fragment: _Fragment, *, max_classes: int = 2) -> str:
    classes = [cls for cls in fragment.classes if re.fullmatch(r"-?[A-Za-z_][\w-]*", cls)]
    return fragment.tag + "".join(f".{cls}" for cls in classes[:max_classes])


def _tag_name(tag: str) -> str:
    return _TAG_NAMES.get(tag) or pascal_case(tag) or "Element"


def _handler_name(fragment: _Fragment) -> Optional[str]:
    for name in _HANDLER_ATTRIBUTES:
        value = fragment.attrs.get(name)
        if value is None:
            continue
        call = _HANDLER_CALL.match(value)
        return call.group(1) if call else None
    return None


def _has_handler(fragment: _Fragment) -> bool:
    return fragment.has_attr(*_HANDLER_ATTRIBUTES)


def _navigation_target(fragment: _Fragment) -> Optional[str]:
    static = fragment.static_attr("routerlink", "href")
    if static is not None:
        return static
    bound = fragment.attrs.get("[routerlink]")
    if bound:
        literal = _STRING_LITERAL.search(bound)
        if literal and literal.group(1):
            return literal.group(1)
    return None


def _is_link(fragment: _Fragment) -> bool:
    if fragment.has_attr("routerlink", "[routerlink]"):
        return True
    return fragment.tag == "a" and fragment.has_attr("href", "[href]")


def _is_library_widget(fragment: _Fragment) -> bool:
    if fragment.tag.startswith(_LIBRARY_TAG_PREFIXES):
        return True
    return fragment.has_attr(*_MATERIAL_BUTTONS) or fragment.has_attr(*_TABLE_ATTRIBUTES)


def _element_kind(fragment: _Fragment) -> str:
    tag = fragment.tag
    if fragment.is_tabular:
        return "table"
    input_type = (fragment.static_attr("type") or "").lower()
    if (
        tag == "button"
        or fragment.static_attr("role") == "button"
        or fragment.has_attr(*_MATERIAL_BUTTONS)
        or (tag == "input" and input_type in {"submit", "button", "reset"})
    ):
        return "button"
    if tag == "a" or _is_link(fragment):
        return "link"
    if tag in _HEADING_TAGS:
        return "heading"
    if tag in _FORM_TAGS or fragment.has_attr("formcontrolname"):
        return "input"
    if tag in _TEXT_TAGS:
        return "text"
    if "-" in tag:
        return "custom-tag"
    return tag


def _accessible_text(fragment: _Fragment) -> Optional[str]:
    text = fragment.full_text
    return text if _is_static(text) else None


# Detection rules, in priority order.


def _match_test_id(fragment: _Fragment) -> Optional[_Match]:
    for name in _TEST_ID_ATTRIBUTES:
        value = fragment.static_attr(name)
        if value:
            return _Match(
                expression=f"[{name}={_css_string(value)}]",
                name=value,
                text=_accessible_text(fragment),
                attributes={name: value},
            )
    return None


def _match_id(fragment: _Fragment) -> Optional[_Match]:
    value = fragment.static_attr("id")
    if not value:
        return None
    expression = f"#{value}" if _SIMPLE_ID.match(value) else f"[id={_css_string(value)}]"
    return _Match(expression=expression, name=value, text=_accessible_text(fragment), attributes={"id": value})


def _match_form_field(fragment: _Fragment) -> Optional[_Match]:
    for key, attribute, tags in _FIELD_ATTRIBUTES:
        if tags is not None and fragment.tag not in tags:
            continue
        value = fragment.static_attr(key)
        if value:
            return _Match(
                expression=f"[{attribute}={_css_string(value)}]",
                name=value,
                attributes={attribute: value},
            )
    return None


def _match_role(fragment: _Fragment) -> Optional[_Match]:
    explicit = (fragment.static_attr("role") or "").lower()
    if explicit in _ROLE_VALUES:
        role, base = explicit, f"[role={_css_string(explicit)}]"
    elif fragment.tag == "button":
        role, base = "button", "button"
    elif fragment.tag == "a" and fragment.has_attr("href", "routerlink", "[routerlink]"):
        role, base = "link", "a"
    else:
        return None

    label = fragment.static_attr("aria-label")
    if label:
        return _Match(
            expression=f"{base}[aria-label={_css_string(label)}]",
            name=label,
            text=label,
            attributes={"role": role, "aria-label": label},
        )
    text = fragment.full_text
    if not _is_static(text):
        return None
    return _Match(expression=_has_text(base, text), name=text, text=text, attributes={"role": role})


def _match_handler(fragment: _Fragment) -> Optional[_Match]:
    handler = _handler_name(fragment)
    target = _navigation_target(fragment)
    if not _has_handler(fragment) and target is None and not fragment.has_attr("[routerlink]"):
        return None

    attributes: Dict[str, str] = {}
    if handler:
        attributes["handler"] = handler
    if target:
        attributes["navigation"] = target

    text = fragment.static_attr("aria-label") or fragment.own_text or fragment.full_text
    if _is_static(text):
        return _Match(expression=_has_text(fragment.tag, text), name=text, text=text, attributes=attributes)

    if handler:
        name = re.sub(r"^(?:on|handle)(?=[A-Z])", "", handler)
    elif target:
        name = target
    else:
        name = _tag_name(fragment.tag)
    if target and fragment.tag == "a":
        expression = f"a[href={_css_string(target)}]"
    else:
        expression = _tag_css(fragment)
    return _Match(expression=expression, name=name, attributes=attributes)


def _match_widget(fragment: _Fragment) -> Optional[_Match]:
    for button in _MATERIAL_BUTTONS:
        if fragment.has_attr(button):
            base = f"{fragment.tag}[{button}]"
            label = fragment.static_attr("aria-label")
            if label:
                return _Match(
                    expression=f"{base}[aria-label={_css_string(label)}]",
                    name=label,
                    attributes={"widget": "button", "variant": button},
                )
            icon = next((child for child in fragment.children if child.tag == "mat-icon"), None)
            icon_name = icon.own_text if icon is not None else ""
            if _is_static(icon_name):
                return _Match(
                    expression=f"{base}:has(mat-icon:has-text({_css_string(icon_name)}))",
                    name=f"{icon_name} button",
                    attributes={"widget": "button", "variant": button, "icon": icon_name},
                )
            return _Match(
                expression=_tag_css(fragment) + f"[{button}]",
                name=button.replace("mat-", ""),
                attributes={"widget": "button", "variant": button},
            )

    if fragment.tag == "mat-form-field":
        label = next(
            (d.own_text for d in fragment.descendants() if d.tag == "mat-label" and _is_static(d.own_text)),
            None,
        )
        if label:
            return _Match(
                expression=f"mat-form-field:has(mat-label:has-text({_css_string(label)}))",
                name=f"{label} field",
                text=label,
                attributes={"widget": "form-field", "label": label},
            )
        return _Match(expression=_tag_css(fragment), name="form field", attributes={"widget": "form-field"})

    if fragment.has_attr(*_DIALOG_ATTRIBUTES):
        text = fragment.full_text
        name = text if _is_static(text) else "dialog close"
        return _Match(
            expression=_has_text(fragment.tag, text) if _is_static(text) else f"{fragment.tag}[mat-dialog-close]",
            name=name,
            text=text if _is_static(text) else None,
            attributes={"widget": "dialog-trigger"},
        )

    if fragment.has_attr(*_MENU_ATTRIBUTES):
        menu = fragment.static_attr(*_MENU_ATTRIBUTES) or "menu"
        return _Match(
            expression=f"{_tag_css(fragment)}[aria-haspopup]",
            name=f"{menu} trigger",
            attributes={"widget": "menu-trigger", "menu": menu},
        )

    if fragment.tag in {"mat-checkbox", "mat-slide-toggle", "mat-radio-button", "mat-chip", "mat-chip-option"}:
        text = fragment.full_text
        if _is_static(text):
            return _Match(
                expression=_has_text(fragment.tag, text),
                name=text,
                text=text,
                attributes={"widget": fragment.tag.replace("mat-", "")},
            )

    if fragment.tag == "mat-tab":
        label = fragment.static_attr("label")
        if label:
            return _Match(
                expression=_has_text("[role=\"tab\"]", label),
                name=f"{label} tab",
                text=label,
                attributes={"widget": "tab"},
            )
    return None


def _match_table(fragment: _Fragment) -> Optional[_Match]:
    if not fragment.is_tabular:
        return None
    expression = _tag_css(fragment)
    for attribute in _TABLE_ATTRIBUTES:
        if fragment.has_attr(attribute):
            expression += f"[{attribute}]"
    if fragment.has_attr(*_TABLE_ATTRIBUTES):
        name = "DataTable"
    else:
        name = _tag_name(fragment.tag)
    return _Match(expression=expression, name=name, attributes={"widget": "table"})


def _match_text(fragment: _Fragment) -> Optional[_Match]:
    if fragment.tag not in _TEXT_TAGS or fragment.in_table:
        return None
    text = fragment.own_text
    if not _is_static(text):
        return None
    return _Match(expression=_has_text(fragment.tag, text), name=text, text=text)


def _match_dynamic(fragment: _Fragment) -> Optional[_Match]:
    if fragment.in_table or fragment.tag in _DECORATIVE_TAGS:
        return None
    text = fragment.own_text
    interpolation = _INTERPOLATION.search(text)
    projects = any(child.tag == "ng-content" for child in fragment.children)
    if interpolation is None and not projects:
        return None
    attributes = {"binding": interpolation.group(1)} if interpolation else {"projection": "ng-content"}
    return _Match(expression=_tag_css(fragment), name=_tag_name(fragment.tag), attributes=attributes)


def _match_css(fragment: _Fragment) -> Optional[_Match]:
    tag = fragment.tag
    custom = "-" in tag and tag not in _DECORATIVE_TAGS
    if fragment.in_table or not (tag in _INTERACTIVE_TAGS or custom):
        return None

    meaningful = [cls for cls in fragment.classes if not set(cls.lower().split("-")) <= _GENERIC_CLASS_WORDS]
    input_type = fragment.static_attr("type")
    text = fragment.own_text if _is_static(fragment.own_text) else None

    if fragment.classes:
        expression = _tag_css(fragment)
    elif tag == "input" and input_type:
        expression = f"input[type={_css_string(input_type)}]"
    elif text:
        expression = _has_text(tag, text)
    else:
        expression = tag

    if meaningful:
        name = meaningful[0]
    elif text:
        name = text
    elif tag == "input" and input_type:
        name = f"{input_type} input"
    else:
        name = _tag_name(tag)
    return _Match(expression=expression, name=name, text=text)


DETECTION_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule(STRATEGY_TEST_ID, "explicit test-identifier attribute", _match_test_id),
    DetectionRule(STRATEGY_ID, "explicit id attribute", _match_id),
    DetectionRule(STRATEGY_FORM_FIELD, "form-control or named-field attribute", _match_form_field),
    DetectionRule(STRATEGY_ROLE, "role-implying element with visible text", _match_role),
    DetectionRule(STRATEGY_HANDLER, "click handler or navigation attribute", _match_handler),
    DetectionRule(STRATEGY_WIDGET, "design-system widget", _match_widget),
    DetectionRule(STRATEGY_TABLE, "table or data grid", _match_table),
    DetectionRule(STRATEGY_TEXT, "text-bearing tag from the allow-list", _match_text),
    DetectionRule(STRATEGY_DYNAMIC, "interpolated or projected content", _match_dynamic),
    DetectionRule(STRATEGY_CSS, "class-based fallback", _match_css),
)

# Explicit identifiers may sit on any rendered tag; the other rules skip decorative tags.
_ANY_TAG_STRATEGIES = {STRATEGY_TEST_ID, STRATEGY_ID}


class TemplateAnalyzer:
    """Assigns each testable element of a template exactly one selector strategy."""

    def __init__(self, rules: Sequence[DetectionRule] = DETECTION_RULES) -> None:
        self.rules = tuple(rules)

    def analyze(
        self, markup: str, component: Optional[ComponentDescriptor] = None
    ) -> List[ElementSelector]:
        """Return element selectors in document order."""
        selectors: List[ElementSelector] = []
        taken: Set[str] = set()
        for fragment in parse_fragments(markup):
            found = self._first_match(fragment)
            if found is None:
                continue
            rule, match = found
            property_name = unique_name(
                pascal_case(match.name, max_words=_MAX_NAME_WORDS) or _tag_name(fragment.tag),
                taken,
            )
            selector = ElementSelector(
                element_kind=_element_kind(fragment),
                strategy=rule.strategy,
                expression=match.expression,
                property_name=property_name,
                text=match.text,
                click_handler=_handler_name(fragment),
                is_table=fragment.is_tabular,
                is_link=_is_link(fragment),
                is_library_widget=_is_library_widget(fragment),
                attributes=dict(match.attributes),
            )
            selectors.append(selector)
            if selector.is_table:
                selectors.extend(_table_parts(fragment, selector, taken))

        if component is not None:
            logger.debug("Detected %d selectors in %s", len(selectors), component.name)
        return selectors

    def candidates(self, markup: str) -> List[Tuple[str, List[str]]]:
        """Return ``(tag, strategies)`` for every fragment that at least one rule matches."""
        report: List[Tuple[str, List[str]]] = []
        for fragment in parse_fragments(markup):
            strategies = [
                rule.strategy
                for rule in self.rules
                if _eligible(rule, fragment) and rule.match(fragment) is not None
            ]
            if strategies:
                report.append((fragment.tag, strategies))
        return report

    def _first_match(self, fragment: _Fragment) -> Optional[Tuple[DetectionRule, _Match]]:
        for rule in self.rules:
            if not _eligible(rule, fragment):
                continue
            match = rule.match(fragment)
            if match is not None:
                return rule, match
        return None


def _eligible(rule: DetectionRule, fragment: _Fragment) -> bool:
    if fragment.tag in _NON_RENDERED_TAGS:
        return False
    if fragment.tag in _DECORATIVE_TAGS:
        return rule.strategy in _ANY_TAG_STRATEGIES
    return True


def _table_parts(
    fragment: _Fragment, root: ElementSelector, taken: Set[str]
) -> List[ElementSelector]:
    """Row, header and per-column sub-locators relative to a table root."""
    descendants = fragment.descendants()
    material = fragment.has_attr(*_TABLE_ATTRIBUTES) or fragment.tag in {"mat-table", "cdk-table"}
    native = fragment.tag == "table"

    if material:
        rows = "tr[mat-row], mat-row"
        header = "tr[mat-header-row], mat-header-row"
    elif native:
        has_tbody = any(d.tag == "tbody" for d in descendants)
        has_thead = any(d.tag == "thead" for d in descendants)
        rows = "tbody tr" if has_tbody else "tr:has(td)"
        header = "thead tr" if has_thead else "tr:has(th)"
    else:
        rows = "[role=\"row\"]"
        header = "[role=\"columnheader\"]"

    columns: List[Tuple[str, str, str]] = []
    if material:
        for definition in (d for d in descendants if d.static_attr("matcolumndef")):
            key = definition.static_attr("matcolumndef") or ""
            header_cell = next(
                (
                    d
                    for d in definition.descendants()
                    if d.tag == "mat-header-cell" or d.has_attr("mat-header-cell", "*matheadercelldef")
                ),
                None,
            )
            label = header_cell.full_text if header_cell is not None else ""
            title = label if _is_static(label) else key
            columns.append((title, f".mat-column-{key}", key))
    elif native:
        headers = [d for d in descendants if d.tag == "th"]
        for index, cell in enumerate(headers, start=1):
            label = cell.full_text
            title = label if _is_static(label) else f"column {index}"
            columns.append((title, f"td:nth-child({index})", str(index)))

    parts: List[ElementSelector] = []
    root_name = root.property_name

    def add(kind: str, suffix: str, relative: str, extra: Dict[str, str], text: Optional[str] = None) -> None:
        name = unique_name(f"{root_name}{suffix}", taken)
        attributes = {"parent": root_name, "relative": relative}
        attributes.update(extra)
        parts.append(
            ElementSelector(
                element_kind=kind,
                strategy=STRATEGY_TABLE,
                expression=_descendant(root.expression, relative),
                property_name=name,
                text=text,
                is_library_widget=root.is_library_widget,
                attributes=attributes,
            )
        )

    add("table-rows", "Rows", rows, {})
    add("table-header", "Header", header, {})
    for title, relative, key in columns:
        add(
            "table-column",
            f"{pascal_case(title, max_words=_MAX_NAME_WORDS)}Column",
            relative,
            {"column": key, "header": title},
            text=title,
        )
    return parts


def _descendant(root: str, relative: str) -> str:
    return ", ".join(f"{root} {part.strip()}" for part in relative.split(","))


__all__ = ["DETECTION_RULES", "DetectionRule", "TemplateAnalyzer", "parse_fragments"]
