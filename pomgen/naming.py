"""Name derivation shared by the template analyzer and every artifact renderer.

All identifiers, file names, import specifiers and constant keys for a
component come from :func:`component_names`; all per-element identifiers come
from :func:`element_names`. Renderers never format names on their own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, MutableSet, Optional, Sequence, Set

from .models import ComponentDescriptor, ElementSelector

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_COMPONENT_SUFFIX = "Component"

# Members of the generated base class; element accessors must not shadow them.
_RESERVED_MEMBERS = {
    "constructor",
    "page",
    "goto",
    "navigate",
    "locate",
    "waitFor",
    "waitForLoad",
    "waitForReady",
    "isVisible",
    "click",
    "fill",
    "getText",
    "expectVisible",
    "expectText",
}


def split_words(text: str) -> List[str]:
    """Split free text or mixed-case identifiers into words."""
    words: List[str] = []
    for chunk in _WORD_SPLIT.split(text or ""):
        if chunk:
            words.extend(part for part in _CASE_BOUNDARY.split(chunk) if part)
    return words


def pascal_case(text: str, *, max_words: Optional[int] = None) -> str:
    words = split_words(text)
    if max_words is not None:
        words = words[:max_words]
    result = "".join(word[:1].upper() + word[1:].lower() for word in words)
    if result[:1].isdigit():
        result = f"Item{result}"
    return result


def camel_case(text: str) -> str:
    pascal = pascal_case(text) if not _is_identifier(text) else text
    return pascal[:1].lower() + pascal[1:]


def kebab_case(text: str) -> str:
    return "-".join(word.lower() for word in split_words(text))


def unique_name(candidate: str, taken: MutableSet[str]) -> str:
    """Return ``candidate`` or ``candidate2``, ``candidate3``... and reserve it."""
    name = candidate
    index = 2
    while name.lower() in taken:
        name = f"{candidate}{index}"
        index += 1
    taken.add(name.lower())
    return name


def _is_identifier(text: str) -> bool:
    return bool(text) and re.fullmatch(r"[A-Za-z][A-Za-z0-9]*", text) is not None


@dataclass(frozen=True)
class ComponentNames:
    """Every name the generated files use for one component."""

    component: str
    base: str
    page_class: str
    file_stem: str
    page_file: str
    page_module: str
    selectors_file: str
    selectors_module: str
    selectors_const: str
    fixture_name: str
    route_key: str
    test_file: str


def component_names(
    descriptor: ComponentDescriptor,
    *,
    test_suffix: str = "spec",
    taken: Optional[MutableSet[str]] = None,
) -> ComponentNames:
    """Derive the names for one component.

    When ``taken`` is given, names already claimed by earlier components of
    the same project get a numeric suffix (``LoginPage2``, ``login-page-2``)
    and the chosen names are added to it.
    """
    name = descriptor.name
    base = name[: -len(_COMPONENT_SUFFIX)] if name.endswith(_COMPONENT_SUFFIX) else name
    base = pascal_case(base) if base else pascal_case(name)
    page_base = base if base.endswith("Page") else f"{base}Page"

    index = 1
    while True:
        suffix = str(index) if index > 1 else ""
        page_class = f"{page_base}{suffix}"
        stem = f"{kebab_case(base)}-{index}" if index > 1 else kebab_case(base)
        route_key = f"{camel_case(base)}{suffix}"
        selectors_const = f"{camel_case(base)}{suffix}Selectors"
        claims = {
            f"class:{page_class.lower()}",
            f"file:{stem}",
            f"route:{route_key.lower()}",
            f"const:{selectors_const.lower()}",
        }
        if taken is None or not claims & taken:
            break
        index += 1
    if taken is not None:
        taken.update(claims)

    return ComponentNames(
        component=name,
        base=base,
        page_class=page_class,
        file_stem=stem,
        page_file=f"pages/{stem}.page.ts",
        page_module=f"./pages/{stem}.page",
        selectors_file=f"selectors/{stem}.selectors.ts",
        selectors_module=f"../selectors/{stem}.selectors",
        selectors_const=selectors_const,
        fixture_name=camel_case(page_class),
        route_key=route_key,
        test_file=f"tests/{stem}.{test_suffix}.ts",
    )


@dataclass(frozen=True)
class ElementNames:
    """Accessor, constant key and method names for one element selector."""

    property_name: str
    accessor: str
    constant_key: str
    click: str
    fill: str
    expect_visible: str
    get_text: str
    expect_text: str
    row: str
    column: str
    headers: str
    row_count: str
    click_row: str


# Every generated member an element can contribute to its page object.
ELEMENT_MEMBERS = (
    "accessor",
    "click",
    "fill",
    "expect_visible",
    "get_text",
    "expect_text",
    "row",
    "column",
    "headers",
    "row_count",
    "click_row",
)


def reserved_members() -> Set[str]:
    """Lowercased base-class members, the seed for a page's ``taken`` set."""
    return {member.lower() for member in _RESERVED_MEMBERS}


def _element_names_for(prop: str) -> ElementNames:
    accessor = camel_case(prop)
    if accessor in _RESERVED_MEMBERS:
        accessor = f"{accessor}Element"
    return ElementNames(
        property_name=prop,
        accessor=accessor,
        constant_key=accessor,
        click=f"click{prop}",
        fill=f"fill{prop}",
        expect_visible=f"expect{prop}Visible",
        get_text=f"get{prop}Text",
        expect_text=f"expect{prop}Text",
        row=f"get{prop}Row",
        column=f"get{prop}Column",
        headers=f"get{prop}Headers",
        row_count=f"get{prop}RowCount",
        click_row=f"click{prop}Row",
    )


def element_names(
    selector: ElementSelector,
    *,
    taken: Optional[MutableSet[str]] = None,
    members: Sequence[str] = ELEMENT_MEMBERS,
) -> ElementNames:
    """Derive accessor and method names for ``selector``.

    With ``taken`` (the lowercased members already on the page object), the
    property name gets a numeric suffix until none of the requested
    ``members`` clash, and those members are then reserved.
    """
    prop = selector.property_name
    names = _element_names_for(prop)
    if taken is None:
        return names

    index = 2
    while any(getattr(names, member).lower() in taken for member in members):
        names = _element_names_for(f"{prop}{index}")
        index += 1
    taken.update(getattr(names, member).lower() for member in members)
    return names


__all__ = [
    "ELEMENT_MEMBERS",
    "ComponentNames",
    "ElementNames",
    "camel_case",
    "component_names",
    "element_names",
    "kebab_case",
    "pascal_case",
    "reserved_members",
    "split_words",
    "unique_name",
]
