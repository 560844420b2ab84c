"""Route table extraction from Angular routing declarations."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

from ..errors import MalformedSource
from ..fs import FileAccess, LocalFileSystem
from ..logging import get_logger
from ..models import Route
from ._scan import Bracket, own_text, scan_brackets

_ROUTE_FILE = re.compile(r"(routing|routes)", re.IGNORECASE)
_PATH = re.compile(r"\bpath\s*:\s*(['\"`])(.*?)\1")
_COMPONENT = re.compile(r"\bcomponent\s*:\s*(\w+)")
_REDIRECT = re.compile(r"\bredirectTo\s*:\s*['\"`]([^'\"`]*)['\"`]")
_LAZY = re.compile(r"\b(loadComponent|loadChildren)\s*:")
_LAZY_COMPONENT = re.compile(
    r"\bloadComponent\s*:.*?\.then\s*\(\s*\(?\s*(\w+)\s*\)?\s*=>\s*\{?\s*(?:return\s+)?\1\s*\.\s*(\w+)",
    re.DOTALL,
)


class RouteExtractor:
    """Builds the route table from ``*routing*.ts`` / ``*routes*.ts`` files."""

    def __init__(self, fs: FileAccess | None = None) -> None:
        self.fs = fs or LocalFileSystem()
        self.logger = get_logger("extractors.routes")

    def discover(self, source_root: Path) -> List[Path]:
        return [
            path
            for path in self.fs.list_files(source_root, "*.ts")
            if _ROUTE_FILE.search(path.name) and not path.name.endswith(".spec.ts")
        ]

    def extract_file(self, path: Path, project_root: Optional[Path] = None) -> List[Route]:
        """Parse one routing file. Raises MalformedSource on unbalanced brackets."""
        text = self.fs.read_text(path)
        source = _relative(path, project_root) if project_root is not None else path.name
        routes = parse_routes(text, source=source)
        self.logger.debug("Parsed %d routes from %s", len(routes), source)
        return routes


def parse_routes(text: str, *, source: Optional[str] = None) -> List[Route]:
    """Return routes declared in ``text`` in document order, child paths joined to parents."""
    scan = scan_brackets(text)
    if not scan.balanced and _PATH.search(text):
        raise MalformedSource(f"Unbalanced brackets in routing file {source or ''}".rstrip())

    brackets = scan.brackets
    declared: Dict[int, str] = {}
    bodies: Dict[int, str] = {}
    for index, bracket in enumerate(brackets):
        if bracket.kind != "{":
            continue
        body = own_text(text, brackets, index)
        path_match = _PATH.search(body)
        if path_match is None:
            continue
        declared[index] = path_match.group(2)
        bodies[index] = body

    routes: List[Route] = []
    for index in sorted(declared, key=lambda i: brackets[i].start):
        body = bodies[index]
        full_path = _join(_parent_path(brackets, index, declared), declared[index])
        component = _COMPONENT.search(body)
        lazy_component = _LAZY_COMPONENT.search(body)
        redirect = _REDIRECT.search(body)
        routes.append(
            Route(
                path=full_path,
                component=(component.group(1) if component else None)
                or (lazy_component.group(2) if lazy_component else None),
                redirect_to=redirect.group(1) if redirect else None,
                lazy=_LAZY.search(body) is not None,
                source=source,
            )
        )
    return routes


def _parent_path(brackets: List[Bracket], index: int, declared: Dict[int, str]) -> str:
    parent = brackets[index].parent
    while parent is not None:
        if parent in declared:
            return _join(_parent_path(brackets, parent, declared), declared[parent])
        parent = brackets[parent].parent
    return ""


def _join(prefix: str, path: str) -> str:
    parts = [part.strip("/") for part in (prefix, path) if part and part.strip("/")]
    return "/".join(parts)


def _relative(path: Path, root: Path) -> str:
    try:
        return PurePosixPath(path.relative_to(root)).as_posix()
    except ValueError:
        return path.name


__all__ = ["RouteExtractor", "parse_routes"]
