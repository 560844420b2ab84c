"""Component metadata extraction from Angular TypeScript sources."""

from __future__ import annotations

import re
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Sequence, Tuple

from ..errors import MalformedSource
from ..fs import FileAccess, LocalFileSystem
from ..logging import get_logger
from ..models import ComponentDescriptor
from ._scan import scan_brackets

_EXCLUDED_SUFFIXES = (
    ".spec.ts",
    ".module.ts",
    ".service.ts",
    ".guard.ts",
    ".interceptor.ts",
    ".model.ts",
    ".pipe.ts",
    ".directive.ts",
    ".config.ts",
    ".routes.ts",
    ".resolver.ts",
    ".store.ts",
    ".d.ts",
)
_EXCLUDED_NAMES = {"index.ts", "main.ts", "polyfills.ts", "test.ts"}

_DECORATOR = re.compile(r"@Component\s*\(\s*\{")
_SELECTOR = re.compile(r"\bselector\s*:\s*['\"`]([^'\"`]*)['\"`]")
_CLASS = re.compile(r"export\s+(?:default\s+)?(?:abstract\s+)?class\s+(\w+)")
_TEMPLATE_URL = re.compile(r"\btemplateUrl\s*:\s*['\"`]([^'\"`]+)['\"`]")
_INLINE_TEMPLATE = re.compile(
    r"\btemplate\s*:\s*(?:`((?:[^`\\]|\\.)*)`|'((?:[^'\\]|\\.)*)'|\"((?:[^\"\\]|\\.)*)\")",
    re.DOTALL,
)
_MODIFIERS = r"(?:(?:public|private|protected|readonly|override|declare)\s+)*"
_INPUT_DECORATOR = re.compile(r"@Input\s*\([^)]*\)\s*" + _MODIFIERS + r"(?:set\s+)?(\w+)")
_OUTPUT_DECORATOR = re.compile(r"@Output\s*\([^)]*\)\s*" + _MODIFIERS + r"(\w+)")
_SIGNAL_INPUT = re.compile(r"^\s*" + _MODIFIERS + r"(\w+)\s*=\s*(?:input|model)(?:\.required)?\s*[<(]", re.MULTILINE)
_SIGNAL_OUTPUT = re.compile(r"^\s*" + _MODIFIERS + r"(\w+)\s*=\s*output(?:FromObservable)?\s*[<(]", re.MULTILINE)
_METADATA_LIST = re.compile(r"\b(inputs|outputs)\s*:\s*\[([^\]]*)\]")
_LIST_ITEM = re.compile(r"['\"`]([^'\"`:]+)")


class ComponentExtractor:
    """Reads component declarations (identity, bindings, template) from source files."""

    def __init__(self, fs: FileAccess | None = None) -> None:
        self.fs = fs or LocalFileSystem()
        self.logger = get_logger("extractors.components")

    def discover(self, source_root: Path, *, exclude: Sequence[str] = ()) -> List[Path]:
        """List candidate component files below ``source_root``."""
        candidates: List[Path] = []
        for path in self.fs.list_files(source_root, "*.ts"):
            name = path.name
            if name in _EXCLUDED_NAMES or name.endswith(_EXCLUDED_SUFFIXES):
                continue
            relative = _relative(path, source_root)
            if any(fnmatchcase(relative, pattern) for pattern in exclude):
                continue
            candidates.append(path)
        self.logger.debug("Found %d candidate component files under %s", len(candidates), source_root)
        return candidates

    def extract_file(self, path: Path, project_root: Path) -> Optional[ComponentDescriptor]:
        """Return the component declared in ``path``, or None when it declares none.

        Raises MalformedSource when a ``@Component`` decorator is present but its
        metadata or class declaration cannot be located.
        """
        text = self.fs.read_text(path)
        decorator = _DECORATOR.search(text)
        if decorator is None:
            return None

        brace = decorator.end() - 1
        scan = scan_brackets(text, brace, stop_at_close=True)
        if not scan.brackets or not scan.balanced or scan.brackets[0].end >= len(text):
            raise MalformedSource(f"Unterminated @Component metadata in {path.name}", path=path)
        metadata_end = scan.brackets[0].end
        metadata = text[brace : metadata_end + 1]

        declared = _CLASS.search(text, metadata_end)
        if declared is None:
            raise MalformedSource(f"No exported class follows @Component in {path.name}", path=path)
        body = text[declared.end() :]

        selector_match = _SELECTOR.search(_without_template(metadata))
        inline = _inline_template(metadata)
        template_path = None
        if inline is None:
            template_path = self._template_path(path, metadata, project_root)

        inputs, outputs = _bindings(metadata, body)
        return ComponentDescriptor(
            name=declared.group(1),
            selector=selector_match.group(1).strip() if selector_match else "",
            source_path=_relative(path, project_root),
            template_path=template_path,
            inputs=tuple(inputs),
            outputs=tuple(outputs),
            inline_template=inline,
        )

    def load_template(self, descriptor: ComponentDescriptor, project_root: Path) -> Optional[str]:
        """Return the component's markup, or None when its template file is missing."""
        if descriptor.inline_template is not None:
            return descriptor.inline_template
        if descriptor.template_path is None:
            return ""
        path = project_root / descriptor.template_path
        if not self.fs.is_file(path):
            return None
        return self.fs.read_text(path)

    def _template_path(self, source: Path, metadata: str, project_root: Path) -> Optional[str]:
        declared = _TEMPLATE_URL.search(metadata)
        if declared:
            candidate = (source.parent / declared.group(1)).resolve()
            return _relative(candidate, project_root.resolve())
        name = source.name
        if name.endswith(".component.ts"):
            conventional = source.with_name(name[: -len(".ts")] + ".html")
        else:
            conventional = source.with_suffix(".html")
        if self.fs.is_file(conventional):
            return _relative(conventional, project_root)
        return None


def _inline_template(metadata: str) -> Optional[str]:
    match = _INLINE_TEMPLATE.search(metadata)
    if match is None:
        return None
    backtick, single, double = match.groups()
    if backtick is not None:
        return backtick.replace("\\`", "`")
    if single is not None:
        return single.replace("\\'", "'")
    return (double or "").replace('\\"', '"')


def _without_template(metadata: str) -> str:
    return _INLINE_TEMPLATE.sub("", metadata)


def _bindings(metadata: str, body: str) -> Tuple[List[str], List[str]]:
    inputs: List[str] = []
    outputs: List[str] = []
    for kind, items in _METADATA_LIST.findall(metadata):
        target = inputs if kind == "inputs" else outputs
        _extend_unique(target, (item.strip() for item in _LIST_ITEM.findall(items)))
    _extend_unique(inputs, _INPUT_DECORATOR.findall(body))
    _extend_unique(inputs, _SIGNAL_INPUT.findall(body))
    _extend_unique(outputs, _OUTPUT_DECORATOR.findall(body))
    _extend_unique(outputs, _SIGNAL_OUTPUT.findall(body))
    return inputs, outputs


def _extend_unique(target: List[str], names: Iterable[str]) -> None:
    for name in names:
        if name and name not in target:
            target.append(name)


def _relative(path: Path, root: Path) -> str:
    try:
        return PurePosixPath(Path(path).relative_to(root)).as_posix()
    except ValueError:
        return PurePosixPath(path).as_posix()


__all__ = ["ComponentExtractor"]
