"""Dependency discovery for HTML entry points.

Each HTML file is tokenized once; ``<link href>`` references become CSS
dependencies and ``<script src>`` references become JS entries. The JS set
is then closed over static imports so that it holds every module the page
can load without a dynamic import.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from .attributes import find_attribute_value
from .errors import ScanError
from .imports import extract_static_imports
from .paths import resolve_reference
from .tokenizer import tokenize
from .tokens import TokenKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from concurrent.futures import Executor

    ImportExtractor = Callable[[str, str], Iterable[str]]

logger = logging.getLogger(__name__)

# Tag name -> attribute holding the reference, and which sets it feeds.
_REFERENCE_ATTRIBUTES = {
    "link": "href",
    "script": "src",
}


@dataclass(frozen=True, slots=True)
class DependencySet:
    """What one HTML file depends on.

    ``entry`` holds the ``<script src>`` files named directly in the document,
    ``js`` those entries plus everything they import transitively, and
    ``css`` the ``<link href>`` files.
    """

    entry: frozenset[str] = frozenset()
    css: frozenset[str] = frozenset()
    js: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        for name in ("entry", "css", "js"):
            value = getattr(self, name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))
        if not self.entry <= self.js:
            raise ValueError("every entry must also be listed in js")


Manifest = MappingProxyType


def collect_modules(
    entries: Iterable[str],
    root_dir: str,
    extract_imports: ImportExtractor = extract_static_imports,
) -> frozenset[str]:
    """Return ``entries`` plus every file reachable through static imports.

    The scanned set is private to this call; it is what makes circular
    imports terminate.
    """
    modules = set(entries)
    scanned: set[str] = set()
    pending = sorted(modules)
    while pending:
        path = pending.pop()
        if path in scanned:
            continue
        scanned.add(path)
        for imported in extract_imports(path, root_dir):
            if imported not in modules:
                modules.add(imported)
                pending.append(imported)
    return frozenset(modules)


def scan_html_file(
    path: str,
    root_dir: str,
    extract_imports: ImportExtractor = extract_static_imports,
) -> DependencySet:
    with open(path, encoding="utf-8") as handle:
        code = handle.read()

    css: set[str] = set()
    entry: set[str] = set()
    tokens = tokenize(code)
    for token in tokens:
        if token.kind != TokenKind.TAG_OPEN:
            continue
        attr = _REFERENCE_ATTRIBUTES.get(token.value)
        if attr is None:
            continue
        reference = find_attribute_value(tokens, attr)
        if not reference:
            continue
        resolved = resolve_reference(reference, path, root_dir)
        if resolved is None:
            continue
        if token.value == "link":
            css.add(resolved)
        else:
            entry.add(resolved)

    js = collect_modules(entry, root_dir, extract_imports)
    return DependencySet(entry=frozenset(entry), css=frozenset(css), js=js)


def scan_entry_points(
    html_files: Iterable[str],
    root_dir: str,
    executor: Executor | None = None,
    extract_imports: ImportExtractor = extract_static_imports,
) -> Mapping[str, DependencySet]:
    """Build the manifest for ``html_files``.

    Files are scanned on ``executor`` when one is given. Any failure is
    fatal: a partial manifest would make the later optimize phase unsafe.
    """
    html_files = sorted(html_files)

    def scan(path: str) -> DependencySet:
        try:
            deps = scan_html_file(path, root_dir, extract_imports)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise ScanError(path, exc) from exc
        logger.debug(
            "Scanned %s: %d css, %d js (%d entries)", path, len(deps.css), len(deps.js), len(deps.entry)
        )
        return deps

    if executor is None:
        results = [scan(path) for path in html_files]
    else:
        results = list(executor.map(scan, html_files))
    return Manifest(dict(zip(html_files, results)))
