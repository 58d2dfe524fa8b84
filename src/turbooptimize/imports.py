"""Static import extraction for already-built JS modules.

The build step has resolved every import to a relative or rooted URL by the
time we run, so this only has to find the literal specifiers of static
``import``/``export ... from`` statements. Dynamic ``import()`` and
``import.meta`` are not static imports and are ignored, as are remote URLs
and bare specifiers that no upstream step resolved.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from bisect import bisect_right
from typing import TYPE_CHECKING

from .paths import is_remote, resolve_reference

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

# Strings are matched (and kept) so that comment markers inside them survive.
_COMMENT_PATTERN = re.compile(
    r"(\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*'|`(?:\\.|[^`\\])*`)|//[^\n]*|/\*[\s\S]*?\*/"
)
_IMPORT_PATTERN = re.compile(
    r"(?<![\w$.])import\s*(?:[\w$*{}\s,]+?\s*from\s*)?([\"'])([^\"'\n]+)\1"
)
_EXPORT_FROM_PATTERN = re.compile(
    r"(?<![\w$.])export\s*(?:\*(?:\s*as\s+[\w$]+)?|\{[^}]*\})\s*from\s*([\"'])([^\"'\n]+)\1"
)


def _strip_comments(code: str) -> tuple[str, list[tuple[int, int]]]:
    """Replace comments with a space; return the code and its string literal spans."""
    parts = []
    strings = []
    length = 0
    last = 0
    for match in _COMMENT_PATTERN.finditer(code):
        parts.append(code[last : match.start()])
        length += match.start() - last
        text = match.group(1)
        if text:
            strings.append((length, length + len(text)))
        else:
            text = " "
        parts.append(text)
        length += len(text)
        last = match.end()
    parts.append(code[last:])
    return "".join(parts), strings


def _in_string(pos: int, strings: list[tuple[int, int]], starts: list[int]) -> bool:
    index = bisect_right(starts, pos) - 1
    return index >= 0 and pos < strings[index][1]


def find_import_specifiers(code: str) -> list[str]:
    """Literal specifiers of static imports and re-exports, in source order."""
    code, strings = _strip_comments(code)
    starts = [start for start, _ in strings]
    found = []
    for pattern in (_IMPORT_PATTERN, _EXPORT_FROM_PATTERN):
        for match in pattern.finditer(code):
            # Statement text quoted inside a string literal is not an import.
            if _in_string(match.start(), strings, starts):
                continue
            found.append((match.start(), match.group(2)))
    found.sort()
    return [specifier for _, specifier in found]


def _is_local(specifier: str) -> bool:
    return specifier.startswith(("/", "./", "../"))


def extract_static_imports(path: str, root_dir: str) -> list[str]:
    """Return the resolved file paths statically imported by the JS file at ``path``."""
    if not os.path.isfile(path):
        logger.debug("Skipping import scan of missing file %s", path)
        return []
    with open(path, encoding="utf-8") as handle:
        code = handle.read()

    resolved = []
    for specifier in find_import_specifiers(code):
        if is_remote(specifier):
            continue
        if not _is_local(specifier):
            logger.debug("Ignoring unresolved import %r in %s", specifier, path)
            continue
        target = resolve_reference(specifier, path, root_dir)
        if target is not None and target not in resolved:
            resolved.append(target)
    return resolved


class ImportGraph:
    """Memoized import extraction, safe to share between threads.

    JS files are rewritten during the optimize phase while HTML tasks still
    need their imports, so the orchestrator fills this during the scan phase
    and later lookups never touch the files again.
    """

    def __init__(self, extract: Callable[[str, str], Iterable[str]] = extract_static_imports) -> None:
        self._extract = extract
        self._imports: dict[str, tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def __call__(self, path: str, root_dir: str) -> tuple[str, ...]:
        with self._lock:
            imports = self._imports.get(path)
        if imports is None:
            imports = tuple(self._extract(path, root_dir))
            with self._lock:
                imports = self._imports.setdefault(path, imports)
        return imports

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._imports

    def __len__(self) -> int:
        with self._lock:
            return len(self._imports)
