"""CSS imported from JS.

The build step turns ``import './app.css'`` into an import of a generated
``app.css.proxy.js`` module that injects the stylesheet at runtime. When CSS
preloading is on, those side-effect imports are removed from the JS and the
CSS behind them is concatenated into one stylesheet that every page links
to. CSS modules (``*.module.css``) export class names, so their proxies are
always left alone.
"""

from __future__ import annotations

import logging
import os
import re
from typing import TYPE_CHECKING

from .paths import resolve_reference

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping

    from .scanner import DependencySet

logger = logging.getLogger(__name__)

PROXY_SUFFIX = ".proxy.js"
CSS_PROXY_SUFFIX = ".css" + PROXY_SUFFIX
MODULE_CSS_PROXY_SUFFIX = ".module" + CSS_PROXY_SUFFIX

_SIDE_EFFECT_IMPORT_PATTERN = re.compile(
    r"^[ \t]*import\s*([\"'])([^\"'\n]+)\1[ \t]*;?[ \t]*(?:\r?\n)?",
    re.M,
)


def is_css_proxy(path: str) -> bool:
    return path.endswith(CSS_PROXY_SUFFIX)


def css_proxy_source(path: str) -> str | None:
    """The stylesheet behind a plain (non-module) CSS proxy, else ``None``."""
    if not is_css_proxy(path) or path.endswith(MODULE_CSS_PROXY_SUFFIX):
        return None
    return path[: -len(PROXY_SUFFIX)]


def transform_css_proxy(
    code: str,
    combined: Collection[str] | None = None,
    path: str | None = None,
    root_dir: str | None = None,
) -> str:
    """Drop side-effect imports of plain CSS proxies from ``code``.

    With ``combined``, only imports whose stylesheet is one of those files
    are dropped; ``path`` and ``root_dir`` resolve the specifiers. Anything
    else keeps injecting its CSS at runtime.
    """

    def replace(match: re.Match[str]) -> str:
        source = css_proxy_source(match.group(2))
        if source is None:
            return match.group(0)
        if combined is not None:
            if path is None or root_dir is None:
                return match.group(0)
            resolved = resolve_reference(match.group(2), path, root_dir)
            if resolved is None or css_proxy_source(resolved) not in combined:
                return match.group(0)
        return ""

    return _SIDE_EFFECT_IMPORT_PATTERN.sub(replace, code)


def combined_css_sources(manifest: Mapping[str, DependencySet]) -> list[str]:
    """Stylesheets behind the plain CSS proxies some page reaches, in a stable order."""
    sources: list[str] = []
    for html_file in sorted(manifest):
        for module in sorted(manifest[html_file].js):
            source = css_proxy_source(module)
            if source is not None and source not in sources:
                sources.append(source)
    return sources


def build_import_css(
    manifest: Mapping[str, DependencySet],
    minify: Callable[[str], str] | None = None,
) -> str:
    """Concatenate the CSS imported by every page's JS, in a stable order."""
    parts = []
    for source in combined_css_sources(manifest):
        if not os.path.isfile(source):
            logger.warning("Missing stylesheet %s behind a CSS proxy; skipping", source)
            continue
        with open(source, encoding="utf-8", newline="") as handle:
            parts.append(handle.read())

    code = "\n".join(parts)
    if code and minify is not None:
        code = minify(code)
    return code
