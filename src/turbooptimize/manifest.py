"""Serialized form of the scan manifest.

::

    {
      "imports": {"/index.html": {"css": ["/a.css"], "js": ["/b.js"]}},
      "generated": ["/imported-styles.css"]
    }
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

from .css import css_proxy_source
from .paths import project_url

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .scanner import DependencySet

MANIFEST_NAME = "optimize-manifest.json"


def format_manifest(
    manifest: Mapping[str, DependencySet],
    build_dir: str,
    generated_files: Iterable[str] = (),
    preload_css: bool = False,
    combined_css_url: str | None = None,
) -> dict[str, Any]:
    """Convert the manifest to JSON-ready data with project URLs.

    With CSS preloading, plain CSS proxies are served by the combined
    stylesheet, so they move out of ``js`` and the combined stylesheet is
    listed under ``css`` instead.
    """
    imports = {}
    for html_file in sorted(manifest):
        deps = manifest[html_file]
        css = {project_url(path, build_dir) for path in deps.css}
        js = set()
        for path in deps.js:
            if preload_css and css_proxy_source(path) is not None:
                if combined_css_url:
                    css.add(combined_css_url)
                continue
            js.add(project_url(path, build_dir))
        imports[project_url(html_file, build_dir)] = {"css": sorted(css), "js": sorted(js)}

    return {
        "imports": imports,
        "generated": sorted(project_url(path, build_dir) for path in generated_files),
    }


def write_manifest(path: str, data: Mapping[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2)
        handle.write("\n")
