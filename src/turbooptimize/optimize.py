"""Optimize a finished build directory in place.

A run has three phases:

1. Scan every HTML file into the manifest. This must finish, completely,
   before anything is rewritten, because HTML tasks read the manifest.
2. Optimize every file on a bounded thread pool. Tasks only touch their own
   file; a failing task is logged and recorded, and the others carry on.
3. Write the combined stylesheet and the manifest.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING

from .css import build_import_css, combined_css_sources, css_proxy_source, is_css_proxy, transform_css_proxy
from .errors import SetupError
from .imports import ImportGraph, extract_static_imports
from .inject import inject_html
from .manifest import MANIFEST_NAME, format_manifest, write_manifest
from .minify import Minifier
from .options import OptimizeOptions
from .paths import project_url
from .preload import preload_js
from .scanner import scan_entry_points

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Mapping

    from .scanner import DependencySet, ImportExtractor

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = (".html",)
JS_EXTENSIONS = (".js", ".mjs")
CSS_EXTENSIONS = (".css",)


@dataclass(frozen=True, slots=True)
class FileFailure:
    path: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


@dataclass(frozen=True, slots=True)
class OptimizeReport:
    manifest: Mapping[str, DependencySet]
    files: tuple[str, ...] = ()
    generated_files: tuple[str, ...] = ()
    failures: tuple[FileFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


def list_build_files(build_dir: str, exclude: Iterable[str] = (), meta_dir: str | None = None) -> list[str]:
    """Every file under ``build_dir`` not matched by an exclude glob.

    Globs are matched against the ``/``-separated path relative to
    ``build_dir``; the metadata directory is always excluded.
    """
    if not os.path.isdir(build_dir):
        raise SetupError(f"build directory {build_dir} does not exist")

    patterns = []
    for pattern in exclude:
        pattern = pattern.lstrip("/")
        patterns.append(pattern)
        # "**/" also matches at the top level.
        while pattern.startswith("**/"):
            pattern = pattern[3:]
            patterns.append(pattern)
    if meta_dir:
        patterns.append(meta_dir.strip("/") + "/*")

    def fail(exc: OSError) -> None:
        raise SetupError(f"cannot list {exc.filename}: {exc.strerror}") from exc

    files = []
    for dirpath, _dirnames, filenames in os.walk(build_dir, onerror=fail):
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            relative = os.path.relpath(path, build_dir).replace(os.sep, "/")
            if any(fnmatch(relative, pattern) for pattern in patterns):
                continue
            files.append(path)
    files.sort()
    return files


def _uses_imported_css(deps: DependencySet | None) -> bool:
    return deps is not None and any(css_proxy_source(path) is not None for path in deps.js)


def optimize_file(
    path: str,
    root_dir: str,
    options: OptimizeOptions,
    minifier: Minifier,
    manifest: Mapping[str, DependencySet],
    extract_imports: ImportExtractor = extract_static_imports,
    combined_css: Collection[str] | None = None,
) -> bool:
    """Optimize one file in place; return whether it was rewritten.

    The file is read once and written once, so on failure it is left as it
    was. With ``combined_css``, only CSS proxy imports whose stylesheet is in
    that set are removed from JS.
    """
    ext = os.path.splitext(path)[1].lower()
    if ext in CSS_EXTENSIONS:
        if not options.minify_css:
            return False
        original = _read(path)
        code = minifier.css(original)
    elif ext in JS_EXTENSIONS:
        if not (options.preload_css or options.minify_js):
            return False
        original = _read(path)
        code = original
        if options.preload_css:
            code = transform_css_proxy(code, combined_css, path, root_dir)
        if options.minify_js:
            code = minifier.js(code)
    elif ext in HTML_EXTENSIONS:
        if not (options.preload_css or options.preload_modules or options.minify_html):
            return False
        original = _read(path)
        code = original
        if options.preload_css and _uses_imported_css(manifest.get(path)):
            code = inject_html(code, head_end=f'<link rel="stylesheet" href="{options.combined_css_name}" />')
        if options.preload_modules:
            code = preload_js(code, root_dir, path, options.preload_css, extract_imports)
        if options.minify_html:
            code = minifier.html(code)
    else:
        return False

    if code == original:
        return False
    _write(path, code)
    logger.debug("Optimized %s", project_url(path, root_dir))
    return True


def _read(path: str) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def _write(path: str, code: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(code)


def _start_minifier(factory: Callable[[str | None], Minifier], target: str | None) -> Minifier:
    try:
        return factory(target).start()
    except SetupError:
        raise
    except Exception as exc:
        raise SetupError(f"cannot start minifier: {exc}") from exc


def optimize(
    build_dir: str,
    options: OptimizeOptions | None = None,
    *,
    minifier_factory: Callable[[str | None], Minifier] = Minifier,
    extract_imports: ImportExtractor = extract_static_imports,
    max_workers: int | None = None,
) -> OptimizeReport:
    """Optimize ``build_dir`` in place and write its manifest.

    Raises ``SetupError`` or ``ScanError`` when the run cannot complete;
    per-file failures are returned in the report instead.
    """
    options = options or OptimizeOptions()
    build_dir = os.path.abspath(build_dir)
    files = list_build_files(build_dir, options.exclude, options.meta_dir)
    html_files = [path for path in files if path.lower().endswith(HTML_EXTENSIONS)]
    tasks = [path for path in files if not (options.preload_css and is_css_proxy(path))]
    logger.info("Optimizing %d files (%d HTML) in %s", len(tasks), len(html_files), build_dir)

    # Filled while scanning; HTML tasks must not re-read JS that other tasks rewrite.
    import_graph = ImportGraph(extract_imports)
    minifier = _start_minifier(minifier_factory, options.target)
    try:
        with ThreadPoolExecutor(max_workers=max_workers or os.cpu_count() or 1) as executor:
            manifest = scan_entry_points(html_files, build_dir, executor, import_graph)
            logger.debug("Scanned %d HTML files, %d JS modules", len(manifest), len(import_graph))
            # Proxy imports are only dropped for CSS that lands in the combined stylesheet.
            sources = combined_css_sources(manifest)
            combined_css = frozenset(source for source in sources if os.path.isfile(source))

            def run(path: str) -> FileFailure | None:
                try:
                    optimize_file(path, build_dir, options, minifier, manifest, import_graph, combined_css)
                except Exception as exc:
                    logger.warning("Failed to optimize %s: %s", project_url(path, build_dir), exc)
                    return FileFailure(path, exc)
                return None

            failures = tuple(failure for failure in executor.map(run, tasks) if failure is not None)

        generated = []
        if options.preload_css:
            combined = build_import_css(manifest, minifier.css if options.minify_css else None)
            if combined:
                output = os.path.join(build_dir, options.combined_css_name.lstrip("/"))
                os.makedirs(os.path.dirname(output), exist_ok=True)
                _write(output, combined)
                generated.append(output)
    finally:
        minifier.close()

    data = format_manifest(
        manifest,
        build_dir,
        generated,
        preload_css=options.preload_css,
        combined_css_url=options.combined_css_name if generated else None,
    )
    write_manifest(os.path.join(build_dir, options.meta_dir.strip("/"), MANIFEST_NAME), data)

    if failures:
        logger.warning("%d of %d files failed to optimize", len(failures), len(tasks))
    else:
        logger.info("Optimized %d files", len(tasks))
    return OptimizeReport(
        manifest=manifest,
        files=tuple(tasks),
        generated_files=tuple(generated),
        failures=failures,
    )
