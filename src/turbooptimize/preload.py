"""Module preloading for HTML documents.

Unbundled ES modules are discovered one import at a time, which makes deep
import graphs slow to load. For every module a document will end up
importing, we add a ``<link rel="modulepreload">`` to the head and, for
browsers without modulepreload support, an equivalent module script at the
end of the body.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .attributes import read_tag_attributes
from .css import is_css_proxy
from .imports import extract_static_imports
from .inject import inject_html
from .paths import project_url, resolve_reference
from .scanner import collect_modules
from .tokenizer import tokenize
from .tokens import TokenKind

if TYPE_CHECKING:
    from .scanner import ImportExtractor

HEAD_COMMENT = (
    "<!-- [turbooptimize] Add modulepreload to improve unbundled load performance "
    "(More info: https://developers.google.com/web/updates/2017/12/modulepreload) -->"
)
BODY_COMMENT = "<!-- [turbooptimize] modulepreload fallback for browsers that do not support it yet -->"


def find_module_entries(code: str, html_file: str, root_dir: str) -> set[str]:
    """Files loaded by ``<script type="module" src>`` tags in ``code``."""
    entries = set()
    tokens = tokenize(code)
    for token in tokens:
        if token.kind != TokenKind.TAG_OPEN or token.value != "script":
            continue
        attrs = read_tag_attributes(tokens)
        src = attrs.get("src")
        if not src or (attrs.get("type") or "").lower() != "module":
            continue
        resolved = resolve_reference(src, html_file, root_dir)
        if resolved is not None:
            entries.add(resolved)
    return entries


def render_preload(urls: list[str]) -> tuple[str, str]:
    head = "\n".join([HEAD_COMMENT, *(f'<link rel="modulepreload" href="{url}" />' for url in urls)])
    body = "\n".join([BODY_COMMENT, *(f'<script type="module" src="{url}"></script>' for url in urls)])
    return head, body


def preload_js(
    code: str,
    root_dir: str,
    html_file: str,
    preload_css: bool = False,
    extract_imports: ImportExtractor = extract_static_imports,
) -> str:
    """Return ``code`` with modulepreload hints for every transitive module import.

    Modules the document already loads directly are not preloaded again, so
    running this on its own output changes nothing.
    """
    original_entries = find_module_entries(code, html_file, root_dir)
    all_modules = collect_modules(original_entries, root_dir, extract_imports)

    resolved = all_modules - original_entries
    if preload_css:
        # Their CSS ships in the combined stylesheet instead.
        resolved = {module for module in resolved if not is_css_proxy(module)}
    if not resolved:
        return code

    urls = sorted(project_url(module, root_dir) for module in resolved)
    head, body = render_preload(urls)
    return inject_html(code, head_end=head, body_end=body)
