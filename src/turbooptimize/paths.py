"""Path helpers shared by the scanner, the import extractor and the manifest."""

from __future__ import annotations

import os
import re

_REMOTE_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)")
_SUFFIX_PATTERN = re.compile(r"[?#].*$", re.S)


def is_remote(reference: str) -> bool:
    """True for URLs with a scheme (``https:``, ``data:``) or protocol-relative ones."""
    return bool(_REMOTE_PATTERN.match(reference))


def resolve_reference(reference: str, referrer: str, root_dir: str) -> str | None:
    """Resolve an ``href``/``src``/import specifier to a file path.

    Rooted references (``/x``) resolve against ``root_dir``, everything else
    against the directory of ``referrer``. Remote and empty references have
    no local file and return ``None``.
    """
    reference = _SUFFIX_PATTERN.sub("", reference.strip())
    if not reference or is_remote(reference):
        return None
    if reference.startswith("/"):
        return os.path.normpath(os.path.join(root_dir, reference.lstrip("/")))
    return os.path.normpath(os.path.join(os.path.dirname(referrer), reference))


def project_url(path: str, root_dir: str) -> str:
    """``/``-prefixed POSIX URL of ``path`` relative to ``root_dir``."""
    relative = os.path.relpath(path, root_dir).replace(os.sep, "/")
    return "/" + relative.lstrip("/")
