"""Minifier back ends.

CSS goes through rcssmin, JS through rjsmin and HTML through htmlmin. None
of them rewrite syntax, so their output is valid for whatever target the
build step compiled for; the configured target is only validated here so
that a typo fails the run up front instead of silently doing nothing.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import htmlmin
import rcssmin
import rjsmin

from .errors import SetupError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

_TARGET_PATTERN = re.compile(
    r"^(?:es(?:next|5|6|20\d\d)|(?:chrome|edge|firefox|ios|node|opera|safari)\d+(?:\.\d+)*)$"
)


def validate_target(target: str | None) -> tuple[str, ...]:
    """Split an esbuild-style target list (``es2017,chrome58``) and check each entry."""
    if not target:
        return ()
    entries = tuple(part.strip().lower() for part in target.split(",") if part.strip())
    for entry in entries:
        if not _TARGET_PATTERN.match(entry):
            raise SetupError(f"unknown JS target {entry!r}")
    return entries


class Minifier:
    """Minifiers for one optimize run.

    The orchestrator starts it before the first task and closes it on every
    exit path; tasks only ever see a started instance.
    """

    def __init__(self, target: str | None = None) -> None:
        self.target = target
        self.targets: tuple[str, ...] = ()
        self.running = False

    def start(self) -> Minifier:
        self.targets = validate_target(self.target)
        self.running = True
        logger.debug("Minifier started (target: %s)", ",".join(self.targets) or "default")
        return self

    def close(self) -> None:
        self.running = False

    def __enter__(self) -> Minifier:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _ensure_running(self) -> None:
        if not self.running:
            raise SetupError("minifier used outside of an optimize run")

    def css(self, code: str) -> str:
        self._ensure_running()
        return rcssmin.cssmin(code)

    def js(self, code: str) -> str:
        self._ensure_running()
        return rjsmin.jsmin(code)

    def html(self, code: str) -> str:
        self._ensure_running()
        return htmlmin.minify(code, remove_comments=True, remove_empty_space=True, keep_pre=True)
