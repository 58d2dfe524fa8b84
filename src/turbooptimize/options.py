from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Option names as they appear in JS-side build configs.
_CAMEL_CASE_ALIASES = {
    "minifyJS": "minify_js",
    "minifyHTML": "minify_html",
    "minifyCSS": "minify_css",
    "preloadCSS": "preload_css",
    "preloadModules": "preload_modules",
    "combinedCSSName": "combined_css_name",
    "metaDir": "meta_dir",
}


@dataclass(frozen=True, slots=True)
class OptimizeOptions:
    minify_js: bool = True
    minify_html: bool = True
    minify_css: bool = True
    # Link one combined stylesheet built from JS-imported CSS, and keep
    # CSS proxy modules out of preloading and minification.
    preload_css: bool = True
    preload_modules: bool = False
    combined_css_name: str = "/imported-styles.css"
    exclude: tuple[str, ...] = ()
    # Passed through to the JS minifier.
    target: str | None = None
    # Build metadata directory; never optimized, holds the manifest.
    meta_dir: str = "__meta__"

    def __post_init__(self) -> None:
        if isinstance(self.exclude, str):
            object.__setattr__(self, "exclude", (self.exclude,))
        elif not isinstance(self.exclude, tuple):
            object.__setattr__(self, "exclude", tuple(self.exclude))
        if not self.combined_css_name.startswith("/"):
            object.__setattr__(self, "combined_css_name", "/" + self.combined_css_name)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> OptimizeOptions:
        """Build options from a config mapping; camelCase keys are accepted too."""
        known = {field.name: field for field in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_CASE_ALIASES.get(key, key)
            field = known.get(name)
            if field is None:
                raise ConfigError(f"unknown option {key!r}")
            if field.type == "bool" and not isinstance(value, bool):
                raise ConfigError(f"option {key!r} must be true or false, got {value!r}")
            if field.type == "str" and not isinstance(value, str):
                raise ConfigError(f"option {key!r} must be a string, got {value!r}")
            if field.type == "str | None" and not (value is None or isinstance(value, str)):
                raise ConfigError(f"option {key!r} must be a string or null, got {value!r}")
            if name == "exclude" and not (
                isinstance(value, str)
                or (isinstance(value, (list, tuple)) and all(isinstance(glob, str) for glob in value))
            ):
                raise ConfigError(f"option {key!r} must be a list of globs")
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **changes: Any) -> OptimizeOptions:
        return dataclasses.replace(self, **changes)


def load_options(path: str) -> OptimizeOptions:
    """Read options from a JSON file holding one object."""
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a JSON object")
    return OptimizeOptions.from_mapping(data)
