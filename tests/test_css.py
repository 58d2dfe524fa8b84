from __future__ import annotations

import os
import tempfile
import unittest
from types import MappingProxyType

from turbooptimize.css import build_import_css, css_proxy_source, is_css_proxy, transform_css_proxy
from turbooptimize.scanner import DependencySet


def write(path: str, content: str) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(content)
    return path


class TestProxyNames(unittest.TestCase):
    def test_is_css_proxy(self) -> None:
        assert is_css_proxy("/a/global.css.proxy.js")
        assert is_css_proxy("/a/x.module.css.proxy.js")
        assert not is_css_proxy("/a/app.js")
        assert not is_css_proxy("/a/global.css")

    def test_css_proxy_source(self) -> None:
        assert css_proxy_source("/a/global.css.proxy.js") == "/a/global.css"
        assert css_proxy_source("/a/x.module.css.proxy.js") is None
        assert css_proxy_source("/a/app.js") is None


class TestTransformCssProxy(unittest.TestCase):
    def test_removes_side_effect_imports_of_plain_proxies(self) -> None:
        code = (
            'import "./global.css.proxy.js";\n'
            "import './other.css.proxy.js'\n"
            'import styleURL from "./global-2.css.proxy.js";\n'
            'import {one, two} from "./scoped.module.css.proxy.js";\n'
            "import './side.module.css.proxy.js';\n"
            'import "./util.js";\n'
            "console.log(styleURL, one, two);\n"
        )
        assert transform_css_proxy(code) == (
            'import styleURL from "./global-2.css.proxy.js";\n'
            'import {one, two} from "./scoped.module.css.proxy.js";\n'
            "import './side.module.css.proxy.js';\n"
            'import "./util.js";\n'
            "console.log(styleURL, one, two);\n"
        )

    def test_code_without_proxies_is_unchanged(self) -> None:
        code = 'import "./util.js";\nexport default 1;\n'
        assert transform_css_proxy(code) == code

    def test_only_combined_stylesheets_are_dropped(self) -> None:
        root = os.path.join(os.sep, "site")
        code = 'import "./global.css.proxy.js";\nimport "../lazy.css.proxy.js";\nrun();\n'
        combined = {os.path.join(root, "js", "global.css")}
        result = transform_css_proxy(code, combined, os.path.join(root, "js", "app.js"), root)
        assert result == 'import "../lazy.css.proxy.js";\nrun();\n'
        assert transform_css_proxy(code, set(), os.path.join(root, "js", "app.js"), root) == code


class TestBuildImportCss(unittest.TestCase):
    def test_concatenates_css_behind_plain_proxies(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            write(os.path.join(root, "b.css"), "b{}")
            write(os.path.join(root, "a.css"), "a{}")
            write(os.path.join(root, "x.module.css"), ".x{}")
            first = DependencySet(
                entry={os.path.join(root, "app.js")},
                js={
                    os.path.join(root, "app.js"),
                    os.path.join(root, "b.css.proxy.js"),
                    os.path.join(root, "x.module.css.proxy.js"),
                },
            )
            second = DependencySet(
                js={os.path.join(root, "a.css.proxy.js"), os.path.join(root, "b.css.proxy.js")},
            )
            manifest = MappingProxyType(
                {os.path.join(root, "index.html"): first, os.path.join(root, "other.html"): second}
            )
            assert build_import_css(manifest) == "b{}\na{}"
            assert build_import_css(manifest, str.upper) == "B{}\nA{}"

    def test_missing_sources_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            deps = DependencySet(js={os.path.join(root, "gone.css.proxy.js")})
            assert build_import_css({os.path.join(root, "index.html"): deps}) == ""

    def test_empty_manifest(self) -> None:
        calls = []
        assert build_import_css({}, calls.append) == ""
        assert calls == []
