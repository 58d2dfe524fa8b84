from __future__ import annotations

import os
import unittest

from turbooptimize.preload import BODY_COMMENT, HEAD_COMMENT, find_module_entries, preload_js, render_preload

ROOT = os.path.join(os.sep, "site")
INDEX = os.path.join(ROOT, "index.html")

PAGE = """\
<html>
  <head>
    <script type="module" src="/app.js"></script>
  </head>
  <body>
    <main></main>
  </body>
</html>
"""


def site(*parts: str) -> str:
    return os.path.join(ROOT, *parts)


def extractor(graph: dict[str, list[str]]):
    def extract(path: str, root_dir: str) -> list[str]:
        return graph.get(path, [])

    return extract


class TestFindModuleEntries(unittest.TestCase):
    def test_requires_type_module_and_src_on_the_same_tag(self) -> None:
        code = (
            '<script src="/classic.js"></script>\n'
            '<script type="module">inline()</script>\n'
            "<script src=/b.js type=module></script>\n"
            "<script TYPE='MODULE' src='./c.js'></script>\n"
            '<script type="module" src="https://cdn.example.com/x.js"></script>\n'
        )
        assert find_module_entries(code, INDEX, ROOT) == {site("b.js"), site("c.js")}

    def test_relative_src_resolves_against_the_document(self) -> None:
        page = site("pages", "a.html")
        code = '<script type="module" src="main.js"></script>'
        assert find_module_entries(code, page, ROOT) == {site("pages", "main.js")}


class TestPreloadJs(unittest.TestCase):
    def test_preloads_transitive_imports_only(self) -> None:
        graph = {site("app.js"): [site("util.js")]}
        result = preload_js(PAGE, ROOT, INDEX, extract_imports=extractor(graph))
        assert result.count('rel="modulepreload"') == 1
        assert '<link rel="modulepreload" href="/util.js" />' in result
        assert result.count('<script type="module" src="/util.js"></script>') == 1
        assert 'href="/app.js"' not in result
        assert result.count('src="/app.js"') == 1
        assert result.index(HEAD_COMMENT) < result.index("</head>")
        assert result.index("</head>") < result.index(BODY_COMMENT) < result.index("</body>")

    def test_exact_output(self) -> None:
        graph = {site("app.js"): [site("util.js")]}
        result = preload_js(PAGE, ROOT, INDEX, extract_imports=extractor(graph))
        assert result == (
            "<html>\n"
            "  <head>\n"
            '    <script type="module" src="/app.js"></script>\n'
            f"    {HEAD_COMMENT}\n"
            '    <link rel="modulepreload" href="/util.js" />\n'
            "  </head>\n"
            "  <body>\n"
            "    <main></main>\n"
            f"    {BODY_COMMENT}\n"
            '    <script type="module" src="/util.js"></script>\n'
            "  </body>\n"
            "</html>\n"
        )

    def test_is_idempotent(self) -> None:
        graph = {site("app.js"): [site("util.js"), site("lib", "dep.js")], site("util.js"): [site("app.js")]}
        extract = extractor(graph)
        once = preload_js(PAGE, ROOT, INDEX, extract_imports=extract)
        assert once != PAGE
        assert preload_js(once, ROOT, INDEX, extract_imports=extract) == once

    def test_nothing_to_preload_leaves_document_unchanged(self) -> None:
        assert preload_js(PAGE, ROOT, INDEX, extract_imports=extractor({})) == PAGE

    def test_classic_scripts_are_not_entries(self) -> None:
        code = PAGE.replace(' type="module"', "")
        graph = {site("app.js"): [site("util.js")]}
        assert preload_js(code, ROOT, INDEX, extract_imports=extractor(graph)) == code

    def test_modules_are_sorted_by_url(self) -> None:
        graph = {site("app.js"): [site("z.js"), site("a.js"), site("m", "b.js")]}
        result = preload_js(PAGE, ROOT, INDEX, extract_imports=extractor(graph))
        positions = [result.index(f'href="{url}"') for url in ("/a.js", "/m/b.js", "/z.js")]
        assert positions == sorted(positions)

    def test_css_proxies_are_skipped_when_css_is_preloaded(self) -> None:
        graph = {site("app.js"): [site("util.js"), site("global.css.proxy.js")]}
        extract = extractor(graph)
        with_css = preload_js(PAGE, ROOT, INDEX, preload_css=True, extract_imports=extract)
        assert "global.css.proxy.js" not in with_css
        assert 'href="/util.js"' in with_css
        without_css = preload_js(PAGE, ROOT, INDEX, preload_css=False, extract_imports=extract)
        assert 'href="/global.css.proxy.js"' in without_css

    def test_only_proxies_left_means_no_change(self) -> None:
        graph = {site("app.js"): [site("global.css.proxy.js")]}
        assert preload_js(PAGE, ROOT, INDEX, preload_css=True, extract_imports=extractor(graph)) == PAGE


class TestRenderPreload(unittest.TestCase):
    def test_one_line_per_module(self) -> None:
        head, body = render_preload(["/a.js", "/b.js"])
        assert head.splitlines() == [
            HEAD_COMMENT,
            '<link rel="modulepreload" href="/a.js" />',
            '<link rel="modulepreload" href="/b.js" />',
        ]
        assert body.splitlines()[1:] == [
            '<script type="module" src="/a.js"></script>',
            '<script type="module" src="/b.js"></script>',
        ]
