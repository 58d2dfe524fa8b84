from __future__ import annotations

import unittest

from turbooptimize.inject import inject_html, insert

INDENTED = """\
<html>
  <head>
    <title>x</title>
  </head>
  <body>
    <p>hi</p>
  </body>
</html>
"""


class TestInjectHtml(unittest.TestCase):
    def test_insert(self) -> None:
        assert insert("abef", "cd", 2) == "abcdef"

    def test_head_insertion_on_one_line(self) -> None:
        doc = "<html><head></head></html>"
        result = inject_html(doc, head_end="<X/>")
        assert result == "<html><head>\t<X/>\n</head></html>"
        assert result.index("<X/>") < result.index("</head>")
        # Everything outside the insertion is untouched.
        assert result.replace("\t<X/>\n", "") == doc

    def test_follows_space_indentation(self) -> None:
        result = inject_html(INDENTED, head_end="<X/>", body_end="<Y/>")
        assert result == (
            "<html>\n"
            "  <head>\n"
            "    <title>x</title>\n"
            "    <X/>\n"
            "  </head>\n"
            "  <body>\n"
            "    <p>hi</p>\n"
            "    <Y/>\n"
            "  </body>\n"
            "</html>\n"
        )

    def test_follows_tab_indentation(self) -> None:
        assert inject_html("<head>\n\t</head>", head_end="<X/>") == "<head>\n\t\t<X/>\n\t</head>"

    def test_multi_line_fragment(self) -> None:
        result = inject_html(INDENTED, head_end="<A/>\n<B/>")
        assert "    <title>x</title>\n    <A/>\n    <B/>\n  </head>\n" in result

    def test_closing_tag_at_start_of_line(self) -> None:
        doc = "<head>\n    <meta>\n</head>"
        assert inject_html(doc, head_end="<X/>") == "<head>\n    <meta>\n      <X/>\n</head>"

    def test_uppercase_closing_tags_match(self) -> None:
        result = inject_html("<HEAD></HEAD><BODY></BODY>", head_end="<X/>", body_end="<Y/>")
        assert result == "<HEAD>\t<X/>\n</HEAD><BODY>\t<Y/>\n</BODY>"

    def test_inserted_lines_follow_crlf_line_endings(self) -> None:
        doc = INDENTED.replace("\n", "\r\n")
        result = inject_html(doc, head_end="<A/>\n<B/>")
        assert "    <title>x</title>\r\n    <A/>\r\n    <B/>\r\n  </head>\r\n" in result
        assert "\n" not in result.replace("\r\n", "")

    def test_later_insertions_account_for_earlier_ones(self) -> None:
        doc = "<head></head><body><p>a</p></body>"
        result = inject_html(doc, head_end="<link rel=x>" * 10, body_end="<script></script>")
        assert result.endswith("<p>a</p>\t<script></script>\n</body>")

    def test_closing_tags_in_comments_are_ignored(self) -> None:
        doc = "<!-- </head> --><head></head>"
        assert inject_html(doc, head_end="<X/>") == "<!-- </head> --><head>\t<X/>\n</head>"

    def test_without_targets_document_is_unchanged(self) -> None:
        doc = "<p>no head or body</p>"
        assert inject_html(doc, head_end="<X/>", body_end="<Y/>") == doc
        assert inject_html(INDENTED) == INDENTED
        assert inject_html(INDENTED, head_end="") == INDENTED
